"""Tests for yt_clipper.utils.http (requests mocked)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from yt_clipper.utils.http import download_file, get_json
from yt_clipper.utils.retry import TransientHTTPError


def _response(status=200, json_data=None, chunks=()):
    response = MagicMock()
    response.status_code = status
    response.url = "https://example.com"
    response.json.return_value = json_data
    response.iter_content.return_value = list(chunks)
    response.__enter__.return_value = response
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status}")
    return response


class TestGetJson:
    @patch("yt_clipper.utils.http.requests.get")
    def test_success(self, mock_get):
        mock_get.return_value = _response(json_data={"title": "t"})
        assert get_json("https://example.com", params={"a": "b"}, timeout=3) == {"title": "t"}
        mock_get.assert_called_once_with("https://example.com", params={"a": "b"}, timeout=3)

    @patch("yt_clipper.utils.retry.time.sleep")
    @patch("yt_clipper.utils.http.requests.get")
    def test_retries_server_errors(self, mock_get, mock_sleep):
        mock_get.side_effect = [_response(status=503), _response(json_data={"ok": True})]
        assert get_json("https://example.com") == {"ok": True}
        assert mock_get.call_count == 2

    @patch("yt_clipper.utils.retry.time.sleep")
    @patch("yt_clipper.utils.http.requests.get")
    def test_gives_up(self, mock_get, mock_sleep):
        mock_get.return_value = _response(status=429)
        with pytest.raises(TransientHTTPError):
            get_json("https://example.com", retries=2)
        assert mock_get.call_count == 3

    @patch("yt_clipper.utils.retry.time.sleep")
    @patch("yt_clipper.utils.http.requests.get")
    def test_not_found_not_retried(self, mock_get, mock_sleep):
        mock_get.return_value = _response(status=404)
        with pytest.raises(requests.HTTPError):
            get_json("https://example.com")
        assert mock_get.call_count == 1

    @patch("yt_clipper.utils.http.requests.get")
    def test_non_object_rejected(self, mock_get):
        mock_get.return_value = _response(json_data=["list"])
        with pytest.raises(ValueError):
            get_json("https://example.com")


class TestDownloadFile:
    @patch("yt_clipper.utils.http.requests.get")
    def test_streams_to_dest(self, mock_get, tmp_path):
        mock_get.return_value = _response(chunks=[b"ab", b"", b"cd"])
        dest = tmp_path / "thumbs" / "x.jpg"

        assert download_file("https://example.com/x.jpg", dest) == dest
        assert dest.read_bytes() == b"abcd"
        assert list(dest.parent.iterdir()) == [dest]

    @patch("yt_clipper.utils.http.requests.get")
    def test_overlapping_downloads_to_same_dest(self, mock_get, tmp_path):
        dest = tmp_path / "yt-dlp"

        def first_body(chunk_size):
            yield b"first-"
            # a second download of the same dest completes mid-stream
            download_file("https://example.com/b", dest)
            yield b"half"

        first = _response()
        first.iter_content.side_effect = first_body
        mock_get.side_effect = [first, _response(chunks=[b"second"])]

        download_file("https://example.com/a", dest)

        assert dest.read_bytes() == b"first-half"
        assert list(tmp_path.iterdir()) == [dest]

    @patch("yt_clipper.utils.http.requests.get")
    def test_failure_leaves_nothing(self, mock_get, tmp_path):
        mock_get.return_value = _response(status=404)
        dest = tmp_path / "x.jpg"

        with pytest.raises(requests.HTTPError):
            download_file("https://example.com/x.jpg", dest)
        assert list(tmp_path.iterdir()) == []
