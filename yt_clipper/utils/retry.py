"""Exponential backoff retry for HTTP helpers."""

from __future__ import annotations

import functools
import logging
import random
import time
from typing import Callable, Sequence

import requests

logger = logging.getLogger("yt_clipper")


class TransientHTTPError(requests.HTTPError):
    """An HTTP response worth retrying (429 or 5xx)."""


RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    requests.ConnectionError,
    requests.Timeout,
    TransientHTTPError,
)


def retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    multiplier: float = 2.0,
    jitter: float = 0.25,
    retryable: Sequence[type[Exception]] | None = None,
) -> Callable:
    """Retry the decorated function with exponential backoff and jitter.

    ``max_retries`` may be overridden per call with a ``retries=`` keyword,
    which is consumed by the wrapper.
    """
    retryable_tuple = tuple(retryable or RETRYABLE_EXCEPTIONS)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, retries: int | None = None, **kwargs):
            limit = max_retries if retries is None else retries
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except retryable_tuple as exc:
                    if attempt >= limit:
                        logger.error(
                            "Retry exhausted for %s after %d attempts: %s",
                            func.__name__,
                            attempt + 1,
                            exc,
                        )
                        raise
                    delay = _compute_delay(attempt, base_delay, multiplier, jitter)
                    logger.warning(
                        "Retry %d/%d for %s after %.2fs: %s",
                        attempt + 1,
                        limit,
                        func.__name__,
                        delay,
                        exc,
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def _compute_delay(
    attempt: int,
    base_delay: float,
    multiplier: float,
    jitter: float,
) -> float:
    """delay = base_delay * multiplier^attempt * (1 +/- jitter)"""
    delay = base_delay * (multiplier ** attempt)
    jitter_range = delay * jitter
    delay += random.uniform(-jitter_range, jitter_range)
    return max(0.0, delay)


def is_retryable_http_status(status_code: int) -> bool:
    """Check if an HTTP status code is retryable (429 or 5xx)."""
    return status_code == 429 or 500 <= status_code < 600
