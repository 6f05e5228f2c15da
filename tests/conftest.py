"""Shared test helpers: a scripted stand-in for ToolGateway."""

from __future__ import annotations

from typing import Callable

import pytest

from yt_clipper.core.models import ToolInvocationResult
from yt_clipper.services.gateway import ToolGateway


class FakeGateway(ToolGateway):
    """Records every call and answers from per-tool handlers.

    A handler gets the argument list and returns a ToolInvocationResult,
    a str (success with that stdout) or a bool. Tools without a handler
    behave like a missing binary.
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, list[str]]] = []
        self.handlers: dict[str, Callable[[list[str]], object]] = {}

    def on(self, tool_name: str, handler: Callable[[list[str]], object]) -> FakeGateway:
        self.handlers[tool_name] = handler
        return self

    def calls_to(self, tool_name: str) -> list[list[str]]:
        return [args for name, args in self.calls if name == tool_name]

    async def run(self, tool_name, args):
        args = [str(a) for a in args]
        self.calls.append((tool_name, args))
        handler = self.handlers.get(tool_name)
        if handler is None:
            return ToolInvocationResult(exit_succeeded=False, stderr=f"{tool_name}: not found")
        out = handler(args)
        if isinstance(out, ToolInvocationResult):
            return out
        if isinstance(out, str):
            return ToolInvocationResult(exit_succeeded=True, stdout=out)
        return ToolInvocationResult(exit_succeeded=bool(out))


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
