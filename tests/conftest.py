"""Shared test fixtures for the cmdgate test suite.

Provides common fixtures used across unit tests: spy executors, canned
execution results, controllable clocks and mock upstream transports.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from cmdgate.domain.models import ExecutionResult
from cmdgate.executor.base import CommandExecutor


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Execution Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def ok_result() -> ExecutionResult:
    """A clean exit with some output."""
    return ExecutionResult(stdout="hello\n", stderr="", exit_code=0)


@pytest.fixture
def spy_executor(ok_result: ExecutionResult) -> AsyncMock:
    """A CommandExecutor spy returning ok_result."""
    mock = AsyncMock(spec=CommandExecutor)
    mock.execute.return_value = ok_result
    return mock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Upstream Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def echo_transport() -> httpx.MockTransport:
    """An upstream that echoes method, host, path and query as JSON."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "method": request.method,
                "host": request.url.host,
                "path": request.url.path,
                "query": request.url.query.decode(),
                "body": request.content.decode(),
            },
            headers={"X-Upstream": request.url.host},
        )

    return httpx.MockTransport(handler)


@pytest.fixture
def refusing_transport() -> httpx.MockTransport:
    """An upstream that can never be reached."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)
