"""Shared pytest fixtures for the Connected Papers client test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from connected_papers.api.transport import TransportResponse
from connected_papers.core.config import ClientConfig

DEEPFRUITS_PAPER_ID = "9397e7acd062245d37350f5c05faf56e9cfae0d6"

_MISSING = object()


# ---------------------------------------------------------------------------
# Scripted transport
# ---------------------------------------------------------------------------


class FakeTransport:
    """Transport double that replays a script of responses and errors.

    Each ``get`` pops the next item: a ``TransportResponse`` is returned,
    an exception is raised.  Requested paths are recorded in ``paths``.
    """

    def __init__(self, script: list[TransportResponse | BaseException]) -> None:
        self._script = list(script)
        self.paths: list[str] = []

    async def get(self, path: str) -> TransportResponse:
        self.paths.append(path)
        if not self._script:
            msg = f"Unexpected request: {path}"
            raise AssertionError(msg)
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def calls(self) -> int:
        return len(self.paths)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def paper_id() -> str:
    """A real paper id used by the upstream examples."""
    return DEEPFRUITS_PAPER_ID


@pytest.fixture()
def config() -> ClientConfig:
    """Client configuration pointing at a test host."""
    return ClientConfig(base_url="https://cp.test", api_key="test-key")


@pytest.fixture()
def sample_graph() -> dict[str, Any]:
    """Minimal opaque graph payload."""
    return {
        "start_id": DEEPFRUITS_PAPER_ID,
        "nodes": {DEEPFRUITS_PAPER_ID: {"title": "DeepFruits"}},
        "edges": [[DEEPFRUITS_PAPER_ID, "abc", 0.5]],
    }


@pytest.fixture()
def graph_response() -> Callable[..., TransportResponse]:
    """Factory for graph endpoint responses.

    ``graph_response("IN_PROGRESS", progress=0.4)`` builds a 200 response
    whose body carries that status.  Pass ``status=None`` to omit the field.
    """

    def _make(
        status: str | None = "FRESH_GRAPH",
        *,
        graph: Any = None,
        progress: Any = None,
        http_status: int = 200,
        extra: Any = _MISSING,
    ) -> TransportResponse:
        payload: dict[str, Any] = {"graph_json": graph, "progress": progress}
        if status is not None:
            payload["status"] = status
        if extra is not _MISSING:
            payload.update(extra)
        return TransportResponse(
            status_code=http_status,
            body=json.dumps(payload).encode(),
            path="/papers-api/graph",
        )

    return _make


@pytest.fixture()
def fake_transport() -> Callable[..., FakeTransport]:
    """Factory building a ``FakeTransport`` from positional script items."""

    def _make(*script: TransportResponse | BaseException) -> FakeTransport:
        return FakeTransport(list(script))

    return _make


@pytest.fixture()
def recorded_sleep() -> AsyncMock:
    """Awaitable sleep stand-in that records requested delays."""
    return AsyncMock(return_value=None)
