"""Connected Papers client facade.

``ConnectedPapersClient`` is the public entry point.  It owns one
``HttpTransport`` (and through it one ``httpx.AsyncClient`` pool) and a
``GraphPoller``, and exposes:

- ``iter_graph``        — lazy async sequence of poll outcomes.
- ``get_graph``         — awaitable final outcome.
- ``get_remaining_usages`` / ``get_free_access_papers`` — one GET each,
  no retries.
- ``*_sync`` variants   — blocking wrappers for non-async callers.

Configuration precedence: explicit ``api_key`` / ``base_url`` arguments,
then ``config`` (or ``ClientConfig.from_env()`` when omitted).
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING, Any

from connected_papers.api.transport import HttpTransport
from connected_papers.core.config import ClientConfig
from connected_papers.core.constants import FREE_ACCESS_PAPERS_PATH, REMAINING_USAGES_PATH
from connected_papers.models.responses import (
    PollRequest,
    decode_free_access_papers,
    decode_remaining_usages,
)
from connected_papers.polling.aggregator import collect_final
from connected_papers.polling.engine import GraphPoller

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    import httpx

    from connected_papers.models.responses import PollOutcome

logger = logging.getLogger(__name__)


class ConnectedPapersClient:
    """Async client for the Connected Papers REST API.

    Safe to share between concurrent tasks: each poll sequence keeps its
    own state and the configuration is immutable.

    Example usage::

        async with ConnectedPapersClient() as client:
            outcome = await client.get_graph("9397e7acd062245d37350f5c05faf56e9cfae0d6")
            if outcome.status is GraphResponseStatus.FRESH:
                graph = outcome.graph
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        config: ClientConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: API token (default: ``config.api_key``).
            base_url: Service address (default: ``config.base_url``).
            config: Full configuration (default: ``ClientConfig.from_env()``).
            http_transport: Optional ``httpx`` transport (e.g. ``httpx.MockTransport``).
            sleep: Awaitable sleep used between polls (default: ``asyncio.sleep``).
        """
        config = config or ClientConfig.from_env()
        overrides: dict[str, Any] = {}
        if api_key is not None:
            overrides["api_key"] = api_key
        if base_url is not None:
            overrides["base_url"] = base_url
        if overrides:
            config = dataclasses.replace(config, **overrides)

        self._config = config
        self._http_transport = http_transport
        self._sleep = sleep
        self._transport = HttpTransport(
            config.base_url,
            config.api_key,
            http_transport=http_transport,
        )
        self._poller = GraphPoller(self._transport, config, sleep=sleep)

    @property
    def config(self) -> ClientConfig:
        """Return the client configuration (read-only)."""
        return self._config

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._transport.aclose()

    async def __aenter__(self) -> ConnectedPapersClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    def iter_graph(
        self,
        paper_id: str,
        *,
        fresh_only: bool = False,
        loop_until_fresh: bool = True,
    ) -> AsyncGenerator[PollOutcome, None]:
        """Poll the graph for *paper_id*, yielding every intermediate outcome.

        Nothing is requested until the first element is awaited; leaving
        the ``async for`` early stops polling.

        Raises:
            InvalidRequestError: If *paper_id* is empty.
            RetriesExhaustedError: (while iterating) if the retry budget is spent.
        """
        request = PollRequest(
            paper_id=paper_id,
            fresh_only=fresh_only,
            loop_until_fresh=loop_until_fresh,
        )
        return self._poller.poll(request)

    async def get_graph(
        self,
        paper_id: str,
        *,
        fresh_only: bool = False,
        loop_until_fresh: bool = True,
    ) -> PollOutcome:
        """Poll the graph for *paper_id* and return the final outcome.

        A remote failure status (``BAD_IDENTIFIER``, ``QUOTA_EXCEEDED``, ...)
        is returned as the outcome's ``status``, not raised.

        Raises:
            RetriesExhaustedError: If the retry budget is spent.
        """
        outcomes = self.iter_graph(
            paper_id,
            fresh_only=fresh_only,
            loop_until_fresh=loop_until_fresh,
        )
        return await collect_final(outcomes, paper_id=paper_id)

    # ------------------------------------------------------------------
    # Account endpoints
    # ------------------------------------------------------------------

    async def get_remaining_usages(self) -> int:
        """Return how many graph requests the API key has left.

        Raises:
            TransportError: On connection failure or timeout.
            BadHttpStatusError: On a non-2xx response.
            DecodeError / UnexpectedResponseError: On a malformed body.
        """
        response = await self._transport.get(REMAINING_USAGES_PATH)
        response.raise_for_status()
        remaining = decode_remaining_usages(response.body)
        logger.info("Remaining usages fetched | remaining=%d", remaining)
        return remaining

    async def get_free_access_papers(self) -> list[str]:
        """Return the ids of papers whose graphs do not count against the quota.

        Raises:
            TransportError: On connection failure or timeout.
            BadHttpStatusError: On a non-2xx response.
            DecodeError / UnexpectedResponseError: On a malformed body.
        """
        response = await self._transport.get(FREE_ACCESS_PAPERS_PATH)
        response.raise_for_status()
        papers = decode_free_access_papers(response.body)
        logger.info("Free access papers fetched | count=%d", len(papers))
        return papers

    # ------------------------------------------------------------------
    # Blocking wrappers
    # ------------------------------------------------------------------

    def get_graph_sync(
        self,
        paper_id: str,
        *,
        fresh_only: bool = False,
        loop_until_fresh: bool = True,
    ) -> PollOutcome:
        """Blocking ``get_graph``.  Must not be called from a running event loop."""
        return self._run_sync(
            lambda client: client.get_graph(
                paper_id,
                fresh_only=fresh_only,
                loop_until_fresh=loop_until_fresh,
            )
        )

    def get_remaining_usages_sync(self) -> int:
        """Blocking ``get_remaining_usages``."""
        return self._run_sync(lambda client: client.get_remaining_usages())

    def get_free_access_papers_sync(self) -> list[str]:
        """Blocking ``get_free_access_papers``."""
        return self._run_sync(lambda client: client.get_free_access_papers())

    def _run_sync(self, call: Callable[[ConnectedPapersClient], Awaitable[Any]]) -> Any:
        """Run *call* on a fresh event loop with a short-lived sibling client.

        ``httpx.AsyncClient`` pools are bound to the loop that created them,
        so the sibling shares this client's configuration but not its pool.
        """

        async def _run() -> Any:
            async with ConnectedPapersClient(
                config=self._config,
                http_transport=self._http_transport,
                sleep=self._sleep,
            ) as client:
                return await call(client)

        return asyncio.run(_run())
