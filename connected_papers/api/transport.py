"""Authenticated HTTP transport.

Performs exactly one GET per call against the configured service address
and hands back the status code and raw body.  It does not retry and does
not look at application-level status values; that is the poll engine's
job.

``httpx.AsyncClient`` is created lazily on first use and shared by every
request made through the same transport.  Tests inject an
``httpx.MockTransport`` via ``http_transport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from connected_papers.core.constants import API_KEY_HEADER, DEFAULT_REQUEST_TIMEOUT_SECONDS
from connected_papers.core.exceptions import TransientError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TransportError(TransientError):
    """Connection failure, timeout or unreadable response."""

    default_stage = "transport"
    default_code = "TRANSPORT_FAILED"


class BadHttpStatusError(TransientError):
    """The service answered with a non-2xx status.

    Attributes:
        status_code: HTTP status code received.
        path: Request path.
    """

    default_stage = "transport"
    default_code = "BAD_HTTP_STATUS"

    def __init__(self, status_code: int, path: str, **kwargs: object) -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(f"Bad response: HTTP {status_code} for {path}", **kwargs)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status code and raw body of one GET."""

    status_code: int
    body: bytes
    path: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def raise_for_status(self, *, paper_id: str = "") -> None:
        """Raise ``BadHttpStatusError`` unless the status is 2xx."""
        if not self.is_success:
            raise BadHttpStatusError(self.status_code, self.path, paper_id=paper_id)


class GraphTransport(Protocol):
    """Anything that can perform one authenticated GET."""

    async def get(self, path: str) -> TransportResponse: ...


class HttpTransport:
    """``httpx``-backed transport.

    Example usage::

        transport = HttpTransport("https://api.connectedpapers.com", "my-key")
        response = await transport.get("/papers-api/remaining-usages")
        response.raise_for_status()
        await transport.aclose()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._http_transport = http_transport
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy init)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._http_transport,
            )
        return self._client

    async def get(self, path: str) -> TransportResponse:
        """Perform one authenticated GET for *path*.

        Raises:
            TransportError: On connection failure, timeout, or an
                undecodable response stream.
        """
        url = f"{self._base_url}{path}"
        try:
            response = await self._get_client().get(url, headers={API_KEY_HEADER: self._api_key})
        except httpx.RequestError as exc:
            msg = f"GET {path} failed: {exc.__class__.__name__}: {exc}"
            raise TransportError(msg) from exc

        logger.debug(
            "GET %s | status=%d | bytes=%d",
            path,
            response.status_code,
            len(response.content),
        )
        return TransportResponse(
            status_code=response.status_code,
            body=response.content,
            path=path,
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
