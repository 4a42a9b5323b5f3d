"""Shared client constants: service address, paths and polling defaults.

Centralises the default service address, environment variable names,
API paths and polling defaults used by the transport, the poll engine
and the configuration layer.
"""

from __future__ import annotations

from urllib.parse import quote

# ---------------------------------------------------------------------------
# Service address and credentials
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL: str = "https://api.connectedpapers.com"
"""Public Connected Papers REST endpoint."""

DEFAULT_API_KEY: str = "TEST_TOKEN"
"""Placeholder token used when no key is configured."""

BASE_URL_ENV: str = "CONNECTED_PAPERS_REST_API"
API_KEY_ENV: str = "CONNECTED_PAPERS_API_KEY"

API_KEY_HEADER: str = "X-Api-Key"

# ---------------------------------------------------------------------------
# API paths
# ---------------------------------------------------------------------------

GRAPH_PATH_TEMPLATE: str = "/papers-api/graph/{fresh_only}/{paper_id}"
REMAINING_USAGES_PATH: str = "/papers-api/remaining-usages"
FREE_ACCESS_PAPERS_PATH: str = "/papers-api/free-access-papers"

# ---------------------------------------------------------------------------
# Polling defaults
# ---------------------------------------------------------------------------

DEFAULT_RETRY_BUDGET: int = 3
"""Transport/decode failures tolerated per poll sequence."""

DEFAULT_POLL_INTERVAL_SECONDS: float = 1.0
"""Wait between routine polls while the graph is still being computed."""

DEFAULT_ERROR_BACKOFF_SECONDS: float = 5.0
"""Wait before retrying after a transport or decode failure."""

DEFAULT_REQUEST_TIMEOUT_SECONDS: float = 60.0


def graph_path(paper_id: str, *, fresh_only: bool) -> str:
    """Build the graph endpoint path for *paper_id*.

    Args:
        paper_id: Opaque paper identifier (URL-quoted here).
        fresh_only: Encoded as ``1``/``0`` in the path.

    Returns:
        e.g. ``"/papers-api/graph/1/9397e7ac..."``.
    """
    return GRAPH_PATH_TEMPLATE.format(
        fresh_only=int(fresh_only),
        paper_id=quote(paper_id, safe=""),
    )
