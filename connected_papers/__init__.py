"""Connected Papers API client.

Async client for the Connected Papers graph service: requests a
"connected papers" graph for a paper, polls until the remote computation
settles, and returns the best-known graph snapshot.
"""

from connected_papers.api.client import ConnectedPapersClient
from connected_papers.core.config import ClientConfig
from connected_papers.core.exceptions import ConnectedPapersError
from connected_papers.models.responses import PollOutcome, PollRequest
from connected_papers.models.status import GraphResponseStatus

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ConnectedPapersClient",
    "ConnectedPapersError",
    "GraphResponseStatus",
    "PollOutcome",
    "PollRequest",
]
