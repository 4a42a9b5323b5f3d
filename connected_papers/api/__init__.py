"""HTTP layer.

- HttpTransport: One authenticated GET per call, no retries
- ConnectedPapersClient: Public facade over the transport and poll engine
"""

from connected_papers.api.client import ConnectedPapersClient
from connected_papers.api.transport import (
    BadHttpStatusError,
    HttpTransport,
    TransportError,
    TransportResponse,
)

__all__ = [
    "BadHttpStatusError",
    "ConnectedPapersClient",
    "HttpTransport",
    "TransportError",
    "TransportResponse",
]
