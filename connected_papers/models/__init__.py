"""Data models and wire schemas.

- GraphResponseStatus: Closed status taxonomy plus the terminal classifier
- PollRequest / PollOutcome: One poll sequence's input and its emitted values
- decode_*: Response decoders for the three API endpoints
"""

from connected_papers.models.responses import (
    DecodeError,
    GraphSnapshot,
    InvalidRequestError,
    PollOutcome,
    PollRequest,
    UnexpectedResponseError,
    decode_free_access_papers,
    decode_graph_response,
    decode_remaining_usages,
)
from connected_papers.models.status import GraphResponseStatus, is_terminal

__all__ = [
    "DecodeError",
    "GraphResponseStatus",
    "GraphSnapshot",
    "InvalidRequestError",
    "PollOutcome",
    "PollRequest",
    "UnexpectedResponseError",
    "decode_free_access_papers",
    "decode_graph_response",
    "decode_remaining_usages",
    "is_terminal",
]
