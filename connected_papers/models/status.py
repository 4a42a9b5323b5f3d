"""Graph response status taxonomy.

The service reports the state of a graph computation as one of a closed
set of upper-snake-case strings.  ``GraphResponseStatus`` maps them to
readable member names and ``is_terminal`` decides whether polling can
stop.
"""

from __future__ import annotations

import enum


class GraphResponseStatus(enum.Enum):
    """Status of a graph request, as reported by the service.

    Values are the wire spellings.

    Values:
        BAD_IDENTIFIER:  Paper id unknown or invalid.
        SERVER_ERROR:    Generic failure (also used for unknown wire values).
        NOT_IN_DATABASE: Paper is not indexed.
        STALE:           A graph exists but is outdated.
        FRESH:           Graph is up to date.
        IN_PROGRESS:     Computation is running.
        QUEUED:          Computation is pending.
        BAD_CREDENTIAL:  API key rejected.
        BAD_REQUEST:     Malformed request.
        QUOTA_EXCEEDED:  Usage limit hit.
    """

    BAD_IDENTIFIER = "BAD_ID"
    SERVER_ERROR = "ERROR"
    NOT_IN_DATABASE = "NOT_IN_DB"
    STALE = "OLD_GRAPH"
    FRESH = "FRESH_GRAPH"
    IN_PROGRESS = "IN_PROGRESS"
    QUEUED = "QUEUED"
    BAD_CREDENTIAL = "BAD_TOKEN"
    BAD_REQUEST = "BAD_REQUEST"
    QUOTA_EXCEEDED = "OUT_OF_REQUESTS"

    @property
    def is_terminal(self) -> bool:
        """Whether polling should stop after this status."""
        return is_terminal(self)


_NON_TERMINAL_STATUSES = frozenset(
    {
        GraphResponseStatus.STALE,
        GraphResponseStatus.IN_PROGRESS,
        GraphResponseStatus.QUEUED,
    }
)


def is_terminal(status: GraphResponseStatus) -> bool:
    """Return ``True`` if no further polling is meaningful after *status*.

    Only ``STALE``, ``IN_PROGRESS`` and ``QUEUED`` keep a poll sequence
    alive; every other status ends it.
    """
    return status not in _NON_TERMINAL_STATUSES
