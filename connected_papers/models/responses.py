"""Request/outcome models and response decoders.

Defines the values exchanged between the client, the poll engine and
the caller:

- ``PollRequest``: What to poll for (paper id plus freshness flags)
- ``PollOutcome``: One decoded graph response, as emitted to the caller
- ``GraphSnapshot``: The opaque graph payload (passed through untouched)

and the pydantic wire schemas used to decode the three API endpoints.

Design notes:
- Unknown or missing ``status`` values are coerced to ``SERVER_ERROR``
  instead of failing the decode, so a status string added by the service
  later does not discard an otherwise valid graph.
- A body that is not a JSON object, or whose ``graph_json`` / ``progress``
  has the wrong type, is a ``DecodeError`` (retryable).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from connected_papers.core.exceptions import ContractError, TransientError, ValidationError
from connected_papers.models.status import GraphResponseStatus, is_terminal

logger = logging.getLogger(__name__)

GraphSnapshot = dict[str, Any]
"""Computed graph as returned by the service; never inspected by the client."""

_WIRE_STATUSES = frozenset(status.value for status in GraphResponseStatus)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InvalidRequestError(ValidationError):
    """Raised when a ``PollRequest`` is built with unusable values."""

    default_stage = "request"
    default_code = "INVALID_REQUEST"


class DecodeError(TransientError):
    """Raised when a response body cannot be decoded.

    Counted against the poll engine's retry budget.
    """

    default_stage = "decode"
    default_code = "RESPONSE_DECODE_FAILED"


class UnexpectedResponseError(ContractError):
    """Raised when a JSON body lacks a field the client needs."""

    default_stage = "decode"
    default_code = "UNEXPECTED_RESPONSE"


# ---------------------------------------------------------------------------
# Request / outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PollRequest:
    """Input of one poll sequence.

    Attributes:
        paper_id: Opaque paper identifier.
        fresh_only: Ask the service for a fresh graph on the first poll.
        loop_until_fresh: Keep polling through non-terminal statuses.
    """

    paper_id: str
    fresh_only: bool = False
    loop_until_fresh: bool = True

    def __post_init__(self) -> None:
        if not self.paper_id:
            msg = "PollRequest.paper_id must not be empty"
            raise InvalidRequestError(msg)


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """One decoded graph response.

    Attributes:
        status: Status reported by the service.
        graph: Graph snapshot, or ``None`` if none is known yet.
        progress: Computation progress in ``[0, 1]`` when reported.
    """

    status: GraphResponseStatus
    graph: GraphSnapshot | None = None
    progress: float | None = None

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def has_graph(self) -> bool:
        return self.graph is not None


# ---------------------------------------------------------------------------
# Wire schemas
# ---------------------------------------------------------------------------


class GraphResponsePayload(BaseModel):
    """Body of ``GET /papers-api/graph/{fresh_only}/{paper_id}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: GraphResponseStatus = GraphResponseStatus.SERVER_ERROR
    graph_json: dict[str, Any] | None = None
    progress: float | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_unknown_status(cls, value: object) -> object:
        if isinstance(value, GraphResponseStatus):
            return value.value
        if isinstance(value, str) and value in _WIRE_STATUSES:
            return value
        logger.warning(
            "Unknown graph status coerced | status=%r | coerced_to=%s",
            value,
            GraphResponseStatus.SERVER_ERROR.value,
        )
        return GraphResponseStatus.SERVER_ERROR.value


class RemainingUsagesPayload(BaseModel):
    """Body of ``GET /papers-api/remaining-usages``."""

    remaining_uses: int = Field(strict=True)


class FreeAccessPapersPayload(BaseModel):
    """Body of ``GET /papers-api/free-access-papers``."""

    papers: list[str]

    @field_validator("papers", mode="before")
    @classmethod
    def _keep_string_ids(cls, value: object) -> object:
        if isinstance(value, list):
            return [paper for paper in value if isinstance(paper, str)]
        return value


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def decode_graph_response(body: bytes | str, *, paper_id: str = "") -> PollOutcome:
    """Decode a graph endpoint body into a ``PollOutcome``.

    Args:
        body: Raw response body.
        paper_id: Paper being polled, attached to any error raised.

    Returns:
        The decoded outcome; ``status`` is ``SERVER_ERROR`` when the wire
        value was missing or unknown.

    Raises:
        DecodeError: If the body is not a JSON object of the expected shape.
    """
    try:
        payload = GraphResponsePayload.model_validate_json(body)
    except PydanticValidationError as exc:
        msg = f"Graph response could not be decoded: {_summarise(exc)}"
        raise DecodeError(msg, paper_id=paper_id) from exc

    return PollOutcome(
        status=payload.status,
        graph=payload.graph_json,
        progress=payload.progress,
    )


def decode_remaining_usages(body: bytes | str) -> int:
    """Extract ``remaining_uses`` from a remaining-usages body.

    Raises:
        DecodeError: If the body is not JSON.
        UnexpectedResponseError: If ``remaining_uses`` is missing or not an integer.
    """
    return _decode_simple(RemainingUsagesPayload, body, "remaining_uses").remaining_uses


def decode_free_access_papers(body: bytes | str) -> list[str]:
    """Extract the paper ids from a free-access-papers body.

    Non-string entries in ``papers`` are dropped.

    Raises:
        DecodeError: If the body is not JSON.
        UnexpectedResponseError: If ``papers`` is missing or not an array.
    """
    return _decode_simple(FreeAccessPapersPayload, body, "papers").papers


def _decode_simple(model: type[_ModelT], body: bytes | str, field_name: str) -> _ModelT:
    try:
        return model.model_validate_json(body)
    except PydanticValidationError as exc:
        if _is_json_syntax_error(exc):
            msg = f"Response body is not valid JSON: {_summarise(exc)}"
            raise DecodeError(msg) from exc
        msg = f"The {field_name!r} field is missing or has the wrong type: {_summarise(exc)}"
        raise UnexpectedResponseError(msg) from exc


def _is_json_syntax_error(exc: PydanticValidationError) -> bool:
    return any(error["type"] == "json_invalid" for error in exc.errors())


def _summarise(exc: PydanticValidationError) -> str:
    """First validation error as ``loc: msg``."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<body>"
    return f"{location}: {first.get('msg', '')}"
