"""Tests for the unified exception taxonomy.

Validates:
- ConnectedPapersError base attributes and ``to_error_dict()`` keys
- Category classification (validation, transient, permanent, contract)
- Every client exception is a ConnectedPapersError with the expected
  code, stage and retry semantics
"""

from __future__ import annotations

from typing import ClassVar

from connected_papers.api.transport import BadHttpStatusError, TransportError
from connected_papers.core.config import ConfigValidationError
from connected_papers.core.exceptions import (
    ConnectedPapersError,
    ContractError,
    PermanentError,
    TransientError,
    ValidationError,
)
from connected_papers.models.responses import (
    DecodeError,
    InvalidRequestError,
    UnexpectedResponseError,
)
from connected_papers.polling.aggregator import EmptyPollSequenceError
from connected_papers.polling.engine import RetriesExhaustedError


class TestConnectedPapersErrorBase:
    """ConnectedPapersError base class behavior."""

    def test_default_attributes(self) -> None:
        err = ConnectedPapersError("boom")
        assert err.message == "boom"
        assert err.stage == ""
        assert err.code == ""
        assert err.retryable is False
        assert err.paper_id == ""

    def test_custom_attributes(self) -> None:
        err = ConnectedPapersError(
            "fail",
            stage="transport",
            code="TRANSPORT_FAILED",
            retryable=True,
            paper_id="abc",
        )
        assert err.stage == "transport"
        assert err.code == "TRANSPORT_FAILED"
        assert err.retryable is True
        assert err.paper_id == "abc"

    def test_str_is_message(self) -> None:
        assert str(ConnectedPapersError("human-readable error")) == "human-readable error"

    def test_to_error_dict_keys(self) -> None:
        err = ConnectedPapersError("x", stage="s", code="C", retryable=True, paper_id="p")
        assert err.to_error_dict() == {
            "category": "transient",
            "code": "C",
            "stage": "s",
            "message": "x",
            "retryable": True,
            "paper_id": "p",
        }

    def test_base_category_follows_retryable(self) -> None:
        assert ConnectedPapersError("x", retryable=True).category == "transient"
        assert ConnectedPapersError("x").category == "permanent"


class TestCategoryBases:
    """Category base classes set retryable defaults."""

    def test_validation(self) -> None:
        err = ValidationError("bad")
        assert err.category == "validation"
        assert err.retryable is False

    def test_transient(self) -> None:
        err = TransientError("flaky")
        assert err.category == "transient"
        assert err.retryable is True

    def test_permanent(self) -> None:
        err = PermanentError("done")
        assert err.category == "permanent"
        assert err.retryable is False

    def test_contract(self) -> None:
        err = ContractError("drift")
        assert err.category == "contract"
        assert err.retryable is False

    def test_retryable_override(self) -> None:
        assert TransientError("x", retryable=False).retryable is False


class TestConcreteErrors:
    """Each client exception lands in the right category."""

    CASES: ClassVar[list[tuple[ConnectedPapersError, str, str, bool]]] = [
        (TransportError("down"), "transient", "TRANSPORT_FAILED", True),
        (BadHttpStatusError(503, "/x"), "transient", "BAD_HTTP_STATUS", True),
        (DecodeError("junk"), "transient", "RESPONSE_DECODE_FAILED", True),
        (UnexpectedResponseError("drift"), "contract", "UNEXPECTED_RESPONSE", False),
        (InvalidRequestError("empty"), "validation", "INVALID_REQUEST", False),
        (ConfigValidationError("k", 0, "bad"), "validation", "CONFIG_VALIDATION_FAILED", False),
        (EmptyPollSequenceError("none"), "permanent", "EMPTY_POLL_SEQUENCE", False),
        (
            RetriesExhaustedError("p", attempts=3, last_error=TransportError("down")),
            "permanent",
            "RETRIES_EXHAUSTED",
            False,
        ),
    ]

    def test_all_are_connected_papers_errors(self) -> None:
        for err, _, _, _ in self.CASES:
            assert isinstance(err, ConnectedPapersError), type(err).__name__

    def test_categories_codes_and_retry(self) -> None:
        for err, category, code, retryable in self.CASES:
            name = type(err).__name__
            assert err.category == category, name
            assert err.code == code, name
            assert err.retryable is retryable, name

    def test_bad_http_status_attributes(self) -> None:
        err = BadHttpStatusError(401, "/papers-api/remaining-usages")
        assert err.status_code == 401
        assert err.path == "/papers-api/remaining-usages"
        assert "401" in err.message

    def test_retries_exhausted_keeps_last_error(self) -> None:
        last = DecodeError("junk")
        err = RetriesExhaustedError("paper-1", attempts=3, last_error=last)
        assert err.last_error is last
        assert err.attempts == 3
        assert err.paper_id == "paper-1"
        assert "3 attempts" in err.message


class TestAttachPaperId:
    """attach_paper_id() fills the paper id only when it is missing."""

    def test_fills_empty(self) -> None:
        err = TransportError("down")
        err.attach_paper_id("p-1")
        assert err.paper_id == "p-1"
        assert err.to_error_dict()["paper_id"] == "p-1"

    def test_keeps_existing(self) -> None:
        err = DecodeError("junk", paper_id="p-1")
        err.attach_paper_id("p-2")
        assert err.paper_id == "p-1"
