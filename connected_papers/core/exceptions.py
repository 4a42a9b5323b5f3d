"""Client error hierarchy.

All client errors derive from ``ConnectedPapersError``.  Each concrete
error declares its stage, code and retry default as class attributes;
the poll engine reads ``retryable`` to decide between backing off and
giving up, and the CLI logs ``to_error_dict()``.

Categories:

``ValidationError``
    The caller passed something unusable (empty paper id, bad config).
``TransientError``
    The request may succeed if repeated (connection failure, non-2xx
    status, undecodable body).
``PermanentError``
    The client stopped trying (retry budget spent, nothing emitted).
``ContractError``
    The service answered with JSON the client cannot interpret.

Remote statuses such as ``BAD_ID`` or ``OUT_OF_REQUESTS`` are not errors.
They reach the caller as the ``status`` of the final ``PollOutcome``.
"""

from __future__ import annotations

from typing import ClassVar


class ConnectedPapersError(Exception):
    """Root of the client error hierarchy.

    Attributes:
        message: Human-readable description.
        stage: Client layer that failed (``"transport"``, ``"decode"``,
            ``"poll"``, ...).
        code: Stable machine-readable code.
        retryable: Whether repeating the request may help.  Defaults to
            the class's ``default_retryable``.
        paper_id: Paper being requested, when known.
    """

    default_stage: ClassVar[str] = ""
    default_code: ClassVar[str] = ""
    default_retryable: ClassVar[bool] = False
    #: Fixed category name; ``None`` derives it from ``retryable``.
    category_name: ClassVar[str | None] = None

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
        paper_id: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        self.paper_id = paper_id

    @property
    def category(self) -> str:
        if self.category_name is not None:
            return self.category_name
        return "transient" if self.retryable else "permanent"

    def attach_paper_id(self, paper_id: str) -> None:
        """Record *paper_id* unless the error already names a paper."""
        if not self.paper_id:
            self.paper_id = paper_id

    def to_error_dict(self) -> dict[str, object]:
        """Flat payload for structured logs."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "paper_id": self.paper_id,
        }


class ValidationError(ConnectedPapersError):
    """Unusable caller input or configuration."""

    category_name = "validation"


class TransientError(ConnectedPapersError):
    """A failure worth retrying."""

    category_name = "transient"
    default_retryable = True


class PermanentError(ConnectedPapersError):
    """The client has given up."""

    category_name = "permanent"


class ContractError(ConnectedPapersError):
    """Response JSON the client cannot interpret."""

    category_name = "contract"
