"""Blocking aggregator — reduce a poll sequence to its final outcome."""

from __future__ import annotations

from contextlib import aclosing
from typing import TYPE_CHECKING

from connected_papers.core.exceptions import PermanentError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from connected_papers.models.responses import PollOutcome


class EmptyPollSequenceError(PermanentError):
    """Raised when a poll sequence ends without emitting any outcome."""

    default_stage = "poll"
    default_code = "EMPTY_POLL_SEQUENCE"


async def collect_final(
    outcomes: AsyncGenerator[PollOutcome, None],
    *,
    paper_id: str = "",
) -> PollOutcome:
    """Consume *outcomes* to completion and return the last one.

    The generator is always closed, including when the awaiting task is
    cancelled.  Errors raised by the sequence propagate unchanged.

    Raises:
        EmptyPollSequenceError: If the sequence emitted nothing.
    """
    final: PollOutcome | None = None
    async with aclosing(outcomes) as stream:
        async for outcome in stream:
            final = outcome

    if final is None:
        msg = "Poll sequence ended without an outcome"
        raise EmptyPollSequenceError(msg, paper_id=paper_id)
    return final
