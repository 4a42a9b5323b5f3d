"""Graph poll engine — drive one graph request to a settled outcome.

The engine is split in two:

1. ``advance(state, request, result)`` — a pure transition over an
   immutable ``EngineState``.  Given the result of the latest attempt
   (a decoded ``PollOutcome`` or the error it raised) it returns the next
   state, what to emit, and whether to continue, retry, stop or fail.
2. ``GraphPoller.poll(request)`` — an async generator that performs the
   attempts, applies ``advance`` and sleeps between polls.  Each element
   is produced only when the consumer asks for it, so closing the
   generator (or cancelling the consuming task) stops all further
   requests and sleeps.

Transition table:

===========================  ==========  =====  ===================
Attempt result               Action      Emits  Then
===========================  ==========  =====  ===================
retryable, budget left       RETRY       no     error backoff
retryable, budget spent      FAIL        no     raise
terminal status              STOP        yes    end
non-terminal, no looping     STOP        yes    end
non-terminal, looping        CONTINUE    yes    poll interval
===========================  ==========  =====  ===================

Every attempt switches ``fresh_only`` on for the next one: after the first
poll the client only needs confirmation of freshness.
A client error that is not ``retryable`` propagates from the attempt
unchanged and ends the sequence.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from connected_papers.core.constants import graph_path
from connected_papers.core.exceptions import ConnectedPapersError, PermanentError
from connected_papers.models.responses import decode_graph_response

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from connected_papers.api.transport import GraphTransport
    from connected_papers.core.config import ClientConfig
    from connected_papers.models.responses import GraphSnapshot, PollOutcome, PollRequest

    SleepFn = Callable[[float], Awaitable[object]]

logger = logging.getLogger(__name__)


class RetriesExhaustedError(PermanentError):
    """Raised when a poll sequence spends its whole retry budget.

    The last underlying failure is available as ``last_error`` and as
    ``__cause__``.

    Attributes:
        attempts: Requests made before giving up.
        last_error: The failure that exhausted the budget.
    """

    default_stage = "poll"
    default_code = "RETRIES_EXHAUSTED"

    def __init__(
        self,
        paper_id: str,
        *,
        attempts: int,
        last_error: ConnectedPapersError,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Graph poll for {paper_id!r} gave up after {attempts} attempts: {last_error}",
            paper_id=paper_id,
        )


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class StepAction(enum.Enum):
    """What the poller does after a transition."""

    CONTINUE = "continue"
    RETRY = "retry"
    STOP = "stop"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class EngineState:
    """State carried between attempts of one poll sequence.

    Attributes:
        retries_remaining: Failures still tolerated; only failures decrement it.
        fresh_only: ``fresh_only`` flag for the next request.
        last_known_graph: Most recent graph seen in this sequence.
        attempts: Requests made so far.
    """

    retries_remaining: int
    fresh_only: bool
    last_known_graph: GraphSnapshot | None = None
    attempts: int = 0

    @classmethod
    def initial(cls, request: PollRequest, retry_budget: int) -> EngineState:
        return cls(retries_remaining=retry_budget, fresh_only=request.fresh_only)


@dataclass(frozen=True, slots=True)
class Step:
    """Result of one transition."""

    state: EngineState
    action: StepAction
    outcome: PollOutcome | None = None
    error: ConnectedPapersError | None = None


def advance(
    state: EngineState,
    request: PollRequest,
    result: PollOutcome | ConnectedPapersError,
) -> Step:
    """Compute the transition for the latest attempt.

    Args:
        state: State before the attempt.
        request: The poll sequence's request.
        result: Decoded outcome, or the error the attempt raised.

    Returns:
        The next ``Step``.  ``outcome`` is set for ``CONTINUE`` and
        ``STOP``; ``error`` is set for ``RETRY`` and ``FAIL``.
    """
    attempted = replace(state, attempts=state.attempts + 1, fresh_only=True)

    if isinstance(result, ConnectedPapersError):
        remaining = state.retries_remaining - 1
        failed = replace(attempted, retries_remaining=remaining)
        action = StepAction.FAIL if remaining <= 0 else StepAction.RETRY
        return Step(state=failed, action=action, error=result)

    if result.graph is None:
        outcome = replace(result, graph=state.last_known_graph)
    else:
        outcome = result
    succeeded = replace(attempted, last_known_graph=outcome.graph)

    if outcome.is_terminal or not request.loop_until_fresh:
        return Step(state=succeeded, action=StepAction.STOP, outcome=outcome)
    return Step(state=succeeded, action=StepAction.CONTINUE, outcome=outcome)


# ---------------------------------------------------------------------------
# Poller
# ---------------------------------------------------------------------------


class GraphPoller:
    """Runs poll sequences against one transport.

    Holds no per-request state, so one poller can serve any number of
    concurrent sequences.

    Example usage::

        poller = GraphPoller(transport, ClientConfig())
        async for outcome in poller.poll(PollRequest("9397e7ac...")):
            print(outcome.status, outcome.progress)
    """

    def __init__(
        self,
        transport: GraphTransport,
        config: ClientConfig,
        *,
        sleep: SleepFn | None = None,
    ) -> None:
        self._transport = transport
        self._config = config
        self._sleep = sleep or asyncio.sleep

    async def poll(self, request: PollRequest) -> AsyncGenerator[PollOutcome, None]:
        """Yield outcomes for *request* until it settles.

        Yields:
            One ``PollOutcome`` per successful poll; the last one is final.

        Raises:
            RetriesExhaustedError: If the retry budget is spent.
        """
        state = EngineState.initial(request, self._config.retry_budget)

        logger.info(
            "Graph poll started | paper_id=%s | fresh_only=%s | loop_until_fresh=%s",
            request.paper_id,
            request.fresh_only,
            request.loop_until_fresh,
        )

        while True:
            result = await self._attempt(request.paper_id, fresh_only=state.fresh_only)
            step = advance(state, request, result)
            state = step.state

            if step.error is not None:
                if step.action is StepAction.FAIL:
                    logger.error(
                        "Graph poll retries exhausted | paper_id=%s | attempts=%d | error=%s",
                        request.paper_id,
                        state.attempts,
                        step.error,
                    )
                    raise RetriesExhaustedError(
                        request.paper_id,
                        attempts=state.attempts,
                        last_error=step.error,
                    ) from step.error

                logger.warning(
                    "Graph poll error (retries left %d) | paper_id=%s | backoff=%.1fs | error=%s",
                    state.retries_remaining,
                    request.paper_id,
                    self._config.error_backoff_seconds,
                    step.error,
                )
                await self._sleep(self._config.error_backoff_seconds)
                continue

            outcome = step.outcome
            if outcome is not None:
                logger.debug(
                    "Graph poll result | paper_id=%s | status=%s | progress=%s | graph=%s",
                    request.paper_id,
                    outcome.status.value,
                    outcome.progress,
                    outcome.has_graph,
                )
                yield outcome

            if step.action is StepAction.STOP:
                logger.info(
                    "Graph poll finished | paper_id=%s | status=%s | attempts=%d",
                    request.paper_id,
                    outcome.status.value if outcome is not None else "",
                    state.attempts,
                )
                return

            await self._sleep(self._config.poll_interval_seconds)

    async def _attempt(
        self, paper_id: str, *, fresh_only: bool
    ) -> PollOutcome | ConnectedPapersError:
        """One request/decode round-trip.

        Retryable client errors are returned for ``advance`` to count;
        non-retryable ones propagate immediately.
        """
        try:
            response = await self._transport.get(graph_path(paper_id, fresh_only=fresh_only))
            response.raise_for_status(paper_id=paper_id)
            return decode_graph_response(response.body, paper_id=paper_id)
        except ConnectedPapersError as exc:
            exc.attach_paper_id(paper_id)
            if not exc.retryable:
                raise
            return exc
