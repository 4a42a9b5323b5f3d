"""Graph polling.

- engine: Pure poll-state transition and the lazy ``GraphPoller`` sequence
- aggregator: Drain a poll sequence down to its final outcome
"""

from connected_papers.polling.aggregator import EmptyPollSequenceError, collect_final
from connected_papers.polling.engine import (
    EngineState,
    GraphPoller,
    RetriesExhaustedError,
    Step,
    StepAction,
    advance,
)

__all__ = [
    "EmptyPollSequenceError",
    "EngineState",
    "GraphPoller",
    "RetriesExhaustedError",
    "Step",
    "StepAction",
    "advance",
    "collect_final",
]
