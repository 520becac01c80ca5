from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RunState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    STEP_SUCCEEDED = "step_succeeded"
    STEP_FAILED_FATAL = "step_failed_fatal"
    STEP_FAILED_NON_FATAL = "step_failed_non_fatal"
    ABORTED = "aborted"
    COMPLETED = "completed"


TERMINAL_STATES: frozenset[RunState] = frozenset({RunState.ABORTED, RunState.COMPLETED})


ALLOWED_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.PENDING: {RunState.RUNNING},
    RunState.RUNNING: {
        RunState.STEP_SUCCEEDED,
        RunState.STEP_FAILED_FATAL,
        RunState.STEP_FAILED_NON_FATAL,
    },
    RunState.STEP_SUCCEEDED: {RunState.RUNNING, RunState.COMPLETED},
    RunState.STEP_FAILED_NON_FATAL: {RunState.RUNNING, RunState.COMPLETED},
    RunState.STEP_FAILED_FATAL: {RunState.ABORTED},
    RunState.ABORTED: set(),
    RunState.COMPLETED: set(),
}


class IllegalTransitionError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class RunSnapshot:
    """Where a single workflow run currently is.

    Lives only for the duration of one invocation; never persisted.
    """

    state: RunState = RunState.PENDING
    step_index: int | None = None

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES


def transition(
    *, current: RunSnapshot, to: RunState, step_index: int | None = None
) -> RunSnapshot:
    allowed = ALLOWED_TRANSITIONS.get(current.state, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.state.value} -> {to.value}")
    index = current.step_index if step_index is None else step_index
    return RunSnapshot(state=to, step_index=index)
