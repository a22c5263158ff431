"""Lifecycle states of a training session."""

import logging
from enum import Enum
from typing import Callable, List

logger = logging.getLogger(__name__)


class TrainingState(Enum):
    """States of a training session, valued by their status text."""
    IDLE = "Ready to start training"
    TRAINING = "Training in progress"
    PAUSED = "Training paused"
    COMPLETED = "Training completed"
    ERROR = "Error occurred during training"


StateListener = Callable[[TrainingState, TrainingState], None]

# Target states reachable from each state
_ALLOWED = {
    TrainingState.IDLE: (TrainingState.TRAINING,),
    TrainingState.TRAINING: (TrainingState.PAUSED, TrainingState.COMPLETED,
                             TrainingState.ERROR, TrainingState.IDLE),
    TrainingState.PAUSED: (TrainingState.TRAINING, TrainingState.IDLE),
    TrainingState.COMPLETED: (TrainingState.TRAINING, TrainingState.IDLE),
    TrainingState.ERROR: (TrainingState.IDLE,),
}


class TrainingStateMachine:
    """
    Tracks where a training session is in its lifecycle.

    Requests that the lifecycle does not allow are refused with False rather
    than raised, so the session can decide whether a refusal is an error.
    Listeners are told about every accepted change as (previous, current).
    """

    def __init__(self):
        self.current_state = TrainingState.IDLE
        self._listeners: List[StateListener] = []

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def can_transition(self, to_state: TrainingState) -> bool:
        return to_state in _ALLOWED[self.current_state]

    def transition(self, to_state: TrainingState) -> bool:
        if not self.can_transition(to_state):
            logger.debug("Refused transition %s -> %s", self.current_state.name, to_state.name)
            return False

        previous, self.current_state = self.current_state, to_state
        for listener in self._listeners:
            listener(previous, to_state)
        return True

    def start_training(self) -> bool:
        return self.transition(TrainingState.TRAINING)

    def pause(self) -> bool:
        return self.transition(TrainingState.PAUSED)

    def complete(self) -> bool:
        return self.transition(TrainingState.COMPLETED)

    def fail_error(self) -> bool:
        return self.transition(TrainingState.ERROR)

    def reset_to_idle(self) -> bool:
        """Return to idle; already being idle counts as success."""
        if self.is_idle():
            return True
        return self.transition(TrainingState.IDLE)

    def is_idle(self) -> bool:
        return self.current_state is TrainingState.IDLE

    def is_training(self) -> bool:
        return self.current_state is TrainingState.TRAINING

    def is_paused(self) -> bool:
        return self.current_state is TrainingState.PAUSED

    @property
    def description(self) -> str:
        return self.current_state.value
