"""Ranking pass state machine."""

from enum import Enum
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class RankerState(str, Enum):
    """Ranking pass states.

    State transitions:
        POOL_READY -> SCORED: Every item in the pool has a cached score
        SCORED -> INTERLEAVED: Fresh and regular pools merged
        INTERLEAVED -> DIVERSIFIED: Source and category caps applied
    """

    POOL_READY = "POOL_READY"
    SCORED = "SCORED"
    INTERLEAVED = "INTERLEAVED"
    DIVERSIFIED = "DIVERSIFIED"


class RankerStateTransitionError(Exception):
    """Raised when an invalid ranker state transition is attempted."""

    def __init__(
        self, run_id: str, from_state: RankerState, to_state: RankerState
    ) -> None:
        """Initialize the error.

        Args:
            run_id: Ranking pass identifier.
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.run_id = run_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid ranker state transition in run {run_id}: "
            f"{from_state.value} -> {to_state.value}"
        )


class RankerStateMachine:
    """Enforces the order of ranking phases for one pass."""

    VALID_TRANSITIONS: ClassVar[dict[RankerState, set[RankerState]]] = {
        RankerState.POOL_READY: {RankerState.SCORED},
        RankerState.SCORED: {RankerState.INTERLEAVED},
        RankerState.INTERLEAVED: {RankerState.DIVERSIFIED},
        RankerState.DIVERSIFIED: set(),
    }

    def __init__(
        self,
        run_id: str,
        initial_state: RankerState = RankerState.POOL_READY,
    ) -> None:
        """Initialize the state machine.

        Args:
            run_id: Ranking pass identifier for logging.
            initial_state: State to start from.
        """
        self._run_id = run_id
        self._state = initial_state
        self._log = logger.bind(component="feed", subcomponent="ranker", run_id=run_id)

    @property
    def state(self) -> RankerState:
        """Get the current state."""
        return self._state

    @property
    def run_id(self) -> str:
        """Get the run ID."""
        return self._run_id

    @property
    def is_terminal(self) -> bool:
        """Whether the pass has finished."""
        return not self.VALID_TRANSITIONS[self._state]

    def can_transition_to(self, to_state: RankerState) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS[self._state]

    def transition(self, to_state: RankerState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            RankerStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.value,
                to_state=to_state.value,
            )
            raise RankerStateTransitionError(self._run_id, self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "ranker_state_transition",
            from_state=old_state.value,
            to_state=to_state.value,
        )

    def to_scored(self) -> None:
        """Transition to SCORED state."""
        self.transition(RankerState.SCORED)

    def to_interleaved(self) -> None:
        """Transition to INTERLEAVED state."""
        self.transition(RankerState.INTERLEAVED)

    def to_diversified(self) -> None:
        """Transition to DIVERSIFIED state."""
        self.transition(RankerState.DIVERSIFIED)
