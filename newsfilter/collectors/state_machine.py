"""State machine for paginating a single fetch plan."""

from enum import Enum

import structlog


logger = structlog.get_logger()


class PlanState(str, Enum):
    """State of a plan during pagination.

    - FETCHING: Requesting pages
    - EXHAUSTED: Upstream has no more records (empty page or no cursor)
    - QUOTA_MET: Plan limit reached
    - ERROR: Aborted by an API or transport error
    """

    FETCHING = "FETCHING"
    EXHAUSTED = "EXHAUSTED"
    QUOTA_MET = "QUOTA_MET"
    ERROR = "ERROR"


# Valid state transitions
_VALID_TRANSITIONS: dict[PlanState, set[PlanState]] = {
    PlanState.FETCHING: {
        PlanState.FETCHING,
        PlanState.EXHAUSTED,
        PlanState.QUOTA_MET,
        PlanState.ERROR,
    },
    PlanState.EXHAUSTED: set(),  # Terminal state
    PlanState.QUOTA_MET: set(),  # Terminal state
    PlanState.ERROR: set(),  # Terminal state
}


class PlanStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(
        self,
        plan_label: str,
        from_state: PlanState,
        to_state: PlanState,
    ) -> None:
        """Initialize the transition error.

        Args:
            plan_label: Label of the plan.
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.plan_label = plan_label
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal state transition for plan '{plan_label}': "
            f"{from_state.value} -> {to_state.value}"
        )


class PlanStateMachine:
    """Tracks the pagination state of one plan attempt."""

    def __init__(self, plan_label: str) -> None:
        """Initialize the state machine in FETCHING.

        Args:
            plan_label: Label of the plan, used in logs and errors.
        """
        self._plan_label = plan_label
        self._state = PlanState.FETCHING
        self._log = logger.bind(
            component="collectors",
            subcomponent="plan_state",
            plan=plan_label,
        )

    @property
    def state(self) -> PlanState:
        """Get the current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return not _VALID_TRANSITIONS[self._state]

    def can_transition_to(self, target: PlanState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: PlanState) -> None:
        """Transition to a new state.

        Args:
            target: The target state.

        Raises:
            PlanStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise PlanStateTransitionError(self._plan_label, self._state, target)

        old_state = self._state
        self._state = target
        if old_state != target:
            self._log.debug(
                "state_transition",
                from_state=old_state.value,
                to_state=target.value,
            )

    def to_fetching(self) -> None:
        """Stay in FETCHING for the next page."""
        self.transition_to(PlanState.FETCHING)

    def to_exhausted(self) -> None:
        """Transition to EXHAUSTED state."""
        self.transition_to(PlanState.EXHAUSTED)

    def to_quota_met(self) -> None:
        """Transition to QUOTA_MET state."""
        self.transition_to(PlanState.QUOTA_MET)

    def to_error(self) -> None:
        """Transition to ERROR state."""
        self.transition_to(PlanState.ERROR)
