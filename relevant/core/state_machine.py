"""Generic State Machine for status transitions.

This module provides a reusable state machine pattern. The session
lifecycle (uninitialized -> loading -> authenticated/unauthenticated)
is the main user.

Example:
    sm = StateMachine(SessionStatus.UNINITIALIZED, get_session_transitions())

    if sm.can_transition(SessionStatus.LOADING):
        sm.transition(SessionStatus.LOADING)
    sm.transition(SessionStatus.AUTHENTICATED)
"""

from enum import Enum
from typing import Generic, TypeVar

from relevant.core.exceptions import RelevantError

T = TypeVar("T", bound=str | Enum)

# Type alias for transition maps
TransitionMap = dict[T, list[T]]


class InvalidTransitionError(RelevantError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, current: T, target: T, allowed: list[T] | None = None):
        self.current = current
        self.target = target
        self.allowed = allowed or []
        allowed_str = ", ".join(str(s) for s in self.allowed) if self.allowed else "none"
        super().__init__(
            message=f"Invalid transition from '{current}' to '{target}'. "
            f"Allowed transitions: {allowed_str}",
            context={
                "current": str(current),
                "target": str(target),
                "allowed": [str(s) for s in self.allowed],
            },
        )


class StateMachine(Generic[T]):
    """Generic state machine for status transitions.

    Provides a type-safe way to manage status transitions with
    explicit allowed transitions defined upfront.

    Attributes:
        current: Current state
        transitions: Map of allowed transitions from each state
    """

    def __init__(self, initial: T, transitions: TransitionMap[T]):
        """Initialize state machine.

        Args:
            initial: Initial state
            transitions: Map of state -> list of allowed target states
        """
        self._current = initial
        self._transitions = transitions

    @property
    def current(self) -> T:
        """Get current state."""
        return self._current

    @property
    def allowed_transitions(self) -> list[T]:
        """Get list of states we can transition to from current state."""
        return self._transitions.get(self._current, [])

    def can_transition(self, target: T) -> bool:
        """Check if transition to target state is allowed.

        Args:
            target: Target state to check

        Returns:
            True if transition is allowed, False otherwise
        """
        return target in self.allowed_transitions

    def transition(self, target: T) -> None:
        """Perform transition to target state.

        Args:
            target: Target state

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                current=self._current,
                target=target,
                allowed=self.allowed_transitions,
            )
        self._current = target

    def reset(self, state: T) -> None:
        """Reset state machine to a specific state (bypass transition rules).

        Args:
            state: State to reset to
        """
        self._current = state

    def __repr__(self) -> str:
        return f"StateMachine(current={self._current!r}, allowed={self.allowed_transitions!r})"


# ============================================
# Predefined Transition Maps
# ============================================


def get_session_transitions() -> TransitionMap:
    """Get transition map for SessionStatus."""
    from relevant.models.auth import SessionStatus

    return {
        SessionStatus.UNINITIALIZED: [SessionStatus.LOADING],
        SessionStatus.LOADING: [SessionStatus.AUTHENTICATED, SessionStatus.UNAUTHENTICATED],
        SessionStatus.AUTHENTICATED: [SessionStatus.LOADING, SessionStatus.UNAUTHENTICATED],
        SessionStatus.UNAUTHENTICATED: [SessionStatus.LOADING, SessionStatus.AUTHENTICATED],
    }


def create_session_state_machine(initial_status: str | None = None) -> StateMachine:
    """Create a state machine for the session lifecycle.

    Args:
        initial_status: Initial status (default: UNINITIALIZED)

    Returns:
        Configured StateMachine for SessionStatus
    """
    from relevant.models.auth import SessionStatus

    initial = SessionStatus(initial_status) if initial_status else SessionStatus.UNINITIALIZED
    return StateMachine(initial, get_session_transitions())
