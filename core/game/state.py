"""Session state enumeration."""

from enum import Enum, auto


class SessionState(Enum):
    """
    Game session state machine states.

    Flow: IDLE → DEALING → PLAYER_TURN → HOUSE_TURN → RESOLVED → DEALING ...
    """

    # Before the first deal
    IDLE = auto()

    # Initial cards being dealt
    DEALING = auto()

    # Player may hit or stand
    PLAYER_TURN = auto()

    # House reveals and draws
    HOUSE_TURN = auto()

    # Round finished, waiting for a restart
    RESOLVED = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


# Valid state transitions
VALID_TRANSITIONS: dict[SessionState, list[SessionState]] = {
    SessionState.IDLE: [SessionState.DEALING],
    SessionState.DEALING: [SessionState.PLAYER_TURN],
    SessionState.PLAYER_TURN: [
        SessionState.PLAYER_TURN,
        SessionState.HOUSE_TURN,
        SessionState.DEALING,
    ],
    SessionState.HOUSE_TURN: [SessionState.RESOLVED, SessionState.DEALING],
    SessionState.RESOLVED: [SessionState.DEALING],
}


def is_valid_transition(from_state: SessionState, to_state: SessionState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])


def sources_of(to_state: SessionState) -> list[SessionState]:
    """Return every state that may move to ``to_state``."""
    return [s for s in SessionState if is_valid_transition(s, to_state)]
