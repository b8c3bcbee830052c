"""Game session engine and state management."""

from core.game.events import GameEvent, EventEmitter, EventType
from core.game.state import SessionState
from core.game.engine import GameSession

__all__ = [
    "GameEvent",
    "EventEmitter",
    "EventType",
    "SessionState",
    "GameSession",
]
