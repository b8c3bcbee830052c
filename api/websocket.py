"""WebSocket connection management with game session integration."""

import asyncio
import json
from enum import Enum
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from typing import Any
from uuid import uuid4

from api.routes.game import game_state_response
from api.schemas import CardResponse
from api.session import get_session
from core.cards import Card
from core.errors import SupplyError
from core.game import GameSession
from core.game.events import GameEvent
from core.logging_utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


class ConnectionManager:
    """
    Manage WebSocket connections and their event queues.

    A session may have several sockets open at once (a reloaded page, a
    second tab). Each socket gets its own connection id and queue, and is
    removed on its own.
    """

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._event_queues: dict[str, asyncio.Queue[GameEvent]] = {}
        self._sessions: dict[str, set[str]] = {}

    async def connect(self, websocket: WebSocket, session_id: str) -> str:
        """Accept and register a new connection, returning its id."""
        await websocket.accept()
        connection_id = uuid4().hex
        self._connections[connection_id] = websocket
        self._event_queues[connection_id] = asyncio.Queue()
        self._sessions.setdefault(session_id, set()).add(connection_id)
        return connection_id

    def disconnect(self, connection_id: str, session_id: str) -> None:
        """Remove one connection; the game stays registered for reconnection."""
        self._connections.pop(connection_id, None)
        self._event_queues.pop(connection_id, None)
        ids = self._sessions.get(session_id)
        if ids is not None:
            ids.discard(connection_id)
            if not ids:
                del self._sessions[session_id]

    def queue_event(self, connection_id: str, event: GameEvent) -> None:
        """Queue an event for async delivery."""
        queue = self._event_queues.get(connection_id)
        if queue is not None:
            queue.put_nowait(event)

    async def next_event(self, connection_id: str) -> GameEvent | None:
        """Wait for the next queued event."""
        queue = self._event_queues.get(connection_id)
        if queue is None:
            return None
        return await queue.get()

    async def send_message(self, connection_id: str, message: dict[str, Any]) -> None:
        """Send a message to a specific connection."""
        websocket = self._connections.get(connection_id)
        if websocket is not None:
            await websocket.send_json(message)

    def connections_for(self, session_id: str) -> int:
        """Return the number of open sockets for a session."""
        return len(self._sessions.get(session_id, ()))

    @property
    def active_connections(self) -> int:
        """Return number of active connections."""
        return len(self._connections)


# Global connection manager
manager = ConnectionManager()


def _jsonable(value: Any) -> Any:
    """Convert event payload values to JSON-friendly forms."""
    if isinstance(value, Card):
        return CardResponse.from_card(value).model_dump()
    if isinstance(value, Enum):
        return value.name if isinstance(value.value, int) else value.value
    return value


def event_to_message(event: GameEvent, game: GameSession) -> dict[str, Any]:
    """Convert a session event to a WebSocket message."""
    return {
        "type": "event",
        "event": event.name,
        "data": {key: _jsonable(value) for key, value in event.data.items()},
        "state": game_state_response(game).model_dump(),
    }


def _state_message(game: GameSession) -> dict[str, Any]:
    return {"type": "state_update", "state": game_state_response(game).model_dump()}


def _rejection_message(action: str, game: GameSession) -> dict[str, Any]:
    return {
        "type": "error",
        "message": f"Cannot {action} now: {game.last_rejection}",
        "reason": type(game.last_rejection).__name__,
    }


async def _handle_message(game: GameSession, message: dict[str, Any]) -> dict[str, Any] | None:
    """Run one client message; return an error message if it failed."""
    msg_type = message.get("type")

    if msg_type == "get_state":
        return _state_message(game)

    if msg_type == "restart":
        if not await game.restart(cancel_pending=bool(message.get("cancel_pending"))):
            return _rejection_message("restart", game)
        return None

    if msg_type == "action":
        action = message.get("action")
        actions = {
            "hit": game.hit,
            "stand": game.stand,
            "shuffle": game.shuffle,
        }
        action_fn = actions.get(action)  # type: ignore[arg-type]
        if action_fn is None:
            return {"type": "error", "message": f"Unknown action: {action}"}
        if not await action_fn():
            return _rejection_message(str(action), game)
        return None

    return {"type": "error", "message": f"Unknown message type: {msg_type}"}


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for real-time session events.

    Messages from client:
    - {"type": "restart", "cancel_pending": false}
    - {"type": "action", "action": "hit"|"stand"|"shuffle"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event": "card-drawn", "data": {...}, "state": {...}}
    - {"type": "error", "message": "...", "reason": "..."}
    """
    game = await get_session(session_id)
    if game is None:
        await websocket.close(code=4404)
        return

    connection_id = await manager.connect(websocket, session_id)

    def forward(event: GameEvent) -> None:
        manager.queue_event(connection_id, event)

    game.subscribe(forward)
    await manager.send_message(connection_id, _state_message(game))

    async def process_events() -> None:
        """Send queued session events to the client in order."""
        while True:
            event = await manager.next_event(connection_id)
            if event is None:
                return
            await manager.send_message(connection_id, event_to_message(event, game))

    event_task = asyncio.create_task(process_events())

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_message(
                    connection_id, {"type": "error", "message": "Malformed JSON"}
                )
                continue

            if not isinstance(message, dict):
                await manager.send_message(
                    connection_id, {"type": "error", "message": "Expected a JSON object"}
                )
                continue

            try:
                reply = await _handle_message(game, message)
            except SupplyError as exc:
                logger.warning("Supply failure for websocket session: %s", exc)
                reply = {
                    "type": "error",
                    "message": str(exc),
                    "reason": type(exc).__name__,
                }
            if reply is not None:
                await manager.send_message(connection_id, reply)

    except WebSocketDisconnect:
        logger.debug("WebSocket for session disconnected")
    finally:
        game.unsubscribe(forward)
        event_task.cancel()
        try:
            await event_task
        except asyncio.CancelledError:
            pass
        manager.disconnect(connection_id, session_id)
