"""Game API endpoints."""

from fastapi import APIRouter, HTTPException, Header
from typing import Annotated, Any

from api.schemas import (
    ActionRequest,
    ErrorResponse,
    HandResponse,
    NewSessionResponse,
    RestartRequest,
    SessionStateResponse,
)
from api.session import create_session, get_session
from core.errors import Busy, CardTableError
from core.game import GameSession

router = APIRouter()

# Documented error bodies for routes that act on a session
SESSION_ERRORS: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Unknown or expired session"},
}
ACTION_ERRORS: dict[int | str, dict[str, Any]] = {
    **SESSION_ERRORS,
    400: {"model": ErrorResponse, "description": "Not allowed in the current state"},
    409: {"model": ErrorResponse, "description": "Deck busy with another step"},
    503: {"model": ErrorResponse, "description": "Deck service unavailable"},
}


def game_state_response(game: GameSession) -> SessionStateResponse:
    """Convert session state to response."""
    return SessionStateResponse(
        state=game.state.name,
        player_hand=HandResponse.from_hand(game.player_hand),
        house_hand=HandResponse.from_hand(game.house_hand),
        remaining=game.supply.remaining,
        supply_id=game.supply.supply_id,
        busy=game.is_busy,
        can_hit=game.can_hit,
        can_stand=game.can_stand,
    )


def _rejection_error(action: str, error: CardTableError | None) -> HTTPException:
    """Map an absorbed rejection to an HTTP error."""
    reason = type(error).__name__ if error is not None else "Rejected"
    status_code = 409 if isinstance(error, Busy) else 400
    return HTTPException(
        status_code=status_code,
        detail=f"Cannot {action} now: {error}",
        headers={"X-Rejection-Reason": reason},
    )


async def _get_game(session_id: str) -> GameSession:
    """Look up the game for a session or fail with 404."""
    game = await get_session(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Unknown or expired session")
    return game


@router.post("/new")
async def new_game() -> NewSessionResponse:
    """Create a new game session."""
    session_id = await create_session()
    return NewSessionResponse(session_id=session_id)


@router.get("/state", responses=SESSION_ERRORS)
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> SessionStateResponse:
    """Get current session state."""
    game = await _get_game(session_id)
    return game_state_response(game)


@router.post("/restart", responses=ACTION_ERRORS)
async def restart(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
    request: RestartRequest | None = None,
) -> SessionStateResponse:
    """Clear both hands and deal a new round."""
    game = await _get_game(session_id)
    cancel_pending = request.cancel_pending if request is not None else False

    if not await game.restart(cancel_pending=cancel_pending):
        raise _rejection_error("restart", game.last_rejection)

    return game_state_response(game)


@router.post("/action", responses=ACTION_ERRORS)
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> SessionStateResponse:
    """Execute a player action."""
    game = await _get_game(session_id)

    actions = {
        "hit": game.hit,
        "stand": game.stand,
        "shuffle": game.shuffle,
    }

    if not await actions[request.action]():
        raise _rejection_error(request.action, game.last_rejection)

    return game_state_response(game)
