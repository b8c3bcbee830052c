"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict
from typing import Literal

from core.cards import Card
from core.hand import CardHolder


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["hit", "stand", "shuffle"]


class RestartRequest(BaseModel):
    """Request to deal a new round."""

    cancel_pending: bool = False


class CardResponse(BaseModel):
    """Card representation; face-down cards carry no identity."""

    model_config = ConfigDict(from_attributes=True)

    face_up: bool
    rank: str | None = None
    suit: str | None = None
    code: str | None = None
    image: str | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        """Build a response, masking face-down cards."""
        if not card.face_up:
            return cls(face_up=False)
        return cls(
            face_up=True,
            rank=str(card.rank),
            suit=card.suit.name,
            code=card.code,
            image=card.image,
        )


class HandResponse(BaseModel):
    """Hand representation."""

    owner: Literal["player", "house"]
    cards: list[CardResponse]

    @classmethod
    def from_hand(cls, hand: CardHolder) -> "HandResponse":
        """Build a response from a hand in draw order."""
        return cls(
            owner=hand.owner.value,
            cards=[CardResponse.from_card(card) for card in hand],
        )


class SessionStateResponse(BaseModel):
    """Current session state."""

    state: str
    player_hand: HandResponse
    house_hand: HandResponse
    remaining: int
    supply_id: str | None
    busy: bool
    can_hit: bool
    can_stand: bool


class NewSessionResponse(BaseModel):
    """A freshly created session."""

    session_id: str


class ErrorResponse(BaseModel):
    """Error detail with its taxonomy name, when there is one."""

    detail: str
    reason: str | None = None
