"""Card table core - 100% UI-agnostic."""

from core.cards import Card, Rank, Suit
from core.errors import (
    Busy,
    CardTableError,
    IllegalTransition,
    IndexOutOfRange,
    StepCancelled,
    SupplyError,
    SupplyExhausted,
    SupplyUnavailable,
)
from core.gate import AnimationGate, GateToken
from core.hand import CardHolder, Hand, Owner

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "Hand",
    "Owner",
    "CardHolder",
    "AnimationGate",
    "GateToken",
    "CardTableError",
    "SupplyError",
    "SupplyUnavailable",
    "SupplyExhausted",
    "IllegalTransition",
    "Busy",
    "StepCancelled",
    "IndexOutOfRange",
]
