"""Remote card supply and its service clients."""

from core.supply.client import (
    DeckClient,
    DrawResult,
    HttpDeckClient,
    InMemoryDeckClient,
    SupplyInfo,
)
from core.supply.supply import CardSupply

__all__ = [
    "CardSupply",
    "DeckClient",
    "DrawResult",
    "HttpDeckClient",
    "InMemoryDeckClient",
    "SupplyInfo",
]
