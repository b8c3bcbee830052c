"""Remote deck service clients."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from random import Random
from typing import Any
from uuid import uuid4

import httpx

from core.cards import Card, standard_deck
from core.errors import SupplyUnavailable
from core.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SupplyInfo:
    """Identity and size of a remote supply."""

    supply_id: str
    remaining: int


@dataclass(frozen=True)
class DrawResult:
    """Cards handed out by a remote draw."""

    cards: list[Card] = field(default_factory=list)
    remaining: int = 0


class DeckClient(ABC):
    """Abstract remote card source."""

    @abstractmethod
    async def create_supply(self, deck_count: int, shuffled: bool) -> SupplyInfo:
        """Create a new supply of ``deck_count`` standard decks."""
        ...

    @abstractmethod
    async def reshuffle_supply(self, supply_id: str) -> SupplyInfo:
        """Randomize the undealt cards of a supply in place."""
        ...

    @abstractmethod
    async def draw_cards(self, supply_id: str, count: int) -> DrawResult:
        """Draw ``count`` cards off the top of a supply."""
        ...

    async def discard_supply(self, supply_id: str) -> None:
        """Forget a supply that has been replaced; services may ignore this."""

    async def aclose(self) -> None:
        """Release any transport resources."""


class HttpDeckClient(DeckClient):
    """
    Client for a deckofcardsapi.com-compatible HTTP service.

    Every failure (transport error, bad status, malformed body, or a
    ``success: false`` reply) surfaces as ``SupplyUnavailable``.
    """

    def __init__(
        self,
        base_url: str = "https://deckofcardsapi.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Root URL of the deck service
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used to stub the service)
        """
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Issue a GET and return the decoded success payload."""
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Deck service request %s failed: %s", path, exc)
            raise SupplyUnavailable(f"Deck service request failed: {exc}") from exc
        except ValueError as exc:
            logger.warning("Deck service returned malformed JSON for %s", path)
            raise SupplyUnavailable("Deck service returned malformed JSON") from exc

        if not isinstance(payload, dict):
            raise SupplyUnavailable("Deck service returned an unexpected body")
        if not payload.get("success", False):
            error = payload.get("error") or "Deck service reported failure"
            logger.warning("Deck service refused %s: %s", path, error)
            raise SupplyUnavailable(str(error))
        return payload

    @staticmethod
    def _supply_info(payload: dict[str, Any]) -> SupplyInfo:
        try:
            return SupplyInfo(
                supply_id=str(payload["deck_id"]),
                remaining=int(payload["remaining"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SupplyUnavailable(f"Malformed supply payload: {exc}") from exc

    async def create_supply(self, deck_count: int, shuffled: bool) -> SupplyInfo:
        path = "/api/deck/new/shuffle/" if shuffled else "/api/deck/new/"
        payload = await self._get(path, {"deck_count": deck_count})
        return self._supply_info(payload)

    async def reshuffle_supply(self, supply_id: str) -> SupplyInfo:
        payload = await self._get(
            f"/api/deck/{supply_id}/shuffle/", {"remaining": "true"}
        )
        return self._supply_info(payload)

    async def draw_cards(self, supply_id: str, count: int) -> DrawResult:
        payload = await self._get(f"/api/deck/{supply_id}/draw/", {"count": count})
        try:
            cards = [Card.from_api(item) for item in payload["cards"]]
            remaining = int(payload["remaining"])
        except (KeyError, TypeError, ValueError) as exc:
            raise SupplyUnavailable(f"Malformed draw payload: {exc}") from exc
        return DrawResult(cards=cards, remaining=remaining)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpDeckClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class InMemoryDeckClient(DeckClient):
    """In-process deck service for local development and tests."""

    def __init__(self, rng: Random | None = None) -> None:
        self._rng = rng or Random()
        self._supplies: dict[str, list[Card]] = {}

    async def create_supply(self, deck_count: int, shuffled: bool) -> SupplyInfo:
        if deck_count < 1:
            raise SupplyUnavailable("Supply must have at least 1 deck")
        cards = [card for _ in range(deck_count) for card in standard_deck()]
        if shuffled:
            self._rng.shuffle(cards)
        supply_id = uuid4().hex[:12]
        self._supplies[supply_id] = cards
        return SupplyInfo(supply_id=supply_id, remaining=len(cards))

    def _cards(self, supply_id: str) -> list[Card]:
        if supply_id not in self._supplies:
            raise SupplyUnavailable(f"Deck ID {supply_id} does not exist")
        return self._supplies[supply_id]

    async def reshuffle_supply(self, supply_id: str) -> SupplyInfo:
        cards = self._cards(supply_id)
        self._rng.shuffle(cards)
        return SupplyInfo(supply_id=supply_id, remaining=len(cards))

    async def draw_cards(self, supply_id: str, count: int) -> DrawResult:
        cards = self._cards(supply_id)
        if count > len(cards):
            raise SupplyUnavailable(
                f"Not enough cards remaining to draw {count} additional"
            )
        drawn = cards[:count]
        del cards[:count]
        return DrawResult(cards=drawn, remaining=len(cards))

    async def discard_supply(self, supply_id: str) -> None:
        self._supplies.pop(supply_id, None)

    @property
    def supply_count(self) -> int:
        """Return how many supplies the service is holding."""
        return len(self._supplies)

    def remaining(self, supply_id: str) -> int:
        """Return how many cards the service still holds for a supply."""
        return len(self._cards(supply_id))
