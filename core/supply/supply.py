"""Card supply - local bookkeeping over one remote shuffled supply."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from core.cards import Card
from core.errors import Busy, SupplyExhausted, SupplyUnavailable
from core.logging_utils import get_logger
from core.supply.client import DeckClient, SupplyInfo

logger = get_logger(__name__)

# Callback invoked with the new remaining count after a full replenishment
ReplenishListener = Callable[[int], None]


class CardSupply:
    """
    Handle on a remote multi-deck card source.

    Owns the remote supply id and a cached remaining count. Operations
    never overlap: a call made while another is in flight raises ``Busy``.
    Running short is handled by starting a fresh full supply, never by a
    partial top-up.
    """

    def __init__(
        self,
        client: DeckClient,
        deck_count: int = 1,
        shuffled: bool = True,
    ) -> None:
        """
        Initialize an empty supply handle.

        Args:
            client: Remote deck service
            deck_count: Number of standard decks per (re)initialization
            shuffled: Whether new supplies are shuffled on creation
        """
        if deck_count < 1:
            raise ValueError("Supply must have at least 1 deck")

        self._client = client
        self._deck_count = deck_count
        self._shuffled = shuffled
        self._supply_id: str | None = None
        self._remaining = 0
        self._in_flight = False
        self._listeners: list[ReplenishListener] = []
        self.replenish_count = 0

    @property
    def supply_id(self) -> str | None:
        """Return the remote supply id, or None before the first creation."""
        return self._supply_id

    @property
    def remaining(self) -> int:
        """Return the number of undealt cards in the current supply."""
        return self._remaining

    @property
    def deck_count(self) -> int:
        """Return the number of decks used for (re)initialization."""
        return self._deck_count

    @property
    def is_busy(self) -> bool:
        """Check if a remote operation is in flight."""
        return self._in_flight

    def add_listener(self, listener: ReplenishListener) -> None:
        """Register a callback for full replenishments."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ReplenishListener) -> None:
        """Unregister a replenishment callback."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    @asynccontextmanager
    async def _exclusive(self, operation: str) -> AsyncIterator[None]:
        if self._in_flight:
            raise Busy(f"Card supply busy, cannot {operation}")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    async def _create(self, deck_count: int, shuffled: bool) -> SupplyInfo:
        info = await self._client.create_supply(deck_count, shuffled)
        if info.remaining < 0:
            raise SupplyUnavailable(f"Service reported {info.remaining} cards")
        previous = self._supply_id
        self._supply_id = info.supply_id
        self._remaining = info.remaining
        self._deck_count = deck_count
        self._shuffled = shuffled
        self.replenish_count += 1
        if previous is not None and previous != info.supply_id:
            await self._client.discard_supply(previous)
        logger.info(
            "Supply %s created with %d decks (%d cards)",
            info.supply_id,
            deck_count,
            info.remaining,
        )
        for listener in list(self._listeners):
            listener(info.remaining)
        return info

    async def initialize(
        self,
        deck_count: int | None = None,
        shuffled: bool | None = None,
    ) -> SupplyInfo:
        """
        Create a new remote supply, discarding any previous one.

        Args:
            deck_count: Decks in the new supply (defaults to the last used)
            shuffled: Shuffle on creation (defaults to the last used)

        Raises:
            Busy: If another supply operation is in flight
            SupplyUnavailable: On network or service failure
        """
        deck_count = self._deck_count if deck_count is None else deck_count
        shuffled = self._shuffled if shuffled is None else shuffled
        if deck_count < 1:
            raise ValueError("Supply must have at least 1 deck")

        async with self._exclusive("initialize"):
            return await self._create(deck_count, shuffled)

    async def reshuffle(self) -> SupplyInfo:
        """
        Randomize the remaining cards in place; the count does not change.

        Raises:
            Busy: If another supply operation is in flight
            SupplyUnavailable: If no supply exists yet, or on service failure
        """
        async with self._exclusive("reshuffle"):
            if self._supply_id is None:
                raise SupplyUnavailable("No supply to reshuffle")
            info = await self._client.reshuffle_supply(self._supply_id)
            if info.remaining != self._remaining:
                logger.warning(
                    "Supply %s: service reports %d remaining after reshuffle, expected %d",
                    self._supply_id,
                    info.remaining,
                    self._remaining,
                )
            logger.debug("Supply %s reshuffled", self._supply_id)
            return SupplyInfo(supply_id=self._supply_id, remaining=self._remaining)

    async def draw(self, count: int) -> list[Card]:
        """
        Draw ``count`` cards, replenishing first if too few remain.

        The draw is all-or-nothing: on failure no cards are returned and the
        remaining count is unchanged.

        Raises:
            ValueError: If count < 1
            Busy: If another supply operation is in flight
            SupplyExhausted: If nothing remains and replenishment failed, or a
                full fresh supply cannot cover the draw
            SupplyUnavailable: On any other service failure
        """
        if count < 1:
            raise ValueError("Must draw at least 1 card")

        async with self._exclusive("draw"):
            if self._supply_id is None or self._remaining < count:
                await self._replenish(count)

            result = await self._client.draw_cards(self._supply_id or "", count)
            if len(result.cards) != count:
                raise SupplyUnavailable(
                    f"Asked for {count} cards, service returned {len(result.cards)}"
                )

            self._remaining -= count
            if result.remaining != self._remaining:
                logger.warning(
                    "Supply %s: service reports %d remaining, expected %d",
                    self._supply_id,
                    result.remaining,
                    self._remaining,
                )
            logger.debug(
                "Drew %d from supply %s, %d remaining",
                count,
                self._supply_id,
                self._remaining,
            )
            return list(result.cards)

    async def _replenish(self, count: int) -> None:
        """Start a fresh full supply; exactly one attempt."""
        logger.info(
            "Supply low (%d remaining, need %d), replenishing",
            self._remaining,
            count,
        )
        try:
            await self._create(self._deck_count, self._shuffled)
        except SupplyUnavailable as exc:
            if self._remaining == 0:
                raise SupplyExhausted("Supply empty and replenishment failed") from exc
            raise

        if self._remaining < count:
            raise SupplyExhausted(
                f"A full supply of {self._remaining} cards cannot cover {count}"
            )
