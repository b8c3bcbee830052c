"""Pytest fixtures for card table tests."""

import asyncio

import pytest
import pytest_asyncio
from random import Random

from core.cards import Card, Rank, Suit
from core.errors import SupplyUnavailable
from core.game import GameSession
from core.gate import AnimationGate
from core.hand import Hand, Owner
from core.supply import CardSupply, DrawResult, InMemoryDeckClient, SupplyInfo


class FlakyDeckClient(InMemoryDeckClient):
    """In-memory deck service that counts calls and fails on demand."""

    def __init__(self, rng: Random | None = None) -> None:
        super().__init__(rng)
        self.create_calls = 0
        self.reshuffle_calls = 0
        self.draw_calls = 0
        self.fail_create = 0
        self.fail_reshuffle = 0
        self.fail_draw = 0
        self.short_draw = False
        self.pause: asyncio.Event | None = None

    async def create_supply(self, deck_count: int, shuffled: bool) -> SupplyInfo:
        self.create_calls += 1
        if self.fail_create:
            self.fail_create -= 1
            raise SupplyUnavailable("create failed")
        return await super().create_supply(deck_count, shuffled)

    async def reshuffle_supply(self, supply_id: str) -> SupplyInfo:
        self.reshuffle_calls += 1
        if self.fail_reshuffle:
            self.fail_reshuffle -= 1
            raise SupplyUnavailable("reshuffle failed")
        return await super().reshuffle_supply(supply_id)

    async def draw_cards(self, supply_id: str, count: int) -> DrawResult:
        self.draw_calls += 1
        if self.pause is not None:
            await self.pause.wait()
        if self.fail_draw:
            self.fail_draw -= 1
            raise SupplyUnavailable("draw failed")
        result = await super().draw_cards(supply_id, count)
        if self.short_draw:
            return DrawResult(cards=result.cards[:-1], remaining=result.remaining)
        return result


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck_client(rng):
    """A counting, failure-injectable in-memory deck service."""
    return FlakyDeckClient(rng)


@pytest.fixture
def supply(deck_client):
    """A single-deck supply that has not been created yet."""
    return CardSupply(deck_client, deck_count=1)


@pytest_asyncio.fixture
async def ready_supply(supply):
    """A single-deck supply holding a fresh 52 cards."""
    await supply.initialize()
    return supply


@pytest.fixture
def gate():
    """A gate with every channel free."""
    return AnimationGate()


@pytest_asyncio.fixture
async def session(ready_supply, gate):
    """An idle session over a fresh single-deck supply."""
    return GameSession(ready_supply, gate=gate)


@pytest.fixture
def recorded(session):
    """List collecting every event the session emits."""
    events = []
    session.subscribe(events.append)
    return events


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand(Owner.PLAYER)


@pytest.fixture
def ace_of_spades():
    """A face-down ace of spades."""
    return Card(Rank.ACE, Suit.SPADES)

