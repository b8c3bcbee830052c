"""Hand bookkeeping for one party at the table."""

from enum import Enum
from typing import Iterator, Protocol, runtime_checkable

from core.cards import Card
from core.errors import IndexOutOfRange


class Owner(Enum):
    """Who a hand belongs to."""

    PLAYER = "player"
    HOUSE = "house"

    def __str__(self) -> str:
        return self.value


@runtime_checkable
class CardHolder(Protocol):
    """Capabilities a hand must offer to take part in a game session."""

    owner: Owner

    def add_card(self, card: Card, face_up: bool) -> Card: ...

    def reveal_card(self, index: int) -> bool: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...

    def __iter__(self) -> Iterator[Card]: ...

    def __getitem__(self, index: int) -> Card: ...


class Hand:
    """
    An ordered collection of cards owned by one party.

    Cards keep their draw order. Only the game session mutates a hand.
    """

    def __init__(self, owner: Owner) -> None:
        """Initialize an empty hand for ``owner``."""
        self.owner = owner
        self._cards: list[Card] = []

    def add_card(self, card: Card, face_up: bool) -> Card:
        """
        Append a card with an explicit face orientation.

        Args:
            card: The drawn card
            face_up: Whether the card is shown to the viewer

        Returns:
            The card as held by this hand
        """
        held = card.oriented(face_up)
        self._cards.append(held)
        return held

    def reveal_card(self, index: int) -> bool:
        """
        Turn the card at ``index`` face up.

        Returns:
            True if the card was face down, False if it was already showing
        """
        if not 0 <= index < len(self._cards):
            raise IndexOutOfRange(
                f"No card at index {index} in {self.owner} hand of {len(self._cards)}"
            )
        card = self._cards[index]
        if card.face_up:
            return False
        self._cards[index] = card.revealed()
        return True

    def clear(self) -> None:
        """Remove all cards from the hand."""
        self._cards.clear()

    @property
    def cards(self) -> tuple[Card, ...]:
        """Return a snapshot of the cards in draw order."""
        return tuple(self._cards)

    @property
    def face_up_cards(self) -> list[Card]:
        """Return the cards currently visible to the viewer."""
        return [card for card in self._cards if card.face_up]

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(tuple(self._cards))

    def __getitem__(self, index: int) -> Card:
        return self._cards[index]

    def __str__(self) -> str:
        return " ".join(str(card) if card.face_up else "??" for card in self._cards)

    def __repr__(self) -> str:
        return f"Hand({self.owner.name}, {self._cards!r})"
