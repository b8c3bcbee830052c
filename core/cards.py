"""Card representation - immutable values as served by the remote deck."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

# Image location used by the deck service for its card faces
DEFAULT_IMAGE_BASE = "https://deckofcardsapi.com/static/img"


class Suit(Enum):
    """Card suits, valued by the letter used in deck service card codes."""

    CLUBS = "C"
    DIAMONDS = "D"
    HEARTS = "H"
    SPADES = "S"

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]

    @property
    def letter(self) -> str:
        """Return the single-letter code used in card codes."""
        return self.value

    @classmethod
    def from_api(cls, word: str) -> "Suit":
        """Parse a suit word like 'HEARTS'."""
        try:
            return cls[word.strip().upper()]
        except KeyError:
            raise ValueError(f"Invalid suit: {word}") from None


class Rank(Enum):
    """Card ranks in ascending order."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def letter(self) -> str:
        """Return the code letter; the deck service writes ten as '0'."""
        if self == Rank.TEN:
            return "0"
        return str(self)

    @property
    def api_value(self) -> str:
        """Return the rank word the deck service uses ('ACE', '7', ...)."""
        if self.value <= 10:
            return str(self.value)
        return self.name

    @classmethod
    def from_api(cls, word: str) -> "Rank":
        """Parse a rank word like 'QUEEN' or '10'."""
        word = word.strip().upper()
        if word.isdigit():
            try:
                return cls(int(word))
            except ValueError:
                raise ValueError(f"Invalid rank: {word}") from None
        try:
            return cls[word]
        except KeyError:
            raise ValueError(f"Invalid rank: {word}") from None


_RANK_CODES = {
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "0": Rank.TEN,
    "10": Rank.TEN,
    "T": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
    "A": Rank.ACE,
}

_SUIT_CODES = {
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable playing card.

    Face orientation is part of the value. A face-down card is turned over by
    building its revealed copy with ``revealed()``; there is no way back.
    """

    rank: Rank
    suit: Suit
    code: str = ""
    image: str = ""
    face_up: bool = False

    def __post_init__(self) -> None:
        if not self.code:
            object.__setattr__(self, "code", f"{self.rank.letter}{self.suit.letter}")
        if not self.image:
            object.__setattr__(self, "image", f"{DEFAULT_IMAGE_BASE}/{self.code}.png")

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        orientation = "up" if self.face_up else "down"
        return f"Card({self.rank.name}, {self.suit.name}, {orientation})"

    def revealed(self) -> "Card":
        """Return this card turned face up."""
        if self.face_up:
            return self
        return replace(self, face_up=True)

    def oriented(self, face_up: bool) -> "Card":
        """Return this card with the requested orientation."""
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    def same_card(self, other: "Card") -> bool:
        """Check identity ignoring orientation."""
        return self.code == other.code

    @classmethod
    def from_code(cls, s: str, face_up: bool = False) -> "Card":
        """Create a card from a code like 'AS', '0H', '10D' or 'K♥'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANK_CODES:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_CODES:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_CODES[rank_str], _SUIT_CODES[suit_str], face_up=face_up)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Card":
        """
        Create a card from a deck service card object.

        Args:
            data: Mapping with 'value', 'suit' and optionally 'code', 'image'

        Returns:
            A face-down card; orientation is decided when it joins a hand
        """
        try:
            rank = Rank.from_api(str(data["value"]))
            suit = Suit.from_api(str(data["suit"]))
        except KeyError as exc:
            raise ValueError(f"Card payload missing {exc.args[0]!r}") from None
        return cls(
            rank,
            suit,
            code=str(data.get("code") or ""),
            image=str(data.get("image") or ""),
        )

    def to_api(self) -> dict[str, str]:
        """Serialize the card the way the deck service does."""
        return {
            "code": self.code,
            "image": self.image,
            "value": self.rank.api_value,
            "suit": self.suit.name,
        }


def standard_deck() -> list[Card]:
    """Return a standard 52-card deck in suit/rank order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]
