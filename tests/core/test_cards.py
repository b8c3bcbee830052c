"""Tests for Card, Rank and Suit."""

import pytest

from core.cards import DEFAULT_IMAGE_BASE, Card, Rank, Suit, standard_deck


class TestSuitAndRank:
    """Tests for parsing the deck service's words."""

    def test_suit_from_api(self):
        """Test parsing suit words."""
        assert Suit.from_api("HEARTS") == Suit.HEARTS
        assert Suit.from_api("spades") == Suit.SPADES

    def test_suit_values_are_code_letters(self):
        """Test suits are valued by their card-code letter, not their word."""
        assert [suit.value for suit in Suit] == ["C", "D", "H", "S"]
        assert Card(Rank.ACE, Suit.SPADES).code == "AS"
        with pytest.raises(ValueError):
            Suit.from_api("S")

    def test_suit_from_api_invalid(self):
        """Test unknown suit words are rejected."""
        with pytest.raises(ValueError):
            Suit.from_api("STARS")

    def test_rank_from_api(self):
        """Test parsing rank words and numbers."""
        assert Rank.from_api("ACE") == Rank.ACE
        assert Rank.from_api("QUEEN") == Rank.QUEEN
        assert Rank.from_api("10") == Rank.TEN
        assert Rank.from_api("2") == Rank.TWO

    def test_rank_from_api_invalid(self):
        """Test unknown rank words are rejected."""
        with pytest.raises(ValueError):
            Rank.from_api("1")
        with pytest.raises(ValueError):
            Rank.from_api("JOKER")

    def test_ten_code_letter(self):
        """Test that ten is written as '0' in card codes."""
        assert Rank.TEN.letter == "0"
        assert Rank.KING.letter == "K"
        assert Rank.SEVEN.api_value == "7"
        assert Rank.JACK.api_value == "JACK"


class TestCard:
    """Tests for the Card class."""

    def test_card_creation(self):
        """Test creating a card fills code and image."""
        card = Card(Rank.ACE, Suit.SPADES)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES
        assert card.code == "AS"
        assert card.image == f"{DEFAULT_IMAGE_BASE}/AS.png"
        assert not card.face_up

    def test_card_immutability(self):
        """Test that cards are immutable."""
        card = Card(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            card.face_up = True

    def test_revealed(self):
        """Test revealing returns a face-up copy."""
        card = Card(Rank.TEN, Suit.HEARTS)
        shown = card.revealed()
        assert shown.face_up
        assert not card.face_up
        assert shown.same_card(card)
        assert shown.revealed() is shown

    def test_card_from_code(self):
        """Test creating cards from service codes."""
        assert Card.from_code("AS") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_code("0H") == Card(Rank.TEN, Suit.HEARTS)
        assert Card.from_code("10D") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_code("kc").code == "KC"

    def test_card_from_code_with_symbols(self):
        """Test creating cards from strings with suit symbols."""
        assert Card.from_code("A♠") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_code("K♥", face_up=True).face_up

    def test_card_from_code_invalid(self):
        """Test invalid codes raise."""
        with pytest.raises(ValueError):
            Card.from_code("X")
        with pytest.raises(ValueError):
            Card.from_code("1S")
        with pytest.raises(ValueError):
            Card.from_code("AX")

    def test_card_from_api(self):
        """Test building a card from a service card object."""
        card = Card.from_api({
            "code": "0C",
            "image": "https://cards.test/0C.png",
            "value": "10",
            "suit": "CLUBS",
        })
        assert card.rank == Rank.TEN
        assert card.suit == Suit.CLUBS
        assert card.code == "0C"
        assert card.image == "https://cards.test/0C.png"
        assert not card.face_up

    def test_card_from_api_missing_field(self):
        """Test payloads without a suit are rejected."""
        with pytest.raises(ValueError):
            Card.from_api({"value": "ACE"})

    def test_to_api_matches_service_shape(self):
        """Test serializing back to the service's card object."""
        card = Card(Rank.QUEEN, Suit.DIAMONDS)
        assert card.to_api() == {
            "code": "QD",
            "image": f"{DEFAULT_IMAGE_BASE}/QD.png",
            "value": "QUEEN",
            "suit": "DIAMONDS",
        }

    def test_card_str(self):
        """Test string representation."""
        card = Card(Rank.ACE, Suit.SPADES)
        assert "A" in str(card)
        assert "♠" in str(card)

    def test_equality_includes_orientation(self):
        """Test face orientation is part of equality."""
        card = Card(Rank.TWO, Suit.CLUBS)
        assert card == Card(Rank.TWO, Suit.CLUBS)
        assert card != card.revealed()


class TestStandardDeck:
    """Tests for the standard deck helper."""

    def test_has_52_unique_cards(self):
        """Test a standard deck has every card once."""
        deck = standard_deck()
        assert len(deck) == 52
        assert len({card.code for card in deck}) == 52

    def test_all_face_down(self):
        """Test fresh cards start face down."""
        assert not any(card.face_up for card in standard_deck())
