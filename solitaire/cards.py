"""Card-related data structures and helpers for the solitaire engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


SPADES = "spades"
HEARTS = "hearts"
DIAMONDS = "diamonds"
CLUBS = "clubs"

WANDS = "wands"
CUPS = "cups"
SWORDS = "swords"
PENTACLES = "pentacles"
MAJOR = "major"

STANDARD_SUITS: tuple[str, ...] = (SPADES, HEARTS, DIAMONDS, CLUBS)
TAROT_SUITS: tuple[str, ...] = (WANDS, CUPS, SWORDS, PENTACLES)

RED_SUITS = frozenset({HEARTS, DIAMONDS})

# Colour names per suit; the two-colour split only matters for French suits.
SUIT_COLORS: dict[str, str] = {
    SPADES: "black",
    CLUBS: "black",
    HEARTS: "red",
    DIAMONDS: "red",
    WANDS: "brown",
    CUPS: "blue",
    SWORDS: "green",
    PENTACLES: "gold",
    MAJOR: "violet",
}

SUIT_SYMBOLS: dict[str, str] = {
    SPADES: "♠",
    HEARTS: "♥",
    DIAMONDS: "♦",
    CLUBS: "♣",
    WANDS: "W",
    CUPS: "C",
    SWORDS: "S",
    PENTACLES: "P",
    MAJOR: "★",
}

RANK_SYMBOLS: dict[int, str] = {1: "A", 11: "J", 12: "Q", 13: "K"}
RANK_NAMES: dict[int, str] = {1: "Ace", 11: "Jack", 12: "Queen", 13: "King"}

ROMAN_NUMERALS = (
    "0", "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X",
    "XI", "XII", "XIII", "XIV", "XV", "XVI", "XVII", "XVIII", "XIX", "XX", "XXI",
)


@dataclass(frozen=True)
class CardPosition:
    """Where a card currently sits; maintained by the owning pile."""

    pile_type: str
    pile_index: int
    card_index: int


@dataclass(eq=False)
class Card:
    """A single card.

    Cards compare by identity: two copies of the same suit and rank are still
    distinct objects, and the engine tracks them as such.
    """

    suit: str
    rank: int
    is_wild: bool = False
    special_properties: dict[str, Any] = field(default_factory=dict)
    face_up: bool = False
    position: Optional[CardPosition] = field(default=None, repr=False)

    def flip(self) -> None:
        self.face_up = not self.face_up

    @property
    def color(self) -> str:
        if self.is_wild:
            return self.special_properties.get("color", "purple")
        return SUIT_COLORS.get(self.suit, "black")

    def is_red(self) -> bool:
        return not self.is_wild and self.suit in RED_SUITS

    def is_minor_arcana(self) -> bool:
        return self.special_properties.get("type") == "minor"

    def is_major_arcana(self) -> bool:
        return self.special_properties.get("type") == "major"

    def clone(self) -> "Card":
        """Return an unplaced, face-down copy."""
        return Card(self.suit, self.rank, self.is_wild, dict(self.special_properties))

    def short_label(self) -> str:
        return card_short_label(self)

    def label(self) -> str:
        return card_label(self)

    def __str__(self) -> str:
        return card_short_label(self)


def alternating_colors(lower: Card, upper: Card) -> bool:
    """Return True when exactly one of the two cards is red."""
    return lower.is_red() != upper.is_red()


def card_short_label(card: Card) -> str:
    if card.is_wild:
        return card.special_properties.get("short_name", "W")
    if card.is_major_arcana() or card.suit == MAJOR:
        return ROMAN_NUMERALS[card.rank] if 0 <= card.rank < len(ROMAN_NUMERALS) else str(card.rank)
    rank = RANK_SYMBOLS.get(card.rank, str(card.rank))
    return f"{rank}{SUIT_SYMBOLS.get(card.suit, card.suit)}"


def card_label(card: Card) -> str:
    if card.is_wild:
        return card.special_properties.get("display_name", "Wild")
    if card.is_major_arcana() or card.suit == MAJOR:
        return f"Major {card.rank}"
    return f"{RANK_NAMES.get(card.rank, str(card.rank))} of {card.suit.title()}"


def serialize_card(card: Card) -> dict[str, Any]:
    return {
        "suit": card.suit,
        "rank": card.rank,
        "is_wild": card.is_wild,
        "face_up": card.face_up,
        "special_properties": dict(card.special_properties),
    }


def deserialize_card(payload: Mapping[str, Any]) -> Card:
    return Card(
        suit=str(payload["suit"]),
        rank=int(payload["rank"]),
        is_wild=bool(payload.get("is_wild", False)),
        special_properties=dict(payload.get("special_properties") or {}),
        face_up=bool(payload.get("face_up", False)),
    )
