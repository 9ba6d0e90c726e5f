"""Deck configuration and card generation."""

from __future__ import annotations

import math
from random import Random
from typing import Any, List, MutableSequence, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .cards import MAJOR, STANDARD_SUITS, TAROT_SUITS, Card

STANDARD_RANKS = list(range(1, 14))
MAJOR_ARCANA_RANKS = list(range(0, 22))


class WildCardSpec(BaseModel):
    suit: str = "wild"
    rank: int = 0
    special_properties: dict[str, Any] = Field(default_factory=dict)


class ExtraCardSpec(BaseModel):
    """A non-wild card outside the suits x ranks grid (e.g. a major arcanum)."""

    suit: str
    rank: int
    special_properties: dict[str, Any] = Field(default_factory=dict)


class DeckConfig(BaseModel):
    """Describes the card set of a variant and checks that it adds up."""

    name: str = "Custom Deck"
    description: str = ""
    suits: list[str]
    ranks: list[int]
    wild_cards: list[WildCardSpec] = Field(default_factory=list)
    extra_cards: list[ExtraCardSpec] = Field(default_factory=list)
    deck_size: Optional[int] = Field(None, description="Total card count; computed when omitted.")
    minor_properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Properties copied onto every suit x rank card.",
    )
    tableau_piles: Optional[int] = Field(None, ge=0, description="Structural hint for tableau count.")
    foundation_piles: Optional[int] = Field(None, ge=0, description="Structural hint for foundation count.")

    @field_validator("suits", "ranks")
    @classmethod
    def ensure_non_empty(cls, value: list) -> list:
        if not value:
            raise ValueError("Deck configuration must not be empty.")
        if len(set(value)) != len(value):
            raise ValueError(f"Deck configuration contains duplicates: {value!r}")
        return value

    @model_validator(mode="after")
    def check_deck_size(self) -> "DeckConfig":
        expected = self.computed_size()
        if self.deck_size is None:
            self.deck_size = expected
        elif self.deck_size != expected:
            raise ValueError(
                f"deck_size {self.deck_size} does not match "
                f"{len(self.suits)} suits x {len(self.ranks)} ranks"
                f" + {len(self.extra_cards)} extra + {len(self.wild_cards)} wild = {expected}"
            )
        return self

    def computed_size(self) -> int:
        return len(self.suits) * len(self.ranks) + len(self.extra_cards) + len(self.wild_cards)

    def create_deck(self) -> List[Card]:
        """Return a fresh, ordered list of face-down cards."""
        cards = [
            Card(suit, rank, special_properties=dict(self.minor_properties))
            for suit in self.suits
            for rank in self.ranks
        ]
        cards.extend(
            Card(extra.suit, extra.rank, special_properties=dict(extra.special_properties))
            for extra in self.extra_cards
        )
        cards.extend(
            Card(wild.suit, wild.rank, is_wild=True, special_properties=dict(wild.special_properties))
            for wild in self.wild_cards
        )
        return cards

    def tableau_pile_count(self) -> int:
        if self.tableau_piles is not None:
            return self.tableau_piles
        size = self.deck_size or self.computed_size()
        if size <= 52:
            return 7
        if size <= 78:
            return 8
        return math.ceil(size / 10)

    def foundation_pile_count(self) -> int:
        if self.foundation_piles is not None:
            return self.foundation_piles
        return len(self.suits)

    def initial_deal_count(self) -> int:
        """Rough number of cards dealt to the tableau at game start."""
        count = self.tableau_pile_count()
        return count * (count + 1) // 2


def shuffle_cards(cards: MutableSequence[Card], rng: Optional[Random] = None) -> None:
    """Fisher-Yates shuffle in place."""
    rng = rng or Random()
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]


def standard_deck() -> DeckConfig:
    return DeckConfig(
        name="Standard Deck",
        description="Standard 52-card deck, ace through king in four suits.",
        suits=list(STANDARD_SUITS),
        ranks=STANDARD_RANKS,
        tableau_piles=7,
        foundation_piles=4,
    )


def tarot_deck() -> DeckConfig:
    """52 minor arcana (no knights) plus the 22 major arcana in their own category."""
    return DeckConfig(
        name="Tarot Deck",
        description="Four minor suits ace through king plus major arcana 0-21.",
        suits=list(TAROT_SUITS),
        ranks=STANDARD_RANKS,
        extra_cards=[
            ExtraCardSpec(suit=MAJOR, rank=rank, special_properties={"type": "major", "arcana": rank})
            for rank in MAJOR_ARCANA_RANKS
        ],
        minor_properties={"type": "minor"},
        tableau_piles=11,
        foundation_piles=6,
    )
