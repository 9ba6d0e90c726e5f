"""Pile container shared by every solitaire variant."""

from __future__ import annotations

from enum import Enum
from random import Random
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from .cards import Card, CardPosition
from .deck import shuffle_cards

if TYPE_CHECKING:
    from .rules import GameRules


class InvalidOperation(RuntimeError):
    """Raised when a structural precondition is violated (e.g. popping an empty pile)."""


class CapacityExceeded(InvalidOperation):
    """Raised when a card would push a pile past its ``max_cards`` limit."""


class PileType(str, Enum):
    FOUNDATION = "foundation"
    TABLEAU = "tableau"
    STOCK = "stock"
    WASTE = "waste"
    FREECELL = "freecell"

    def __str__(self) -> str:
        return self.value


class Pile:
    """Ordered stack of cards; the last element is the top card."""

    def __init__(self, type: PileType, index: int, max_cards: Optional[int] = None) -> None:
        if max_cards is not None and max_cards < 1:
            raise ValueError("max_cards must be positive when set.")
        self.type = PileType(type)
        self.index = index
        self.max_cards = max_cards
        self.cards: List[Card] = []

    # Mutation ----------------------------------------------------------

    def add_card(self, card: Card) -> None:
        if self.is_full():
            raise CapacityExceeded(f"{self} is full (max {self.max_cards} cards).")
        card.position = CardPosition(self.type.value, self.index, len(self.cards))
        self.cards.append(card)

    def add_cards(self, cards: Iterable[Card]) -> None:
        incoming = list(cards)
        if not self.has_room_for(len(incoming)):
            raise CapacityExceeded(
                f"{self} cannot take {len(incoming)} more cards (max {self.max_cards})."
            )
        for card in incoming:
            self.add_card(card)

    def remove_top_card(self) -> Card:
        if not self.cards:
            raise InvalidOperation(f"Cannot remove a card from empty {self}.")
        card = self.cards.pop()
        card.position = None
        return card

    def remove_top_cards(self, count: int) -> List[Card]:
        """Remove ``count`` cards, returned bottom-to-top as they sat in the pile."""
        if count < 0 or count > len(self.cards):
            raise InvalidOperation(f"Cannot remove {count} cards from {self}.")
        removed: List[Card] = []
        for _ in range(count):
            removed.insert(0, self.remove_top_card())
        return removed

    def clear(self) -> List[Card]:
        removed = self.cards
        for card in removed:
            card.position = None
        self.cards = []
        return removed

    def shuffle(self, rng: Optional[Random] = None) -> None:
        shuffle_cards(self.cards, rng)
        self._reindex()

    def _reindex(self) -> None:
        for card_index, card in enumerate(self.cards):
            card.position = CardPosition(self.type.value, self.index, card_index)

    # Queries -----------------------------------------------------------

    def top_card(self) -> Optional[Card]:
        return self.cards[-1] if self.cards else None

    def get_card(self, index: int) -> Optional[Card]:
        if 0 <= index < len(self.cards):
            return self.cards[index]
        return None

    def cards_from(self, index: int) -> List[Card]:
        if 0 <= index < len(self.cards):
            return self.cards[index:]
        return []

    def index_of(self, card: Card) -> Optional[int]:
        for i, candidate in enumerate(self.cards):
            if candidate is card:
                return i
        return None

    def card_count(self) -> int:
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards

    def is_full(self) -> bool:
        return self.max_cards is not None and len(self.cards) >= self.max_cards

    def has_room_for(self, count: int) -> bool:
        return self.max_cards is None or len(self.cards) + count <= self.max_cards

    def can_add_card(self, card: Card, rules: "GameRules", state: Any) -> bool:
        """Capacity is the only local check; legality belongs to the rules."""
        if self.is_full():
            return False
        return rules.is_valid_move(card, self, state)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self):
        return iter(self.cards)

    def __str__(self) -> str:
        return f"{self.type.value} pile {self.index}"

    def __repr__(self) -> str:
        return f"Pile({self.type.value!r}, {self.index}, cards={len(self.cards)})"
