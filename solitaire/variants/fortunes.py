"""Fortune's Foundation: a tarot solitaire with a single free cell.

Foundations 0-3 take the minor suits from Ace up and refuse cards while the
free cell is occupied.  Foundation 4 builds the major arcana up from 0,
foundation 5 builds them down from 21; the game is won when the two meet.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..cards import CUPS, PENTACLES, SWORDS, WANDS, Card
from ..piles import Pile, PileType
from ..rules import GameRules, piles_of_type
from ..rules_schema import (
    CustomBlocking,
    CustomWin,
    DealPattern,
    DealRedirect,
    FlipRule,
    PileDeal,
    PileLayout,
)

MINOR_FOUNDATIONS = 4
MINOR_FOUNDATION_SIZE = 13
ASCENDING_MAJOR = 4
DESCENDING_MAJOR = 5
LOWEST_MAJOR = 0
HIGHEST_MAJOR = 21
MAJOR_ARCANA_COUNT = HIGHEST_MAJOR - LOWEST_MAJOR + 1

ACE_FOUNDATION_BY_SUIT = {WANDS: 0, CUPS: 1, SWORDS: 2, PENTACLES: 3}

FREE_CELL_BLOCKING = "minor_foundation_free_cell"
FOUNDATIONS_COMPLETE = "tarot_foundations_complete"


def is_minor_ace(card: Card) -> bool:
    return card.is_minor_arcana() and card.rank == 1


def same_suit_adjacent(lower: Card, upper: Card) -> bool:
    return lower.suit == upper.suit and abs(lower.rank - upper.rank) == 1


class FortunesFoundationRules(GameRules):
    name = "Fortune's Foundation"

    def get_pile_configuration(self):
        return {
            PileType.FOUNDATION: PileLayout(count=6),
            PileType.TABLEAU: PileLayout(count=11),
            PileType.FREECELL: PileLayout(count=1, max_cards=1),
            PileType.STOCK: PileLayout(count=0, create=False),
            PileType.WASTE: PileLayout(count=0, create=False),
        }

    def get_deal_pattern(self) -> DealPattern:
        redirect = DealRedirect(predicate=is_minor_ace, index_by_suit=ACE_FOUNDATION_BY_SUIT)
        return DealPattern(
            order=[PileType.TABLEAU, PileType.FOUNDATION, PileType.FREECELL],
            piles={
                # Column 5 starts empty.
                PileType.TABLEAU: PileDeal.uniform([7, 7, 7, 7, 7, 0, 7, 7, 7, 7, 7], redirect=redirect),
                PileType.FOUNDATION: PileDeal.uniform([0] * 6),
                PileType.FREECELL: PileDeal.uniform([0]),
            },
        )

    def get_blocking_conditions(self):
        return {
            PileType.FOUNDATION: [
                CustomBlocking(
                    name=FREE_CELL_BLOCKING,
                    description="Minor arcana foundations are blocked while the free cell is occupied",
                )
            ]
        }

    def evaluate_custom_blocking(self, condition: CustomBlocking, state: Any, target: Optional[Pile]) -> bool:
        if condition.name != FREE_CELL_BLOCKING:
            return super().evaluate_custom_blocking(condition, state, target)
        if target is None or target.type is not PileType.FOUNDATION or target.index >= MINOR_FOUNDATIONS:
            return False
        return any(not pile.is_empty() for pile in piles_of_type(state, PileType.FREECELL))

    def is_valid_foundation_move(self, card: Card, target: Pile, state: Any) -> bool:
        top = target.top_card()
        if target.index < MINOR_FOUNDATIONS:
            if not card.is_minor_arcana():
                return False
            if self.is_pile_type_blocked(PileType.FOUNDATION, state, target):
                return False
            if top is None:
                return card.rank == 1
            return card.suit == top.suit and card.rank == top.rank + 1

        if not card.is_major_arcana():
            return False
        ascending = target.index == ASCENDING_MAJOR
        if top is None:
            return card.rank == (LOWEST_MAJOR if ascending else HIGHEST_MAJOR)
        step = 1 if ascending else -1
        return card.rank == top.rank + step

    def is_valid_tableau_move(self, card: Card, target: Pile, state: Any) -> bool:
        top = target.top_card()
        if top is None:
            return True
        return same_suit_adjacent(top, card)

    def can_card_be_moved_from_pile(self, card: Card, source: Pile, state: Any) -> bool:
        # A buried card may only leave together with a valid run above it.
        return self.is_valid_run(self.run_from(card, source))

    def is_valid_run(self, cards: Sequence[Card]) -> bool:
        return bool(cards) and all(same_suit_adjacent(lower, upper) for lower, upper in zip(cards, cards[1:]))

    def get_win_conditions(self):
        return [
            CustomWin(
                name=FOUNDATIONS_COMPLETE,
                description="Minor foundations hold 13 each and the major foundations hold all 22 arcana",
            )
        ]

    def check_custom_win(self, condition: CustomWin, state: Any) -> bool:
        if condition.name != FOUNDATIONS_COMPLETE:
            return super().check_custom_win(condition, state)
        by_index = {pile.index: pile for pile in piles_of_type(state, PileType.FOUNDATION)}
        for index in range(MINOR_FOUNDATIONS):
            pile = by_index.get(index)
            if pile is None or len(pile) != MINOR_FOUNDATION_SIZE:
                return False
        ascending = by_index.get(ASCENDING_MAJOR)
        descending = by_index.get(DESCENDING_MAJOR)
        if ascending is None or descending is None:
            return False
        return len(ascending) + len(descending) == MAJOR_ARCANA_COUNT

    def get_card_flipping_rules(self):
        return {PileType.TABLEAU: FlipRule(), PileType.FOUNDATION: FlipRule()}

    def rules_description(self) -> str:
        return (
            "Fortune's Foundation: minor suits build up from the Ace on foundations that "
            "lock while the free cell holds a card; the major arcana build up from 0 and "
            "down from 21; tableau cards stack by suit one rank up or down."
        )
