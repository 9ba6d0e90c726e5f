"""FreeCell: open deal, four single-card cells, capacity-limited run moves."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..cards import Card, alternating_colors
from ..piles import Pile, PileType
from ..rules import GameRules, piles_of_type
from ..rules_schema import DealPattern, FlipRule, FoundationComplete, PileDeal, PileLayout
from .klondike import builds_on_foundation, is_alternating_descending_run

FREE_CELLS = 4
TABLEAU_PILES = 8


def supermove_capacity(empty_free_cells: int, empty_tableau_piles: int) -> int:
    """Largest run movable by shuffling through empty cells and columns."""
    return (empty_free_cells + 1) * 2 ** empty_tableau_piles


class FreeCellRules(GameRules):
    name = "FreeCell"

    def get_pile_configuration(self):
        return {
            PileType.FOUNDATION: PileLayout(count=4),
            PileType.TABLEAU: PileLayout(count=TABLEAU_PILES),
            PileType.STOCK: PileLayout(count=0, create=False),
            PileType.WASTE: PileLayout(count=0, create=False),
            PileType.FREECELL: PileLayout(count=FREE_CELLS, max_cards=1),
        }

    def get_deal_pattern(self) -> DealPattern:
        return DealPattern(
            order=[PileType.TABLEAU, PileType.FOUNDATION, PileType.FREECELL],
            piles={
                PileType.TABLEAU: PileDeal.uniform([7, 7, 7, 7, 6, 6, 6, 6]),
                PileType.FOUNDATION: PileDeal.empty(4),
                PileType.FREECELL: PileDeal.empty(FREE_CELLS),
            },
        )

    def is_valid_foundation_move(self, card: Card, target: Pile, state: Any) -> bool:
        return builds_on_foundation(card, target)

    def is_valid_tableau_move(self, card: Card, target: Pile, state: Any) -> bool:
        top = target.top_card()
        if top is None:
            return True
        return card.rank == top.rank - 1 and alternating_colors(top, card)

    def can_card_be_moved_from_pile(self, card: Card, source: Pile, state: Any) -> bool:
        if source.type is PileType.TABLEAU:
            return card.face_up
        return source.top_card() is card

    def is_valid_run(self, cards: Sequence[Card]) -> bool:
        return is_alternating_descending_run(cards)

    def max_movable_cards(self, state: Any, target: Optional[Pile] = None) -> Optional[int]:
        empty_cells = sum(1 for pile in piles_of_type(state, PileType.FREECELL) if pile.is_empty())
        empty_columns = sum(
            1 for pile in piles_of_type(state, PileType.TABLEAU) if pile.is_empty() and pile is not target
        )
        return supermove_capacity(empty_cells, empty_columns)

    def get_win_conditions(self):
        return [
            FoundationComplete(
                cards_per_pile=13,
                required="all",
                description="All foundation piles must be complete (Ace to King)",
            )
        ]

    def get_card_flipping_rules(self):
        # Every card is dealt face up; nothing ever flips.
        return {PileType.TABLEAU: FlipRule(), PileType.FOUNDATION: FlipRule()}

    def rules_description(self) -> str:
        return (
            "FreeCell: all cards dealt face up; build foundations Ace to King by suit and "
            "the tableau down in alternating colours; any card may fill an empty column; "
            "four free cells hold one card each."
        )
