"""Sawayama: Klondike's layout dealt face up, plus one free cell that opens once the stock is spent."""

from __future__ import annotations

from typing import Any, Sequence

from ..cards import Card, alternating_colors
from ..piles import Pile, PileType
from ..rules import GameRules
from ..rules_schema import (
    DealPattern,
    FlipCondition,
    FlipRule,
    FoundationComplete,
    PileDeal,
    PileLayout,
    PileNotEmpty,
    StockDrawingRules,
)
from .klondike import builds_on_foundation, is_alternating_descending_run


class SawayamaRules(GameRules):
    name = "Sawayama"

    def get_pile_configuration(self):
        return {
            PileType.FOUNDATION: PileLayout(count=4),
            PileType.TABLEAU: PileLayout(count=7),
            PileType.STOCK: PileLayout(count=1),
            PileType.WASTE: PileLayout(count=1),
            PileType.FREECELL: PileLayout(count=1, max_cards=1),
        }

    def get_deal_pattern(self) -> DealPattern:
        return DealPattern(
            order=[PileType.TABLEAU, PileType.FOUNDATION, PileType.STOCK, PileType.WASTE, PileType.FREECELL],
            piles={
                PileType.TABLEAU: PileDeal.uniform([1, 2, 3, 4, 5, 6, 7]),
                PileType.FOUNDATION: PileDeal.empty(4),
                PileType.STOCK: PileDeal.uniform([24], face_up=False),
                PileType.WASTE: PileDeal.empty(1),
                PileType.FREECELL: PileDeal.empty(1),
            },
        )

    def get_blocking_conditions(self):
        return {
            PileType.FREECELL: [
                PileNotEmpty(
                    pile_type=PileType.STOCK,
                    description="Free cell is blocked until the stock pile is empty",
                )
            ]
        }

    def is_valid_foundation_move(self, card: Card, target: Pile, state: Any) -> bool:
        return builds_on_foundation(card, target)

    def is_valid_tableau_move(self, card: Card, target: Pile, state: Any) -> bool:
        top = target.top_card()
        if top is None:
            return True
        return top.face_up and card.rank == top.rank - 1 and alternating_colors(top, card)

    def can_card_be_moved_from_pile(self, card: Card, source: Pile, state: Any) -> bool:
        if source.type is PileType.FOUNDATION:
            return False
        if source.type in (PileType.TABLEAU, PileType.FREECELL):
            return card.face_up
        if source.type in (PileType.STOCK, PileType.WASTE):
            return source.top_card() is card and card.face_up
        return False

    def is_valid_run(self, cards: Sequence[Card]) -> bool:
        return is_alternating_descending_run(cards)

    def get_win_conditions(self):
        return [
            FoundationComplete(
                cards_per_pile=13,
                required="all",
                description="All foundation piles must be complete (Ace to King)",
            )
        ]

    def get_stock_drawing_rules(self) -> StockDrawingRules:
        return StockDrawingRules(
            cards_per_draw=3,
            redeal_when_empty=False,
            shuffle_on_redeal=False,
            face_up_on_draw=True,
            face_down_on_redeal=False,
        )

    def get_card_flipping_rules(self):
        return {
            PileType.TABLEAU: FlipRule(flip_on_move=True, flip_condition=FlipCondition.FACE_DOWN),
            PileType.FOUNDATION: FlipRule(),
        }

    def rules_description(self) -> str:
        return (
            "Sawayama: the Klondike layout dealt face up; any card fills an empty column; "
            "draw three at a time with no redeal; the single free cell opens once the "
            "stock is empty."
        )
