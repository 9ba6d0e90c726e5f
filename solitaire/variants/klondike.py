"""Klondike: the classic draw-pile solitaire."""

from __future__ import annotations

from typing import Any, Sequence

from ..cards import Card, alternating_colors
from ..piles import Pile, PileType
from ..rules import GameRules
from ..rules_schema import (
    DealPattern,
    FaceUpPolicy,
    FlipCondition,
    FlipRule,
    FoundationComplete,
    PileDeal,
    PileLayout,
    StockDrawingRules,
)

ACE = 1
KING = 13


def is_alternating_descending_run(cards: Sequence[Card]) -> bool:
    """Each card is one rank below the card beneath it and of the other colour."""
    for lower, upper in zip(cards, cards[1:]):
        if not upper.face_up or upper.rank != lower.rank - 1 or not alternating_colors(lower, upper):
            return False
    return bool(cards) and cards[0].face_up


def builds_on_foundation(card: Card, target: Pile) -> bool:
    """Ace on an empty pile, then the same suit one rank higher."""
    top = target.top_card()
    if top is None:
        return card.rank == ACE
    return card.suit == top.suit and card.rank == top.rank + 1


def builds_down_alternating(card: Card, target: Pile) -> bool:
    top = target.top_card()
    if top is None or not top.face_up:
        return False
    return card.rank == top.rank - 1 and alternating_colors(top, card)


class KlondikeRules(GameRules):
    name = "Klondike"

    def get_pile_configuration(self):
        return {
            PileType.FOUNDATION: PileLayout(count=4),
            PileType.TABLEAU: PileLayout(count=7),
            PileType.STOCK: PileLayout(count=1),
            PileType.WASTE: PileLayout(count=1),
            PileType.FREECELL: PileLayout(count=0, create=False),
        }

    def get_deal_pattern(self) -> DealPattern:
        return DealPattern(
            order=[PileType.TABLEAU, PileType.FOUNDATION, PileType.STOCK, PileType.WASTE],
            piles={
                PileType.TABLEAU: PileDeal.uniform([1, 2, 3, 4, 5, 6, 7], policy=FaceUpPolicy.TOP_ONLY),
                PileType.FOUNDATION: PileDeal.empty(4),
                PileType.STOCK: PileDeal.uniform([24], face_up=False),
                PileType.WASTE: PileDeal.empty(1),
            },
        )

    def is_valid_foundation_move(self, card: Card, target: Pile, state: Any) -> bool:
        return builds_on_foundation(card, target)

    def is_valid_tableau_move(self, card: Card, target: Pile, state: Any) -> bool:
        if target.is_empty():
            return card.rank == KING
        return builds_down_alternating(card, target)

    def is_valid_free_cell_move(self, card: Card, target: Pile, state: Any) -> bool:
        return False

    def can_card_be_moved_from_pile(self, card: Card, source: Pile, state: Any) -> bool:
        if source.type is PileType.FOUNDATION:
            return False
        if source.type is PileType.TABLEAU:
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
            cards_per_draw=1,
            redeal_when_empty=True,
            shuffle_on_redeal=True,
            face_up_on_draw=True,
            face_down_on_redeal=True,
        )

    def get_card_flipping_rules(self):
        return {
            PileType.TABLEAU: FlipRule(flip_on_move=True, flip_condition=FlipCondition.FACE_DOWN),
            PileType.FOUNDATION: FlipRule(),
            PileType.STOCK: FlipRule(),
        }

    def rules_description(self) -> str:
        return (
            "Klondike: build foundations Ace to King by suit; build the tableau down in "
            "alternating colours; only Kings fill empty tableau piles; draw one card at a "
            "time from the stock and recycle the waste when the stock runs out."
        )
