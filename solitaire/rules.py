"""The rule capability set every solitaire variant implements.

``GameRules`` is written once.  A variant supplies a handful of predicates
(foundation/tableau legality, source eligibility, run shape) and a set of
declarative tables (pile layout, deal pattern, blocking and win conditions,
scoring, stock and flip behaviour).  The orchestrator only ever talks to this
interface, and the blocking and win interpreters below never change per
variant.

``state`` arguments are any object exposing ``piles`` (a list of
:class:`~solitaire.piles.Pile`) and ``cards`` (every card of the deal); in
practice that is the :class:`~solitaire.game.Game` itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from .cards import Card
from .deck import DeckConfig
from .piles import Pile, PileType
from .rules_schema import (
    AllCardsInFoundation,
    BlockingStatus,
    BlockingTable,
    CustomBlocking,
    CustomWin,
    DealPattern,
    FlipCondition,
    FlipRule,
    FlippingTable,
    FoundationComplete,
    PileCardCount,
    PileConfiguration,
    PileEmpty,
    PileNotEmpty,
    ScoringRule,
    ScoringTable,
    StockDrawingRules,
    TableauEmpty,
    WinCondition,
)

DEFAULT_MAXIMUM_SCORE = 1000


class RulesConfigurationError(ValueError):
    """Raised when a variant's tables are inconsistent with each other or the deck."""


class UnrecognizedCondition(RulesConfigurationError):
    """Raised when an interpreter meets a condition it has no evaluation for."""


def piles_of_type(state: Any, pile_type: PileType) -> List[Pile]:
    return [pile for pile in state.piles if pile.type is pile_type]


def _select(piles: Sequence[Pile], pile_index: Optional[int]) -> List[Pile]:
    if pile_index is None:
        return list(piles)
    return [pile for pile in piles if pile.index == pile_index]


class GameRules(ABC):
    """Abstract rule set; one concrete subclass per variant."""

    name = "Solitaire"

    def __init__(self, deck_config: DeckConfig) -> None:
        self.deck_config = deck_config
        self.validate()

    # Per-pile-type legality ---------------------------------------------

    @abstractmethod
    def is_valid_foundation_move(self, card: Card, target: Pile, state: Any) -> bool:
        """Return True if ``card`` may be placed on foundation ``target``."""

    @abstractmethod
    def is_valid_tableau_move(self, card: Card, target: Pile, state: Any) -> bool:
        """Return True if ``card`` may be placed on tableau ``target``."""

    def is_valid_free_cell_move(self, card: Card, target: Pile, state: Any) -> bool:
        if self.is_pile_type_blocked(PileType.FREECELL, state, target):
            return False
        return target.is_empty()

    def is_valid_move(self, card: Card, target: Pile, state: Any) -> bool:
        if card.position is not None and (
            card.position.pile_type == target.type.value and card.position.pile_index == target.index
        ):
            return False
        if target.is_full():
            return False
        if target.type is PileType.FOUNDATION:
            return self.is_valid_foundation_move(card, target, state)
        if target.type is PileType.TABLEAU:
            return self.is_valid_tableau_move(card, target, state)
        if target.type is PileType.FREECELL:
            return self.is_valid_free_cell_move(card, target, state)
        return False

    def get_valid_targets(self, card: Card, state: Any) -> List[Pile]:
        return [pile for pile in state.piles if self.is_valid_move(card, pile, state)]

    # Sources and runs ---------------------------------------------------

    @abstractmethod
    def can_card_be_moved_from_pile(self, card: Card, source: Pile, state: Any) -> bool:
        """Gate checked before target legality: may ``card`` leave ``source`` at all."""

    @abstractmethod
    def is_valid_run(self, cards: Sequence[Card]) -> bool:
        """Return True if ``cards`` (bottom to top) form a run this variant moves as a unit."""

    def run_from(self, card: Card, pile: Pile) -> List[Card]:
        index = pile.index_of(card)
        if index is None:
            return []
        return pile.cards_from(index)

    def max_movable_cards(self, state: Any, target: Optional[Pile] = None) -> Optional[int]:
        """Largest run that may move at once; ``None`` means unlimited."""
        return None

    def can_move_stack(self, cards: Sequence[Card], target: Pile, state: Any) -> bool:
        if not cards:
            return False
        # Runs only ever build on the tableau; foundations and cells take single cards.
        if len(cards) > 1 and target.type is not PileType.TABLEAU:
            return False
        if not self.is_valid_run(cards):
            return False
        if not target.has_room_for(len(cards)):
            return False
        if not self.is_valid_move(cards[0], target, state):
            return False
        limit = self.max_movable_cards(state, target)
        return limit is None or len(cards) <= limit

    # Declarative layout ---------------------------------------------------

    @abstractmethod
    def get_pile_configuration(self) -> PileConfiguration:
        """Per pile type: how many piles to create."""

    @abstractmethod
    def get_deal_pattern(self) -> DealPattern:
        """How the shuffled deck is distributed at game start."""

    def uses_stock_waste(self) -> bool:
        config = self.get_pile_configuration()
        stock = config.get(PileType.STOCK)
        waste = config.get(PileType.WASTE)
        return bool(stock and stock.effective_count and waste and waste.effective_count)

    # Blocking interpreter ----------------------------------------------------

    def get_blocking_conditions(self) -> BlockingTable:
        return {}

    def is_pile_type_blocked(self, pile_type: PileType, state: Any, target: Optional[Pile] = None) -> bool:
        conditions = self.get_blocking_conditions().get(pile_type, [])
        return any(self.evaluate_blocking_condition(condition, state, target) for condition in conditions)

    def evaluate_blocking_condition(self, condition: Any, state: Any, target: Optional[Pile] = None) -> bool:
        if isinstance(condition, PileNotEmpty):
            piles = _select(piles_of_type(state, condition.pile_type), condition.pile_index)
            return any(not pile.is_empty() for pile in piles)
        if isinstance(condition, PileEmpty):
            piles = _select(piles_of_type(state, condition.pile_type), condition.pile_index)
            if condition.pile_index is not None and not piles:
                return True
            return all(pile.is_empty() for pile in piles)
        if isinstance(condition, PileCardCount):
            piles = _select(piles_of_type(state, condition.pile_type), condition.pile_index)
            return any(condition.operator.compare(len(pile), condition.count) for pile in piles)
        if isinstance(condition, CustomBlocking):
            return self.evaluate_custom_blocking(condition, state, target)
        raise UnrecognizedCondition(f"Unknown blocking condition: {condition!r}")

    def evaluate_custom_blocking(self, condition: CustomBlocking, state: Any, target: Optional[Pile]) -> bool:
        raise UnrecognizedCondition(f"{type(self).__name__} does not implement custom blocking {condition.name!r}")

    def has_blocking_conditions(self, pile_type: PileType) -> bool:
        return bool(self.get_blocking_conditions().get(pile_type))

    def blocking_status(self, pile: Pile, state: Any) -> BlockingStatus:
        for condition in self.get_blocking_conditions().get(pile.type, []):
            if self.evaluate_blocking_condition(condition, state, pile):
                return BlockingStatus(
                    is_blocked=True,
                    description=condition.description or "This pile is blocked",
                    condition=condition,
                )
        return BlockingStatus(is_blocked=False)

    def blocked_piles(self, pile_type: PileType, state: Any) -> List[Pile]:
        return [pile for pile in piles_of_type(state, pile_type) if self.is_pile_type_blocked(pile_type, state, pile)]

    # Win interpreter -----------------------------------------------------------

    def get_win_conditions(self) -> List[WinCondition]:
        return [FoundationComplete(cards_per_pile=13, required="all", description="All foundations complete")]

    def check_win_condition(self, state: Any) -> bool:
        conditions = self.get_win_conditions()
        if not conditions:
            return False
        return all(self.evaluate_win_condition(condition, state) for condition in conditions)

    def evaluate_win_condition(self, condition: Any, state: Any) -> bool:
        if isinstance(condition, FoundationComplete):
            counts = [len(pile) == condition.cards_per_pile for pile in piles_of_type(state, PileType.FOUNDATION)]
            if not counts:
                return False
            return all(counts) if condition.required == "all" else any(counts)
        if isinstance(condition, TableauEmpty):
            empties = [pile.is_empty() for pile in piles_of_type(state, PileType.TABLEAU)]
            return all(empties) if condition.required == "all" else any(empties)
        if isinstance(condition, AllCardsInFoundation):
            in_foundation = sum(len(pile) for pile in piles_of_type(state, PileType.FOUNDATION))
            return bool(state.cards) and in_foundation == len(state.cards)
        if isinstance(condition, CustomWin):
            return self.check_custom_win(condition, state)
        raise UnrecognizedCondition(f"Unknown win condition: {condition!r}")

    def check_custom_win(self, condition: CustomWin, state: Any) -> bool:
        raise UnrecognizedCondition(f"{type(self).__name__} does not implement custom win {condition.name!r}")

    # Scoring ---------------------------------------------------------------

    def get_scoring_rules(self) -> ScoringTable:
        return {
            PileType.FOUNDATION: ScoringRule(points=10),
            PileType.TABLEAU: ScoringRule(points=1),
            PileType.FREECELL: ScoringRule(points=0),
            PileType.STOCK: ScoringRule(points=0),
            PileType.WASTE: ScoringRule(points=0),
        }

    def get_move_score(self, card: Card, target: Pile, state: Any) -> int:
        rule = self.get_scoring_rules().get(target.type)
        if rule is None:
            return 0
        return rule.points + rule.bonus

    def get_maximum_score(self) -> int:
        """Advisory ceiling, only used to flag runaway scoring."""
        return DEFAULT_MAXIMUM_SCORE

    # Stock and flipping ----------------------------------------------------

    def get_stock_drawing_rules(self) -> StockDrawingRules:
        return StockDrawingRules()

    def get_card_flipping_rules(self) -> FlippingTable:
        return {
            PileType.TABLEAU: FlipRule(flip_on_move=True, flip_condition=FlipCondition.FACE_DOWN),
            PileType.FOUNDATION: FlipRule(),
            PileType.STOCK: FlipRule(),
        }

    # Description -----------------------------------------------------------

    def rules_description(self) -> str:
        return self.name

    # Validation ------------------------------------------------------------

    def validate(self) -> None:
        """Cross-check the tables against each other and the deck."""
        layout = self.get_pile_configuration()
        pattern = self.get_deal_pattern()

        for pile_type, deal in pattern.piles.items():
            declared = layout.get(pile_type)
            available = declared.effective_count if declared else 0
            if deal.piles > available:
                raise RulesConfigurationError(
                    f"Deal pattern deals into {deal.piles} {pile_type.value} piles but only {available} exist."
                )
            capacity = declared.max_cards if declared else None
            if capacity is not None and any(count > capacity for count in deal.cards_per_pile):
                raise RulesConfigurationError(f"Deal pattern overfills {pile_type.value} piles (max {capacity}).")
            if deal.redirect is not None:
                target = layout.get(deal.redirect.target_pile_type)
                target_count = target.effective_count if target else 0
                for suit, index in deal.redirect.index_by_suit.items():
                    if not 0 <= index < target_count:
                        raise RulesConfigurationError(
                            f"Redirect for {suit!r} points at missing {deal.redirect.target_pile_type.value} pile {index}."
                        )

        deck_size = self.deck_config.deck_size or self.deck_config.computed_size()
        redirected = self._redirected_card_count()
        if pattern.total_cards() + redirected != deck_size:
            raise RulesConfigurationError(
                f"Deal pattern places {pattern.total_cards()} cards (+{redirected} redirected) "
                f"but the deck holds {deck_size}."
            )

        drawing = self.get_stock_drawing_rules()
        if drawing.cards_per_draw and not self.uses_stock_waste():
            raise RulesConfigurationError("Stock drawing rules configured without stock and waste piles.")

    def _redirected_card_count(self) -> int:
        """Count the cards of a fresh deck that the deal pattern will redirect."""
        redirects = [deal.redirect for deal in self.get_deal_pattern().piles.values() if deal.redirect is not None]
        if not redirects:
            return 0
        return sum(
            1 for card in self.deck_config.create_deck() if any(redirect.matches(card) for redirect in redirects)
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(deck={self.deck_config.name!r})"
