"""High-level game orchestration shared by every solitaire variant.

``Game`` owns the live cards and piles.  Every variant-specific decision
(what piles exist, how to deal, whether a move is legal, whether the game is
won) is delegated to the injected :class:`~solitaire.rules.GameRules`; the
orchestrator itself only moves cards between piles, keeps score and keeps the
undo log.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from random import Random
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence, Tuple

from .cards import Card
from .deck import DeckConfig, shuffle_cards
from .piles import CapacityExceeded, InvalidOperation, Pile, PileType
from .rules import GameRules
from .rules_schema import DealRedirect

logger = logging.getLogger(__name__)


class DealError(InvalidOperation):
    """Raised when the deal pattern does not consume the deck exactly."""


class MoveKind(Enum):
    MOVE = "move"
    STACK = "stack"
    DRAW = "draw"
    REDEAL = "redeal"


@dataclass
class MoveRecord:
    """Everything needed to replay a move for history or invert it for undo."""

    kind: MoveKind
    cards: Tuple[Card, ...]
    from_pile: Pile
    to_pile: Pile
    timestamp: float = field(default_factory=time.time)
    score_delta: int = 0
    flipped_card: Optional[Card] = None
    previous_face_up: Tuple[bool, ...] = ()

    @property
    def card(self) -> Card:
        return self.cards[0]


@dataclass(frozen=True)
class GameEvent:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)


Observer = Callable[[GameEvent], None]


@dataclass(eq=False)
class Game:
    """One solitaire session: a deck, a rule set and the live table."""

    deck_config: DeckConfig
    rules: GameRules
    rng: Optional[Random] = None
    seed: Optional[int] = None
    observer: Optional[Observer] = None

    cards: Tuple[Card, ...] = field(init=False, default=())
    piles: List[Pile] = field(init=False, default_factory=list)
    score: int = field(init=False, default=0)
    moves: List[MoveRecord] = field(init=False, default_factory=list)
    game_started: bool = field(init=False, default=False)
    game_won: bool = field(init=False, default=False)
    selected_card: Optional[Card] = field(init=False, default=None)
    _pile_lookup: Dict[Tuple[PileType, int], Pile] = field(init=False, default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.rng is None:
            self.rng = Random(self.seed)
        if self.rules.deck_config is not self.deck_config and self.rules.deck_config != self.deck_config:
            raise ValueError("Rules were built for a different deck configuration.")

    # Dealing -----------------------------------------------------------

    def start_new_game(self) -> None:
        cards = self.deck_config.create_deck()
        shuffle_cards(cards, self.rng)
        self.cards = tuple(cards)
        self.create_piles()
        self.deal_initial_cards()

        self.score = 0
        self.moves = []
        self.game_started = True
        self.game_won = False
        self.selected_card = None
        logger.debug("Dealt %d cards into %d piles for %s", len(self.cards), len(self.piles), self.rules.name)
        self._emit("deal", cards=len(self.cards), piles=len(self.piles))
        self.check_win_condition()

    def create_piles(self) -> None:
        for pile in self.piles:
            pile.clear()
        self.piles = []
        for pile_type, layout in self.rules.get_pile_configuration().items():
            for index in range(layout.effective_count):
                self.piles.append(Pile(pile_type, index, max_cards=layout.max_cards))
        self._pile_lookup = {(pile.type, pile.index): pile for pile in self.piles}

    def deal_initial_cards(self) -> None:
        pattern = self.rules.get_deal_pattern()
        redirects = [deal.redirect for deal in pattern.piles.values() if deal.redirect is not None]
        remaining: Deque[Card] = deque(self.cards)

        for pile_type in pattern.order:
            deal = pattern.piles[pile_type]
            for pile_index, count in enumerate(deal.cards_per_pile):
                pile = self._pile_lookup.get((pile_type, pile_index))
                if pile is None:
                    raise DealError(f"Deal pattern targets missing {pile_type.value} pile {pile_index}.")
                placed = 0
                while placed < count:
                    if not remaining:
                        raise DealError(f"Ran out of cards while dealing {pile}.")
                    card = remaining.popleft()
                    if deal.redirect is not None and deal.redirect.matches(card):
                        self._redirect(card, deal.redirect)
                        continue
                    card.face_up = deal.is_face_up(pile_index, placed)
                    pile.add_card(card)
                    placed += 1

        # Redirected cards sitting past the declared share still belong to their target.
        while remaining:
            card = remaining.popleft()
            redirect = next((r for r in redirects if r.matches(card)), None)
            if redirect is None:
                raise DealError(f"{len(remaining) + 1} cards left over after the deal pattern was exhausted.")
            self._redirect(card, redirect)

    def _redirect(self, card: Card, redirect: DealRedirect) -> None:
        target = self._pile_lookup.get((redirect.target_pile_type, redirect.target_index(card)))
        if target is None:
            raise DealError(f"Redirect target for {card} does not exist.")
        card.face_up = redirect.face_up
        target.add_card(card)

    # Lookups -----------------------------------------------------------

    def get_pile(self, pile_type: PileType, index: int) -> Optional[Pile]:
        return self._pile_lookup.get((PileType(pile_type), index))

    def piles_of_type(self, pile_type: PileType) -> List[Pile]:
        pile_type = PileType(pile_type)
        return [pile for pile in self.piles if pile.type is pile_type]

    def find_card_pile(self, card: Card) -> Optional[Pile]:
        position = card.position
        if position is None:
            return None
        pile = self._pile_lookup.get((PileType(position.pile_type), position.pile_index))
        if pile is None or pile.get_card(position.card_index) is not card:
            return None
        return pile

    def total_cards_in_piles(self) -> int:
        return sum(len(pile) for pile in self.piles)

    def get_valid_moves(self, card: Card) -> List[Pile]:
        return self.rules.get_valid_targets(card, self)

    # Moves -------------------------------------------------------------

    def is_valid_move(self, card: Card, target: Pile) -> bool:
        return self.rules.is_valid_move(card, target, self)

    def make_move(self, card: Card, target: Pile) -> bool:
        """Move a single top card; returns False and changes nothing if illegal."""
        source = self._require_source(card)
        self._require_own_pile(target)
        if source.top_card() is not card:
            return False
        if not self.rules.can_card_be_moved_from_pile(card, source, self):
            return False
        if not self.rules.is_valid_move(card, target, self):
            return False

        record = self._transfer(MoveKind.MOVE, [card], source, target)
        self._after_move("move", record)
        return True

    def make_stack_move(self, card: Card, target: Pile, card_stack: Sequence[Card]) -> bool:
        """Move ``card_stack`` (``card`` at its bottom) as one unit.

        The caller is expected to have checked ``can_move_stack``; only the
        source and target gates are re-checked here.
        """
        stack = list(card_stack)
        if not stack or stack[0] is not card:
            raise InvalidOperation("The stack must start with the selected card.")
        source = self._require_source(card)
        self._require_own_pile(target)
        top_segment = source.cards[len(source) - len(stack):] if len(stack) <= len(source) else []
        if len(top_segment) != len(stack) or any(a is not b for a, b in zip(top_segment, stack)):
            raise InvalidOperation(f"The stack is not the top segment of {source}.")
        if not self.rules.can_card_be_moved_from_pile(card, source, self):
            return False
        if not self.rules.is_valid_move(card, target, self):
            return False
        if not target.has_room_for(len(stack)):
            raise CapacityExceeded(f"{target} cannot take a run of {len(stack)} cards.")

        record = self._transfer(MoveKind.STACK, stack, source, target)
        self._after_move("stack_move", record)
        return True

    def move_run(self, card: Card, target: Pile) -> bool:
        """Move ``card`` together with every card above it, if the rules allow it."""
        source = self._require_source(card)
        run = self.rules.run_from(card, source)
        if len(run) == 1:
            return self.make_move(card, target)
        self._require_own_pile(target)
        if not self.rules.can_card_be_moved_from_pile(card, source, self):
            return False
        if not self.rules.can_move_stack(run, target, self):
            return False
        return self.make_stack_move(card, target, run)

    def _transfer(self, kind: MoveKind, cards: List[Card], source: Pile, target: Pile) -> MoveRecord:
        source.remove_top_cards(len(cards))
        target.add_cards(cards)
        delta = self.rules.get_move_score(cards[0], target, self)
        self.score += delta
        flipped = self._flip_exposed_card(source)
        record = MoveRecord(
            kind=kind,
            cards=tuple(cards),
            from_pile=source,
            to_pile=target,
            score_delta=delta,
            flipped_card=flipped,
        )
        self.moves.append(record)
        logger.debug("%s %s: %s -> %s (%+d)", kind.value, cards[0], source, target, delta)
        return record

    def _flip_exposed_card(self, pile: Pile) -> Optional[Card]:
        rule = self.rules.get_card_flipping_rules().get(pile.type)
        top = pile.top_card()
        if rule is None or top is None or not rule.should_flip(top):
            return None
        top.flip()
        return top

    def _after_move(self, event: str, record: MoveRecord) -> None:
        self._emit(
            event,
            cards=len(record.cards),
            source=str(record.from_pile),
            target=str(record.to_pile),
            score=self.score,
        )
        self._check_score_ceiling()
        self.check_win_condition()

    def _check_score_ceiling(self) -> None:
        ceiling = self.rules.get_maximum_score()
        if self.score > ceiling:
            logger.warning("Score %d exceeds the advisory maximum %d for %s", self.score, ceiling, self.rules.name)
            self._emit("score_ceiling", score=self.score, maximum=ceiling)

    # Undo --------------------------------------------------------------

    def undo_move(self) -> bool:
        if not self.moves:
            return False
        record = self.moves.pop()

        if record.kind in (MoveKind.MOVE, MoveKind.STACK):
            if record.flipped_card is not None:
                record.flipped_card.flip()
            cards = record.to_pile.remove_top_cards(len(record.cards))
            record.from_pile.add_cards(cards)
            self.score -= record.score_delta
        elif record.kind is MoveKind.DRAW:
            drawn = record.to_pile.remove_top_cards(len(record.cards))
            faces = dict(zip(map(id, record.cards), record.previous_face_up))
            for card in reversed(drawn):
                card.face_up = faces[id(card)]
                record.from_pile.add_card(card)
        else:
            record.to_pile.clear()
            for card, face_up in zip(record.cards, record.previous_face_up):
                card.face_up = face_up
                record.from_pile.add_card(card)

        logger.debug("Undid %s of %d cards", record.kind.value, len(record.cards))
        self._emit("undo", kind=record.kind.value, cards=len(record.cards), score=self.score)
        self.check_win_condition()
        return True

    # Stock and waste ---------------------------------------------------

    def draw_from_stock(self) -> bool:
        """Draw from stock to waste, or recycle the waste when allowed.

        Returns False when neither is possible.
        """
        stock, waste = self._stock_and_waste()
        drawing = self.rules.get_stock_drawing_rules()

        if stock.is_empty():
            if drawing.redeal_when_empty and not waste.is_empty():
                return self.redeal_waste_to_stock()
            return False
        if drawing.cards_per_draw <= 0:
            return False

        count = min(drawing.cards_per_draw, len(stock))
        drawn: List[Card] = []
        faces: List[bool] = []
        for _ in range(count):
            card = stock.remove_top_card()
            faces.append(card.face_up)
            card.face_up = drawing.face_up_on_draw
            waste.add_card(card)
            drawn.append(card)

        self.moves.append(
            MoveRecord(
                kind=MoveKind.DRAW,
                cards=tuple(drawn),
                from_pile=stock,
                to_pile=waste,
                previous_face_up=tuple(faces),
            )
        )
        logger.debug("Drew %d cards, %d left in stock", count, len(stock))
        self._emit("draw", cards=count, stock=len(stock))
        self.check_win_condition()
        return True

    def redeal_waste_to_stock(self) -> bool:
        stock, waste = self._stock_and_waste()
        if not stock.is_empty():
            raise InvalidOperation("The waste can only be recycled into an empty stock.")
        if waste.is_empty():
            return False
        drawing = self.rules.get_stock_drawing_rules()

        previous = tuple(waste.cards)
        faces = tuple(card.face_up for card in previous)
        while not waste.is_empty():
            card = waste.remove_top_card()
            if drawing.face_down_on_redeal:
                card.face_up = False
            stock.add_card(card)
        if drawing.shuffle_on_redeal:
            stock.shuffle(self.rng)

        self.moves.append(
            MoveRecord(
                kind=MoveKind.REDEAL,
                cards=previous,
                from_pile=waste,
                to_pile=stock,
                previous_face_up=faces,
            )
        )
        logger.debug("Recycled %d waste cards into the stock", len(previous))
        self._emit("redeal", cards=len(previous))
        self.check_win_condition()
        return True

    def _stock_and_waste(self) -> Tuple[Pile, Pile]:
        stock = self.get_pile(PileType.STOCK, 0)
        waste = self.get_pile(PileType.WASTE, 0)
        if not self.rules.uses_stock_waste() or stock is None or waste is None:
            raise InvalidOperation(f"{self.rules.name} has no stock and waste piles.")
        return stock, waste

    # Status ------------------------------------------------------------

    def check_win_condition(self) -> bool:
        was_won = self.game_won
        self.game_won = self.game_started and self.rules.check_win_condition(self)
        if self.game_won and not was_won:
            logger.debug("%s won with score %d", self.rules.name, self.score)
            self._emit("won", score=self.score, moves=len(self.moves))
        return self.game_won

    def get_game_state(self) -> Dict[str, Any]:
        return {
            "cards": self.cards,
            "piles": self.piles,
            "score": self.score,
            "moves": self.moves,
            "game_started": self.game_started,
            "game_won": self.game_won,
            "selected_card": self.selected_card,
        }

    def reset(self) -> None:
        for pile in self.piles:
            pile.clear()
        self.cards = ()
        self.piles = []
        self._pile_lookup = {}
        self.score = 0
        self.moves = []
        self.game_started = False
        self.game_won = False
        self.selected_card = None

    # Helpers -----------------------------------------------------------

    def _require_source(self, card: Card) -> Pile:
        source = self.find_card_pile(card)
        if source is None:
            raise InvalidOperation(f"{card} is not on the table.")
        return source

    def _require_own_pile(self, pile: Pile) -> None:
        if self._pile_lookup.get((pile.type, pile.index)) is not pile:
            raise InvalidOperation(f"{pile} does not belong to this game.")

    def _emit(self, name: str, **payload: Any) -> None:
        if self.observer is not None:
            self.observer(GameEvent(name, payload))
