"""Convenience service layer for presentation code.

The presentation layer addresses cards by coordinates (pile type, pile index,
card index), reads plain views after every call and never touches the live
``Pile``/``Card`` objects.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional, Union

from .cards import Card, card_label, card_short_label, serialize_card
from .deck import DeckConfig
from .game import Game, MoveRecord
from .piles import InvalidOperation, Pile, PileType
from .rules import GameRules
from .variants import Variant, create_variant


@dataclass
class CardView:
    card_index: int
    face_up: bool
    card: Optional[dict]
    label: Optional[str]
    short_label: Optional[str]
    color: Optional[str]
    valid_targets: list[tuple[str, int]]


@dataclass
class PileView:
    type: str
    index: int
    max_cards: Optional[int]
    cards: list[CardView]
    blocked: bool
    blocked_reason: Optional[str]


@dataclass
class MoveView:
    kind: str
    cards: list[str]
    source: str
    target: str
    score_delta: int
    flipped: Optional[str]
    timestamp: float


@dataclass
class GameView:
    variant: str
    rules: str
    score: int
    game_started: bool
    game_won: bool
    deck_size: int
    piles: list[PileView]
    moves: list[MoveView]
    uses_stock: bool


class GameService:
    """Facade around ``Game`` for UI consumers."""

    def __init__(
        self,
        variant: Union[Variant, str, None] = None,
        *,
        deck: Optional[DeckConfig] = None,
        rules: Optional[GameRules] = None,
        seed: Optional[int] = None,
        game: Optional[Game] = None,
    ) -> None:
        if game is None:
            if rules is None:
                deck, rules = create_variant(variant or Variant.KLONDIKE)
            game = Game(deck or rules.deck_config, rules, seed=seed)
        self.game = game

    # Lifecycle ---------------------------------------------------------

    def start_new_game(self) -> GameView:
        self.game.start_new_game()
        return self.get_view()

    def has_active_game(self) -> bool:
        return self.game.game_started

    # Actions -----------------------------------------------------------

    def move(
        self,
        source_type: Union[PileType, str],
        source_index: int,
        card_index: int,
        target_type: Union[PileType, str],
        target_index: int,
    ) -> tuple[bool, GameView]:
        """Move the addressed card (and everything above it) to the target pile."""
        card = self._require_card(source_type, source_index, card_index)
        target = self._require_pile(target_type, target_index)
        moved = self.game.move_run(card, target)
        return moved, self.get_view()

    def draw(self) -> tuple[bool, GameView]:
        drew = self.game.draw_from_stock()
        return drew, self.get_view()

    def undo(self) -> tuple[bool, GameView]:
        undone = self.game.undo_move()
        return undone, self.get_view()

    def valid_targets(self, source_type: Union[PileType, str], source_index: int, card_index: int) -> list[tuple[str, int]]:
        card = self._require_card(source_type, source_index, card_index)
        return self._targets_for(card, self._require_pile(source_type, source_index))

    # Views -------------------------------------------------------------

    def get_view(self, *, reveal_hidden: bool = False) -> GameView:
        game = self.game
        return GameView(
            variant=game.rules.name,
            rules=game.rules.rules_description(),
            score=game.score,
            game_started=game.game_started,
            game_won=game.game_won,
            deck_size=game.deck_config.deck_size or game.deck_config.computed_size(),
            piles=[self._pile_view(pile, reveal_hidden) for pile in game.piles],
            moves=[self._move_view(record) for record in game.moves],
            uses_stock=game.rules.uses_stock_waste(),
        )

    def snapshot(self) -> dict:
        """Plain-data view with every card revealed, for persistence or comparison."""
        return serialize_view(self.get_view(reveal_hidden=True))

    # Helpers -----------------------------------------------------------

    def _pile_view(self, pile: Pile, reveal_hidden: bool) -> PileView:
        status = self.game.rules.blocking_status(pile, self.game)
        return PileView(
            type=pile.type.value,
            index=pile.index,
            max_cards=pile.max_cards,
            cards=[self._card_view(i, card, pile, reveal_hidden) for i, card in enumerate(pile.cards)],
            blocked=status.is_blocked,
            blocked_reason=status.description,
        )

    def _card_view(self, card_index: int, card: Card, pile: Pile, reveal_hidden: bool) -> CardView:
        if not card.face_up and not reveal_hidden:
            return CardView(
                card_index=card_index,
                face_up=False,
                card=None,
                label=None,
                short_label=None,
                color=None,
                valid_targets=[],
            )
        return CardView(
            card_index=card_index,
            face_up=card.face_up,
            card=serialize_card(card),
            label=card_label(card),
            short_label=card_short_label(card),
            color=card.color,
            valid_targets=self._targets_for(card, pile),
        )

    def _targets_for(self, card: Card, source: Pile) -> list[tuple[str, int]]:
        rules = self.game.rules
        if not rules.can_card_be_moved_from_pile(card, source, self.game):
            return []
        run = rules.run_from(card, source)
        if len(run) == 1:
            targets = self.game.get_valid_moves(card)
        else:
            targets = [pile for pile in self.game.piles if rules.can_move_stack(run, pile, self.game)]
        return [(pile.type.value, pile.index) for pile in targets]

    def _move_view(self, record: MoveRecord) -> MoveView:
        return MoveView(
            kind=record.kind.value,
            cards=[card_short_label(card) for card in record.cards],
            source=str(record.from_pile),
            target=str(record.to_pile),
            score_delta=record.score_delta,
            flipped=card_short_label(record.flipped_card) if record.flipped_card is not None else None,
            timestamp=record.timestamp,
        )

    def _require_pile(self, pile_type: Union[PileType, str], index: int) -> Pile:
        if not self.game.game_started:
            raise InvalidOperation("No active game.")
        pile = self.game.get_pile(PileType(pile_type), index)
        if pile is None:
            raise InvalidOperation(f"No {PileType(pile_type).value} pile {index}.")
        return pile

    def _require_card(self, pile_type: Union[PileType, str], pile_index: int, card_index: int) -> Card:
        card = self._require_pile(pile_type, pile_index).get_card(card_index)
        if card is None:
            raise InvalidOperation(f"No card at {PileType(pile_type).value} {pile_index}:{card_index}.")
        return card


def serialize_view(view: GameView) -> dict:
    return asdict(view)
