"""Validation schema for the declarative tables a variant publishes.

Every table a :class:`~solitaire.rules.GameRules` implementation returns is one
of the models below.  Conditions are tagged unions keyed on ``kind`` so an
unknown condition or comparison operator is rejected when the table is built
instead of silently evaluating to ``False`` later.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from .cards import Card
from .piles import PileType


# Pile layout ----------------------------------------------------------------


class PileLayout(BaseModel):
    count: int = Field(0, ge=0, description="Number of piles of this type.")
    create: bool = Field(True, description="Whether the piles exist at all.")
    max_cards: Optional[int] = Field(None, ge=1, description="Capacity of each pile, if limited.")

    @property
    def effective_count(self) -> int:
        return self.count if self.create else 0


PileConfiguration = dict[PileType, PileLayout]


# Deal pattern ---------------------------------------------------------------


class FaceUpPolicy(str, Enum):
    PER_PILE = "per_pile"
    TOP_ONLY = "top_only"


class DealRedirect(BaseModel):
    """Routes matching cards straight to a mapped pile while dealing."""

    predicate: Callable[[Card], bool]
    target_pile_type: PileType = PileType.FOUNDATION
    index_by_suit: dict[str, int]
    face_up: bool = True

    def matches(self, card: Card) -> bool:
        return bool(self.predicate(card)) and card.suit in self.index_by_suit

    def target_index(self, card: Card) -> int:
        return self.index_by_suit[card.suit]


class PileDeal(BaseModel):
    cards_per_pile: list[int]
    face_up: list[bool]
    face_up_policy: FaceUpPolicy = FaceUpPolicy.PER_PILE
    redirect: Optional[DealRedirect] = None

    @field_validator("cards_per_pile")
    @classmethod
    def validate_counts(cls, value: list[int]) -> list[int]:
        for count in value:
            if count < 0:
                raise ValueError(f"Card counts must not be negative: {value!r}")
        return value

    @model_validator(mode="after")
    def check_lengths(self) -> "PileDeal":
        if len(self.face_up) != len(self.cards_per_pile):
            raise ValueError("face_up must list one entry per pile in cards_per_pile.")
        return self

    @classmethod
    def uniform(
        cls,
        cards_per_pile: list[int],
        face_up: bool = True,
        *,
        policy: FaceUpPolicy = FaceUpPolicy.PER_PILE,
        redirect: Optional[DealRedirect] = None,
    ) -> "PileDeal":
        return cls(
            cards_per_pile=list(cards_per_pile),
            face_up=[face_up] * len(cards_per_pile),
            face_up_policy=policy,
            redirect=redirect,
        )

    @classmethod
    def empty(cls, piles: int) -> "PileDeal":
        return cls.uniform([0] * piles, face_up=False)

    @property
    def piles(self) -> int:
        return len(self.cards_per_pile)

    def is_face_up(self, pile_index: int, position: int) -> bool:
        if self.face_up_policy is FaceUpPolicy.TOP_ONLY:
            return position == self.cards_per_pile[pile_index] - 1
        return self.face_up[pile_index]


class DealPattern(BaseModel):
    order: list[PileType]
    piles: dict[PileType, PileDeal]

    @model_validator(mode="after")
    def check_order(self) -> "DealPattern":
        if len(set(self.order)) != len(self.order):
            raise ValueError("Deal order lists a pile type more than once.")
        missing = [pile_type.value for pile_type in self.order if pile_type not in self.piles]
        if missing:
            raise ValueError(f"Deal order references undeclared pile types: {missing}")
        return self

    def total_cards(self) -> int:
        """Cards consumed by the declared counts (redirected cards excluded)."""
        return sum(sum(self.piles[pile_type].cards_per_pile) for pile_type in self.order)


# Comparison operators -------------------------------------------------------


class ComparisonOperator(str, Enum):
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    def compare(self, actual: int, expected: int) -> bool:
        if self is ComparisonOperator.EQ:
            return actual == expected
        if self is ComparisonOperator.NE:
            return actual != expected
        if self is ComparisonOperator.LT:
            return actual < expected
        if self is ComparisonOperator.LE:
            return actual <= expected
        if self is ComparisonOperator.GT:
            return actual > expected
        return actual >= expected


OPERATOR_ALIASES = {"=": "==", "<>": "!="}


# Blocking conditions --------------------------------------------------------


class _Condition(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None


class PileNotEmpty(_Condition):
    kind: Literal["pile_not_empty"] = "pile_not_empty"
    pile_type: PileType
    pile_index: Optional[int] = None


class PileEmpty(_Condition):
    kind: Literal["pile_empty"] = "pile_empty"
    pile_type: PileType
    pile_index: Optional[int] = None


class PileCardCount(_Condition):
    kind: Literal["pile_card_count"] = "pile_card_count"
    pile_type: PileType
    operator: ComparisonOperator
    count: int = Field(..., ge=0)
    pile_index: Optional[int] = None

    @field_validator("operator", mode="before")
    @classmethod
    def normalize_operator(cls, value: Any) -> Any:
        if isinstance(value, str):
            return OPERATOR_ALIASES.get(value, value)
        return value


class CustomBlocking(_Condition):
    kind: Literal["custom"] = "custom"
    name: str


BlockingCondition = Annotated[
    Union[PileNotEmpty, PileEmpty, PileCardCount, CustomBlocking],
    Field(discriminator="kind"),
]
BlockingTable = dict[PileType, list[BlockingCondition]]

BLOCKING_TABLE_ADAPTER: TypeAdapter[BlockingTable] = TypeAdapter(BlockingTable)


# Win conditions -------------------------------------------------------------


Quantifier = Literal["all", "any"]


class FoundationComplete(_Condition):
    kind: Literal["foundation_complete"] = "foundation_complete"
    cards_per_pile: int = Field(13, ge=0)
    required: Quantifier = "all"


class TableauEmpty(_Condition):
    kind: Literal["tableau_empty"] = "tableau_empty"
    required: Quantifier = "all"


class AllCardsInFoundation(_Condition):
    kind: Literal["all_cards_in_foundation"] = "all_cards_in_foundation"


class CustomWin(_Condition):
    kind: Literal["custom"] = "custom"
    name: str


WinCondition = Annotated[
    Union[FoundationComplete, TableauEmpty, AllCardsInFoundation, CustomWin],
    Field(discriminator="kind"),
]

WIN_CONDITIONS_ADAPTER: TypeAdapter[list[WinCondition]] = TypeAdapter(list[WinCondition])


def parse_blocking_table(payload: Any) -> BlockingTable:
    """Validate a plain mapping (e.g. loaded from a file) into a blocking table."""
    return BLOCKING_TABLE_ADAPTER.validate_python(payload)


def parse_win_conditions(payload: Any) -> list[WinCondition]:
    return WIN_CONDITIONS_ADAPTER.validate_python(payload)


# Scoring, stock and flipping -----------------------------------------------


class ScoringRule(BaseModel):
    points: int = 0
    bonus: int = 0


ScoringTable = dict[PileType, ScoringRule]


class StockDrawingRules(BaseModel):
    cards_per_draw: int = Field(0, ge=0, description="Cards moved from stock to waste per draw.")
    redeal_when_empty: bool = False
    shuffle_on_redeal: bool = False
    face_up_on_draw: bool = True
    face_down_on_redeal: bool = True


class FlipCondition(str, Enum):
    NEVER = "never"
    FACE_DOWN = "face_down"
    ALWAYS = "always"


class FlipRule(BaseModel):
    flip_on_move: bool = False
    flip_condition: FlipCondition = FlipCondition.NEVER

    def should_flip(self, card: Card) -> bool:
        if not self.flip_on_move:
            return False
        if self.flip_condition is FlipCondition.FACE_DOWN:
            return not card.face_up
        return self.flip_condition is FlipCondition.ALWAYS


FlippingTable = dict[PileType, FlipRule]


@dataclass(frozen=True)
class BlockingStatus:
    is_blocked: bool
    description: Optional[str] = None
    condition: Optional[Any] = None
