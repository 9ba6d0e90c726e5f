"""Variant registry: maps a variant id to its deck and rule set."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Tuple, Type, Union

from ..deck import DeckConfig, standard_deck, tarot_deck
from ..rules import GameRules
from .fortunes import FortunesFoundationRules
from .freecell import FreeCellRules
from .klondike import KlondikeRules
from .sawayama import SawayamaRules


class UnknownVariant(ValueError):
    """Raised when a variant id has no registered rule set."""


class Variant(str, Enum):
    KLONDIKE = "klondike"
    FREECELL = "freecell"
    FORTUNES = "fortunes"
    SAWAYAMA = "sawayama"

    def __str__(self) -> str:
        return self.value


VARIANTS: dict[Variant, Tuple[Callable[[], DeckConfig], Type[GameRules]]] = {
    Variant.KLONDIKE: (standard_deck, KlondikeRules),
    Variant.FREECELL: (standard_deck, FreeCellRules),
    Variant.FORTUNES: (tarot_deck, FortunesFoundationRules),
    Variant.SAWAYAMA: (standard_deck, SawayamaRules),
}


def _normalize(variant: Union[Variant, str]) -> Variant:
    try:
        return Variant(variant)
    except ValueError as exc:
        raise UnknownVariant(f"Unknown variant: {variant!r}") from exc


def create_variant(variant: Union[Variant, str]) -> Tuple[DeckConfig, GameRules]:
    """Return a fresh ``(DeckConfig, GameRules)`` pair for ``variant``."""
    deck_factory, rules_cls = VARIANTS[_normalize(variant)]
    deck = deck_factory()
    return deck, rules_cls(deck)


def rules_for(variant: Union[Variant, str]) -> GameRules:
    return create_variant(variant)[1]


__all__ = [
    "Variant",
    "UnknownVariant",
    "VARIANTS",
    "create_variant",
    "rules_for",
    "KlondikeRules",
    "FreeCellRules",
    "FortunesFoundationRules",
    "SawayamaRules",
]
