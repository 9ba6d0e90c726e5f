"""Generalized solitaire engine: one orchestrator, many rule sets."""

__all__ = [
    "cards",
    "piles",
    "deck",
    "rules_schema",
    "rules",
    "variants",
    "game",
    "service",
]
