"""Approximate per-100g macro reference for classifier labels.

Keys are Food-101 style label fragments. Lookup is by substring: the
longest key contained in the label wins (ties broken alphabetically), so
"chocolate_cake" is preferred over a shorter "cake" key. Labels matching no
key use the DEFAULT entry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class MacroProfile:
    """Macros for 100 g of a food."""

    calories: float
    protein: float
    carbs: float
    fat: float

    def scaled(self, grams: float) -> "MacroProfile":
        factor = grams / 100.0
        return MacroProfile(
            calories=_round_half_up(self.calories * factor),
            protein=_round_half_up(self.protein * factor),
            carbs=_round_half_up(self.carbs * factor),
            fat=_round_half_up(self.fat * factor),
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


DEFAULT_KEY = "default"

_TABLE: Mapping[str, MacroProfile] = MappingProxyType(
    {
        "pizza": MacroProfile(calories=266, protein=11, carbs=33, fat=10),
        "hamburger": MacroProfile(calories=295, protein=17, carbs=24, fat=14),
        "sushi": MacroProfile(calories=140, protein=5, carbs=28, fat=1),
        "salad": MacroProfile(calories=30, protein=1, carbs=4, fat=0),
        "steak": MacroProfile(calories=271, protein=26, carbs=0, fat=19),
        "chicken_wings": MacroProfile(calories=203, protein=30, carbs=0, fat=8),
        "spaghetti_bolognese": MacroProfile(calories=150, protein=7, carbs=20, fat=5),
        "chocolate_cake": MacroProfile(calories=371, protein=5, carbs=53, fat=15),
        DEFAULT_KEY: MacroProfile(calories=150, protein=10, carbs=15, fat=5),
    }
)


class MacroReference:
    """Read-only label → macro lookup with a default fallback entry."""

    def __init__(self, table: Optional[Mapping[str, MacroProfile]] = None) -> None:
        table = dict(table if table is not None else _TABLE)
        if DEFAULT_KEY not in table:
            raise ValueError("Macro reference table requires a 'default' entry")
        self._default = table.pop(DEFAULT_KEY)
        # Longest key first so specific labels beat generic fragments
        self._keys = sorted(table, key=lambda k: (-len(k), k))
        self._table = MappingProxyType(table)

    @property
    def default(self) -> MacroProfile:
        return self._default

    def match_key(self, label: str) -> Optional[str]:
        """Return the key used for ``label``, or None for the default entry."""
        normalized = label.strip().lower().replace(" ", "_")
        for key in self._keys:
            if key in normalized:
                return key
        return None

    def lookup(self, label: str) -> MacroProfile:
        key = self.match_key(label)
        return self._table[key] if key is not None else self._default


DEFAULT_MACRO_REFERENCE = MacroReference()
