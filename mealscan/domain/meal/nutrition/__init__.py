"""Static nutrition reference data."""

from mealscan.domain.meal.nutrition.macro_reference import (
    DEFAULT_MACRO_REFERENCE,
    MacroProfile,
    MacroReference,
)

__all__ = ["DEFAULT_MACRO_REFERENCE", "MacroProfile", "MacroReference"]
