"""Meal analysis use cases."""

from mealscan.application.meal.credential_resolver import (
    CredentialResolver,
    ResolvedProvider,
)
from mealscan.application.meal.orchestrator import MealAnalysisOrchestrator

__all__ = [
    "CredentialResolver",
    "ResolvedProvider",
    "MealAnalysisOrchestrator",
]
