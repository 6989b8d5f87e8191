"""
Response normalization.

Converts each provider's raw output into the canonical AnalysisResult.
Generative text is fence-stripped and parsed as strict JSON; unparsable
text always fails with MalformedProviderResponse, there is no silent
substitution. Structured HuggingFace results skip the text stage.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Dict, List, Union

import structlog

from mealscan.domain.meal.recognition.models import (
    AnalysisResult,
    FoodItem,
    ProviderKind,
)
from mealscan.domain.meal.recognition.sanitizer import strip_code_fences
from mealscan.domain.shared.errors import MalformedProviderResponse, NoFoodIdentified

logger = structlog.get_logger(__name__)

RawProviderOutput = Union[str, Dict[str, Any]]

DEFAULT_CONFIDENCE = 0.5
DEFAULT_PORTION_G = 100.0

_MACRO_FIELDS = ("calories", "protein", "carbs", "fat")

_LEADING_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:[.,]\d+)?)")


def parse_provider_json(raw_text: str) -> Dict[str, Any]:
    """Strip fences and parse ``raw_text`` as a JSON object.

    Raises:
        MalformedProviderResponse: If the text is not a JSON object
    """
    cleaned = strip_code_fences(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedProviderResponse(raw_text, reason="invalid JSON") from exc
    if not isinstance(data, dict):
        raise MalformedProviderResponse(raw_text, reason="expected a JSON object")
    return data


def _to_number(value: Any, default: float) -> float:
    """Coerce a provider number (int, float or "150g"-style string), clamped at 0."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value)
        if not match:
            raise ValueError(f"not a number: {value!r}")
        value = match.group(1).replace(",", ".")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError("non-finite number")
    return max(0.0, number)


def _to_confidence(value: Any) -> float:
    try:
        conf = _to_number(value, DEFAULT_CONFIDENCE)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    # Some models answer in percent
    if 1.0 < conf <= 100.0:
        conf = conf / 100.0
    return min(1.0, conf)


def _parse_item(raw_item: Any) -> FoodItem:
    if not isinstance(raw_item, dict):
        raise TypeError("item is not an object")
    name = raw_item.get("name") or raw_item.get("label")
    if not isinstance(name, str):
        raise TypeError("item has no name")
    values = {f: _to_number(raw_item.get(f), 0.0) for f in _MACRO_FIELDS}
    return FoodItem(
        name=name,
        grams=_to_number(raw_item.get("grams"), DEFAULT_PORTION_G),
        **values,
    )


class ResponseNormalizer:
    """
    Normalize raw provider output into AnalysisResult.

    Example:
        >>> normalizer = ResponseNormalizer()
        >>> result = normalizer.normalize(
        ...     '```json {"items":[{"name":"Rice","grams":150,"calories":195,'
        ...     '"protein":4,"carbs":42,"fat":0}],"confidence":0.8} ```',
        ...     provider=ProviderKind.GEMINI,
        ...     result_key="items",
        ... )
        >>> result.items[0].name
        'Rice'
    """

    def normalize(
        self,
        raw: RawProviderOutput,
        provider: ProviderKind,
        result_key: str = "items",
    ) -> AnalysisResult:
        raw_text = raw if isinstance(raw, str) else json.dumps(raw)
        data = parse_provider_json(raw) if isinstance(raw, str) else raw

        raw_items = data.get(result_key)
        if raw_items is None and result_key == "options":
            # Tolerate models answering a search with an items list
            raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise MalformedProviderResponse(raw_text, reason=f"missing '{result_key}' list")

        items = self._parse_items(raw_items, provider)
        if raw_items and not items:
            raise MalformedProviderResponse(raw_text, reason=f"no valid '{result_key}' entries")

        if result_key == "options":
            return AnalysisResult(provider=provider, options=items)

        if not items:
            raise NoFoodIdentified()
        return AnalysisResult(
            provider=provider,
            items=items,
            confidence=_to_confidence(data.get("confidence")),
        )

    def _parse_items(self, raw_items: List[Any], provider: ProviderKind) -> List[FoodItem]:
        items: List[FoodItem] = []
        skipped = 0
        for raw_item in raw_items:
            try:
                items.append(_parse_item(raw_item))
            except (TypeError, ValueError):
                skipped += 1
        if skipped:
            logger.warning(
                "normalize.items_skipped",
                provider=ProviderKind(provider).value,
                skipped=skipped,
                kept=len(items),
            )
        return items
