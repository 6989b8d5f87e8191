"""HuggingFace inference client - implements IVisionProvider port.

Two-stage pipeline over the hosted inference API:

1. Classification (Food-101 model): top 3 labels, each mapped to the
   macro reference at a 100 g portion; confidence is the top score.
2. Captioning (BLIP): only when stage 1 yields nothing usable; a single
   item named after the caption with the default reference macros.

The classifier only knows generic category labels and may fail on
unseen dishes; captioning is the lower-precision fallback that at least
names the dish.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

import httpx
import structlog

from mealscan.domain.meal.nutrition.macro_reference import (
    DEFAULT_MACRO_REFERENCE,
    MacroProfile,
    MacroReference,
)
from mealscan.domain.meal.recognition.models import MediaInput, ProviderKind
from mealscan.domain.meal.recognition.prompts import AnalysisPrompt
from mealscan.domain.shared.errors import NoFoodIdentified, UnsupportedMediaError
from mealscan.infrastructure.config import DEFAULT_HF_BASE_URL

logger = structlog.get_logger(__name__)

TOP_LABELS = 3
DEFAULT_PORTION_G = 100.0
CAPTION_CONFIDENCE = 0.5


def _score(value: Any) -> Optional[float]:
    """Prediction score as float; None when missing or not numeric."""
    if isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    return score if math.isfinite(score) else None


class HuggingFaceVisionClient:
    """
    HuggingFace classification + captioning client.

    Example:
        >>> async with HuggingFaceVisionClient(api_key=None) as client:
        ...     result = await client.analyze(media, prompt)
        >>> result["items"][0]["name"]
        'pizza'
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_HF_BASE_URL,
        classifier_model: str = "nateraw/food101",
        caption_model: str = "Salesforce/blip-image-captioning-large",
        macro_reference: MacroReference = DEFAULT_MACRO_REFERENCE,
        timeout: float = 30.0,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize HuggingFace client.

        Args:
            api_key: Optional HF token (anonymous calls when None)
            base_url: Inference API base URL
            classifier_model: Image-classification model id
            caption_model: Image-captioning model id
            macro_reference: Label → macros table
            timeout: Per-call timeout in seconds
            session: Optional pre-configured httpx client (for testing)
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._classifier_model = classifier_model
        self._caption_model = caption_model
        self._macros = macro_reference
        self._session = session or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> HuggingFaceVisionClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._session.aclose()

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.HUGGINGFACE

    async def analyze(
        self,
        media: MediaInput,
        prompt: AnalysisPrompt,
        model_override: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Classify the image, falling back to captioning.

        ``prompt`` is unused: the hosted models take no instructions.
        ``model_override`` replaces the classification model.

        Returns:
            {"items": [...], "confidence": float}

        Raises:
            UnsupportedMediaError: For audio input
            NoFoodIdentified: If both stages yield nothing
        """
        if media.is_audio:
            raise UnsupportedMediaError(
                "Provider 'huggingface' only accepts images; use gemini for audio."
            )
        image = media.decoded_bytes()

        items, confidence = await self._classify(
            image, media.mime_type, model_override or self._classifier_model
        )
        if not items:
            logger.info("huggingface.caption_fallback", model=self._caption_model)
            caption = await self._caption(image, media.mime_type)
            if caption:
                items = [self._item(caption, self._macros.default)]
                confidence = CAPTION_CONFIDENCE

        if not items:
            raise NoFoodIdentified()
        return {"items": items, "confidence": confidence}

    async def _classify(
        self, image: bytes, mime_type: str, model: str
    ) -> tuple[List[Dict[str, Any]], float]:
        payload = await self._post(model, image, mime_type, stage="classification")
        if not isinstance(payload, list):
            return [], CAPTION_CONFIDENCE

        scored = []
        for prediction in payload:
            if not isinstance(prediction, dict):
                continue
            label, score = prediction.get("label"), _score(prediction.get("score"))
            if isinstance(label, str) and label.strip() and score is not None:
                scored.append((score, label))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        top = scored[:TOP_LABELS]
        if not top:
            return [], CAPTION_CONFIDENCE

        items = [
            self._item(label.replace("_", " "), self._macros.lookup(label))
            for _, label in top
        ]
        confidence = min(1.0, max(0.0, top[0][0]))
        return items, confidence

    async def _caption(self, image: bytes, mime_type: str) -> Optional[str]:
        payload = await self._post(self._caption_model, image, mime_type, stage="caption")
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not isinstance(payload, dict):
            return None
        text = payload.get("generated_text")
        if not isinstance(text, str) or not text.strip():
            return None
        return text.strip()

    async def _post(self, model: str, image: bytes, mime_type: str, stage: str) -> Any:
        """POST raw image bytes; None on any failure (stage falls through)."""
        headers = {"Content-Type": mime_type}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        url = f"{self._base_url}/{model}"
        try:
            response = await self._session.post(url, content=image, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(f"huggingface.{stage}_failed", model=model, error=str(exc))
            return None
        if response.status_code >= 400:
            logger.warning(
                f"huggingface.{stage}_failed",
                model=model,
                status=response.status_code,
                body=response.text[:200],
            )
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning(f"huggingface.{stage}_failed", model=model, error="invalid JSON")
            return None

    @staticmethod
    def _item(name: str, profile: MacroProfile) -> Dict[str, Any]:
        scaled = profile.scaled(DEFAULT_PORTION_G)
        return {
            "name": name,
            "grams": DEFAULT_PORTION_G,
            "calories": scaled.calories,
            "protein": scaled.protein,
            "carbs": scaled.carbs,
            "fat": scaled.fat,
        }
