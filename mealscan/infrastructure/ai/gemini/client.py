"""Gemini client - implements IVisionProvider port.

Key Features:
- Multimodal request: instruction text part + inline media blob
- Model fallback: one retry on a distinct model when the primary is not found
- Errors mapped to ProviderCallFailed (status code + message)
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from mealscan.domain.meal.recognition.models import MediaInput, ProviderKind
from mealscan.domain.meal.recognition.prompts import AnalysisPrompt
from mealscan.domain.shared.errors import ProviderCallFailed

logger = structlog.get_logger(__name__)


def is_model_not_found(exc: Exception) -> bool:
    """True for "model not found" class errors (HTTP 404 or message)."""
    if getattr(exc, "code", None) == 404:
        return True
    message = str(exc).lower()
    return "404" in message or "not found" in message


class GeminiVisionClient:
    """
    Gemini generative client implementing IVisionProvider port.

    Example:
        >>> client = GeminiVisionClient(api_key="AIza...")
        >>> text = await client.analyze(media, prompt)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        fallback_model: Optional[str] = "gemini-2.0-flash",
        client: Optional[Any] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Primary model name
            fallback_model: Model retried once when the primary is not found
            client: Optional pre-configured genai.Client (for testing)
        """
        self._client = client if client is not None else genai.Client(api_key=api_key)
        self._model = model
        self._fallback_model = fallback_model

    async def __aenter__(self) -> GeminiVisionClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        # genai.Client owns no per-request resources
        return None

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.GEMINI

    async def analyze(
        self,
        media: MediaInput,
        prompt: AnalysisPrompt,
        model_override: Optional[str] = None,
    ) -> str:
        """
        Send instruction + media and return the raw response text.

        Raises:
            ProviderCallFailed: On API errors (after the model fallback)
            InvalidMediaError: If the media payload is not valid base64
        """
        contents = [
            prompt.instruction,
            types.Part.from_bytes(data=media.decoded_bytes(), mime_type=media.mime_type),
        ]
        model = model_override or self._model
        start_time = time.time()

        try:
            response = await self._generate(model, contents)
        except genai_errors.APIError as exc:
            fallback = self._fallback_model
            if not is_model_not_found(exc) or not fallback or fallback == model:
                raise self._to_call_failed(exc) from exc
            logger.warning(
                "gemini.model_fallback",
                model=model,
                fallback_model=fallback,
                error=str(exc),
            )
            try:
                response = await self._generate(fallback, contents)
            except genai_errors.APIError as exc2:
                raise self._to_call_failed(exc2) from exc2

        logger.info(
            "gemini.response_received",
            media_kind=media.kind.value,
            processing_time_ms=int((time.time() - start_time) * 1000),
        )
        return response.text or ""

    async def _generate(self, model: str, contents: list[Any]) -> Any:
        try:
            return await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
            )
        except httpx.HTTPError as exc:
            raise ProviderCallFailed(ProviderKind.GEMINI.value, None, str(exc)) from exc

    @staticmethod
    def _to_call_failed(exc: genai_errors.APIError) -> ProviderCallFailed:
        status = getattr(exc, "code", None)
        body = getattr(exc, "message", None) or str(exc)
        return ProviderCallFailed(ProviderKind.GEMINI.value, status, body)
