"""Provider factory for analysis backends.

One adapter per ProviderKind, selected exhaustively: an unknown kind is a
programming error, never a silent fallback to another provider.

Usage:
    from mealscan.infrastructure.ai.factory import create_vision_provider

    provider = create_vision_provider(
        ProviderKind.GEMINI, settings, credential="AIza...", endpoint=None
    )
"""

from typing import Optional

from mealscan.domain.meal.recognition.models import ProviderKind
from mealscan.domain.meal.recognition.ports.vision_provider import IVisionProvider
from mealscan.infrastructure.ai.gemini.client import GeminiVisionClient
from mealscan.infrastructure.ai.huggingface.client import HuggingFaceVisionClient
from mealscan.infrastructure.ai.openai.client import OpenAICompatibleClient
from mealscan.infrastructure.config import Settings


def create_vision_provider(
    kind: ProviderKind,
    settings: Settings,
    credential: Optional[str],
    endpoint: Optional[str] = None,
) -> IVisionProvider:
    """Create the adapter for ``kind``.

    Args:
        kind: Resolved provider
        settings: Process configuration (models, URLs, timeouts)
        credential: Resolved credential (optional only for HuggingFace)
        endpoint: Caller-supplied chat-completions URL (custom/openai)

    Returns:
        IVisionProvider: Adapter instance, to be used as an async context manager
    """
    if kind == ProviderKind.GEMINI:
        return GeminiVisionClient(
            api_key=credential or "",
            model=settings.gemini_model,
            fallback_model=settings.gemini_fallback_model,
        )

    if kind == ProviderKind.OPENAI:
        return OpenAICompatibleClient(
            api_key=credential or "",
            kind=ProviderKind.OPENAI,
            model=settings.openai_model,
            endpoint=endpoint or settings.openai_endpoint,
            timeout=settings.request_timeout_s,
        )

    if kind == ProviderKind.CUSTOM:
        return OpenAICompatibleClient(
            api_key=credential or "",
            kind=ProviderKind.CUSTOM,
            model=settings.custom_model,
            endpoint=endpoint or settings.openai_endpoint,
            timeout=settings.request_timeout_s,
        )

    if kind == ProviderKind.HUGGINGFACE:
        return HuggingFaceVisionClient(
            api_key=credential,
            base_url=settings.hf_base_url,
            classifier_model=settings.hf_classifier_model,
            caption_model=settings.hf_caption_model,
            timeout=settings.request_timeout_s,
        )

    raise AssertionError(f"unhandled provider kind: {kind!r}")
