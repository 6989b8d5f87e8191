"""Meal analysis orchestrator.

Sequences credential resolution, prompt building, the provider call and
response normalization for one analysis request.
"""

import time
from typing import Callable, Optional

import structlog

from mealscan.application.meal.credential_resolver import CredentialResolver
from mealscan.domain.meal.recognition.models import (
    AnalysisRequest,
    AnalysisResult,
    ProviderKind,
)
from mealscan.domain.meal.recognition.normalizer import ResponseNormalizer
from mealscan.domain.meal.recognition.ports.vision_provider import IVisionProvider
from mealscan.domain.meal.recognition.prompts import build_prompt
from mealscan.domain.shared.errors import NoMediaProvided
from mealscan.infrastructure.ai.factory import create_vision_provider
from mealscan.infrastructure.config import Settings

logger = structlog.get_logger(__name__)

ProviderFactory = Callable[
    [ProviderKind, Settings, Optional[str], Optional[str]], IVisionProvider
]


class MealAnalysisOrchestrator:
    """
    Orchestrate one meal analysis.

    Flow:
    1. Validate media (NoMediaProvided before any outbound call)
    2. Resolve provider and credential (CredentialResolver)
    3. Build the prompt for media and mode
    4. Call the provider adapter
    5. Normalize raw output into AnalysisResult

    Example:
        >>> orchestrator = MealAnalysisOrchestrator(Settings.from_env())
        >>> result = await orchestrator.analyze(request)
        >>> result.provider
        'gemini'
    """

    def __init__(
        self,
        settings: Settings,
        provider_factory: ProviderFactory = create_vision_provider,
        normalizer: Optional[ResponseNormalizer] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Process configuration
            provider_factory: Builds the adapter for a resolved provider
            normalizer: Response normalizer (default instance if None)
        """
        self._settings = settings
        self._resolver = CredentialResolver(settings)
        self._provider_factory = provider_factory
        self._normalizer = normalizer or ResponseNormalizer()

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Run the full analysis for ``request``.

        Returns:
            AnalysisResult with items (or options in audio search mode)

        Raises:
            NoMediaProvided: If neither image nor audio was submitted
            MissingCredential: If the resolved provider has no credential
            ProviderCallFailed: On provider errors
            MalformedProviderResponse: If provider text is not valid JSON
            NoFoodIdentified: If nothing edible was recognized
        """
        media = request.media
        if media is None:
            raise NoMediaProvided()

        resolved = self._resolver.resolve(
            provider=request.provider,
            credential=request.credential,
            endpoint=request.endpoint,
        )
        mode = request.effective_mode
        prompt = build_prompt(media, mode)

        logger.info(
            "analysis.dispatch",
            provider=resolved.kind.value,
            mode=mode.value,
            media_kind=media.kind.value,
            model_override=request.model_override,
        )

        start_time = time.time()
        provider = self._provider_factory(
            resolved.kind, self._settings, resolved.credential, resolved.endpoint
        )
        async with provider:
            raw = await provider.analyze(media, prompt, request.model_override)

        result = self._normalizer.normalize(raw, provider.kind, result_key=prompt.result_key)

        logger.info(
            "analysis.completed",
            provider=resolved.kind.value,
            items=len(result.options if result.options is not None else result.items),
            processing_time_ms=int((time.time() - start_time) * 1000),
        )
        return result
