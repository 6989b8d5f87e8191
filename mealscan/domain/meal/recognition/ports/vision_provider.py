"""Port (interface) for multimodal analysis providers.

This port defines the contract that external providers (Gemini,
OpenAI-compatible chat APIs, HuggingFace inference) implement to be
used by the analysis orchestrator.
"""

from typing import Any, Dict, Optional, Protocol, Union

from mealscan.domain.meal.recognition.models import MediaInput, ProviderKind
from mealscan.domain.meal.recognition.prompts import AnalysisPrompt


class IVisionProvider(Protocol):
    """
    Interface for analysis providers.

    Follows the Dependency Inversion Principle:
    - Domain layer defines the interface (port)
    - Infrastructure layer implements it (adapter)
    """

    async def __aenter__(self) -> "IVisionProvider":
        ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Release transport resources held for this request."""
        ...

    @property
    def kind(self) -> ProviderKind:
        """Provider reported in the analysis result."""
        ...

    async def analyze(
        self,
        media: MediaInput,
        prompt: AnalysisPrompt,
        model_override: Optional[str] = None,
    ) -> Union[str, Dict[str, Any]]:
        """
        Run the provider-native call(s) for ``media``.

        Args:
            media: Submitted image or audio
            prompt: Instruction built for the media and mode
            model_override: Caller-chosen model name (if supported)

        Returns:
            Raw response text for generative providers, or an already
            structured ``{"items": [...], "confidence": x}`` dict

        Raises:
            ProviderCallFailed: On non-success provider responses
            UnsupportedMediaError: If the provider cannot take the media
            NoFoodIdentified: If a structured pipeline found nothing
        """
        ...
