"""OpenAI-compatible chat client implementation for image analysis."""

from mealscan.infrastructure.ai.openai.client import OpenAICompatibleClient

__all__ = [
    "OpenAICompatibleClient",
]
