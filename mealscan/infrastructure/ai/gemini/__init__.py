"""Gemini client implementation for image and audio analysis."""

from mealscan.infrastructure.ai.gemini.client import GeminiVisionClient

__all__ = [
    "GeminiVisionClient",
]
