"""HuggingFace inference client (classification with captioning fallback)."""

from mealscan.infrastructure.ai.huggingface.client import HuggingFaceVisionClient

__all__ = [
    "HuggingFaceVisionClient",
]
