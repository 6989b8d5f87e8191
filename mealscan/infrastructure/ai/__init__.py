"""Provider adapters implementing the IVisionProvider port."""

from mealscan.infrastructure.ai.factory import create_vision_provider

__all__ = [
    "create_vision_provider",
]
