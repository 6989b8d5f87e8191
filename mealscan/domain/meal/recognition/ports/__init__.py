"""Recognition domain ports (interfaces)."""

from mealscan.domain.meal.recognition.ports.vision_provider import IVisionProvider

__all__ = ["IVisionProvider"]
