"""Meal analysis proxy over interchangeable multimodal AI providers."""

__version__ = "0.1.0"
