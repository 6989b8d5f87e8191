"""Meal recognition: request/result models, prompts and normalization."""
