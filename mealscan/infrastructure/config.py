"""Configuration for the analysis service.

Settings are read once at process start (after ``.env`` is loaded) and
passed explicitly to the resolver, adapters and orchestrator.

Environment variables:
- GEMINI_API_KEY / OPENAI_API_KEY / HF_API_KEY: default credentials
- GEMINI_MODEL / GEMINI_FALLBACK_MODEL: primary and model-not-found fallback
- OPENAI_MODEL / CUSTOM_MODEL / OPENAI_ENDPOINT: chat-completions defaults
- HF_BASE_URL / HF_CLASSIFIER_MODEL / HF_CAPTION_MODEL: HuggingFace inference
- REQUEST_TIMEOUT_S: overall deadline per analysis (default 60)
- MAX_BODY_BYTES: request body cap (default 10 MiB)
- CORS_ORIGINS: comma separated origins (default "*")
- STATIC_DIR: optional directory served at "/"
- LOG_LEVEL: logging level (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from mealscan.domain.meal.recognition.models import ProviderKind

DEFAULT_OPENAI_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_HF_BASE_URL = "https://router.huggingface.co/hf-inference/models"


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip whitespace and stray quotes; blank means absent."""
    if value is None:
        return None
    value = value.strip().strip('"').strip("'")
    return value or None


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, immutable after startup."""

    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    hf_api_key: Optional[str] = None

    gemini_model: str = "gemini-2.5-flash"
    gemini_fallback_model: str = "gemini-2.0-flash"
    openai_model: str = "gpt-4o-mini"
    custom_model: str = "gpt-3.5-turbo"
    openai_endpoint: str = DEFAULT_OPENAI_ENDPOINT

    hf_base_url: str = DEFAULT_HF_BASE_URL
    hf_classifier_model: str = "nateraw/food101"
    hf_caption_model: str = "Salesforce/blip-image-captioning-large"

    request_timeout_s: float = 60.0
    max_body_bytes: int = 10 * 1024 * 1024
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    static_dir: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def text(name: str, default: str) -> str:
            return _clean(env.get(name)) or default

        origins = tuple(
            o.strip() for o in (env.get("CORS_ORIGINS") or "*").split(",") if o.strip()
        )
        return cls(
            gemini_api_key=_clean(env.get("GEMINI_API_KEY")),
            openai_api_key=_clean(env.get("OPENAI_API_KEY")),
            hf_api_key=_clean(env.get("HF_API_KEY")),
            gemini_model=text("GEMINI_MODEL", defaults.gemini_model),
            gemini_fallback_model=text("GEMINI_FALLBACK_MODEL", defaults.gemini_fallback_model),
            openai_model=text("OPENAI_MODEL", defaults.openai_model),
            custom_model=text("CUSTOM_MODEL", defaults.custom_model),
            openai_endpoint=text("OPENAI_ENDPOINT", defaults.openai_endpoint),
            hf_base_url=text("HF_BASE_URL", defaults.hf_base_url).rstrip("/"),
            hf_classifier_model=text("HF_CLASSIFIER_MODEL", defaults.hf_classifier_model),
            hf_caption_model=text("HF_CAPTION_MODEL", defaults.hf_caption_model),
            request_timeout_s=float(text("REQUEST_TIMEOUT_S", str(defaults.request_timeout_s))),
            max_body_bytes=int(text("MAX_BODY_BYTES", str(defaults.max_body_bytes))),
            cors_origins=origins or ("*",),
            static_dir=_clean(env.get("STATIC_DIR")),
            log_level=text("LOG_LEVEL", defaults.log_level).upper(),
        )

    def credential_for(self, kind: ProviderKind) -> Optional[str]:
        """Environment credential for ``kind`` (custom backends have none)."""
        if kind == ProviderKind.GEMINI:
            return self.gemini_api_key
        if kind == ProviderKind.OPENAI:
            return self.openai_api_key
        if kind == ProviderKind.HUGGINGFACE:
            return self.hf_api_key
        if kind == ProviderKind.CUSTOM:
            return None
        raise AssertionError(f"unhandled provider kind: {kind!r}")
