"""
Domain models for meal analysis.

Models for submitted media, analysis requests and the canonical result
shape every provider response is normalized into.
"""

from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mealscan.domain.shared.errors import InvalidMediaError, UnsupportedProviderError

DEFAULT_IMAGE_MIME = "image/jpeg"
DEFAULT_AUDIO_MIME = "audio/webm"


class ProviderKind(str, Enum):
    """Third-party multimodal backends an analysis can be delegated to."""

    GEMINI = "gemini"
    OPENAI = "openai"
    CUSTOM = "custom"
    HUGGINGFACE = "huggingface"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional[ProviderKind]:
        """Map a caller-supplied provider name, rejecting unknown names."""
        if value is None or not value.strip():
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            allowed = ", ".join(k.value for k in cls)
            raise UnsupportedProviderError(
                f"Unknown provider '{value}'. Allowed: {allowed}"
            ) from None


class MediaKind(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"


class AnalysisMode(str, Enum):
    """DEFAULT resolves one meal; SEARCH (audio only) returns options."""

    DEFAULT = "default"
    SEARCH = "search"


def _split_data_uri(value: str, default_mime: str) -> tuple[str, str]:
    """Return (base64 payload, mime type) stripping any data-URI header."""
    if "base64," in value:
        header, payload = value.split("base64,", 1)
        mime = default_mime
        if header.startswith("data:"):
            declared = header[len("data:"):].rstrip(";").strip()
            if declared:
                mime = declared
        return payload, mime
    return value, default_mime


class MediaInput(BaseModel):
    """
    What the caller submitted: one image or one audio recording.

    The payload is kept as bare base64 (any data-URI header stripped);
    the MIME type declared in the header is preserved.

    Example:
        >>> media = MediaInput.from_payload(image="data:image/png;base64,iVBO")
        >>> media.kind, media.mime_type
        (<MediaKind.IMAGE: 'image'>, 'image/png')
    """

    model_config = ConfigDict(frozen=True)

    kind: MediaKind
    data: str = Field(..., min_length=1, description="Base64 payload")
    mime_type: str

    @classmethod
    def from_payload(
        cls,
        image: Optional[str] = None,
        audio: Optional[str] = None,
    ) -> Optional[MediaInput]:
        """Build from raw request fields; None when nothing was submitted."""
        image = image.strip() if image else None
        audio = audio.strip() if audio else None
        if image and audio:
            raise InvalidMediaError("Submit either an image or an audio recording, not both.")
        if image:
            payload, mime = _split_data_uri(image, DEFAULT_IMAGE_MIME)
            kind = MediaKind.IMAGE
        elif audio:
            payload, mime = _split_data_uri(audio, DEFAULT_AUDIO_MIME)
            kind = MediaKind.AUDIO
        else:
            return None
        payload = "".join(payload.split())
        if not payload:
            raise InvalidMediaError(f"Empty {kind.value} payload.")
        return cls(kind=kind, data=payload, mime_type=mime)

    @property
    def is_audio(self) -> bool:
        return self.kind == MediaKind.AUDIO

    def decoded_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidMediaError(f"Invalid base64 {self.kind.value} payload.") from exc

    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class AnalysisRequest(BaseModel):
    """
    A single "analyze this meal" intent, built per HTTP call.

    Attributes:
        media: Submitted image or audio (None means invalid request)
        mode: DEFAULT or SEARCH (SEARCH only honoured for audio)
        provider: Explicit backend, or None for auto-detection
        credential: Caller-supplied API key
        endpoint: Custom chat-completions URL (OpenAI-compatible only)
        model_override: Caller-chosen model name
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    media: Optional[MediaInput] = None
    mode: AnalysisMode = AnalysisMode.DEFAULT
    provider: Optional[ProviderKind] = None
    credential: Optional[str] = None
    endpoint: Optional[str] = None
    model_override: Optional[str] = None

    @field_validator("credential", "endpoint", "model_override")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings like absent values."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def effective_mode(self) -> AnalysisMode:
        """SEARCH mode only applies to audio; images fall back to DEFAULT."""
        if self.mode == AnalysisMode.SEARCH and self.media is not None and self.media.is_audio:
            return AnalysisMode.SEARCH
        return AnalysisMode.DEFAULT


class FoodItem(BaseModel):
    """
    One identified food with its estimated portion and macros.

    Produced only by normalization; immutable afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=200)
    grams: float = Field(..., ge=0)
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Food name cannot be empty or whitespace")
        return v.strip()


class AnalysisResult(BaseModel):
    """
    Canonical analysis output.

    ``options`` is populated only in audio SEARCH mode, instead of
    ``items``; ``confidence`` is absent in that mode.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    provider: ProviderKind
    items: List[FoodItem] = Field(default_factory=list)
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    options: Optional[List[FoodItem]] = None

    @model_validator(mode="after")
    def items_or_options(self) -> AnalysisResult:
        if self.options is None and not self.items:
            raise ValueError("items cannot be empty outside options mode")
        return self

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the response ``result`` object."""
        if self.options is not None:
            return {"options": [o.model_dump() for o in self.options]}
        return {
            "items": [i.model_dump() for i in self.items],
            "confidence": self.confidence,
        }
