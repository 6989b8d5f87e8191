"""Shared fixtures.

Unit tests never touch the network: SDK clients are AsyncMocks and the
HuggingFace adapter runs on httpx.MockTransport.
"""

import base64
from typing import Any, Callable

import pytest

from mealscan.domain.meal.recognition.models import MediaInput
from mealscan.infrastructure.config import Settings

# PNG signature plus filler; adapters never decode the pixels
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")
AUDIO_B64 = base64.b64encode(b"webm-audio-bytes").decode("ascii")


@pytest.fixture
def image_b64() -> str:
    return PNG_B64


@pytest.fixture
def audio_b64() -> str:
    return AUDIO_B64


@pytest.fixture
def image_media() -> MediaInput:
    media = MediaInput.from_payload(image=f"data:image/png;base64,{PNG_B64}")
    assert media is not None
    return media


@pytest.fixture
def audio_media() -> MediaInput:
    media = MediaInput.from_payload(audio=AUDIO_B64)
    assert media is not None
    return media


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory for Settings with explicit credentials (no environment reads)."""

    def _make(**overrides: Any) -> Settings:
        return Settings(**overrides)

    return _make
