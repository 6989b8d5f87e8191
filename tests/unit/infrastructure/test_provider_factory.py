"""Unit tests for the provider factory."""

from typing import Any, Iterator
from unittest.mock import patch

import pytest

from mealscan.domain.meal.recognition.models import ProviderKind
from mealscan.infrastructure.ai.factory import create_vision_provider
from mealscan.infrastructure.ai.gemini.client import GeminiVisionClient
from mealscan.infrastructure.ai.huggingface.client import HuggingFaceVisionClient
from mealscan.infrastructure.ai.openai.client import OpenAICompatibleClient
from mealscan.infrastructure.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        gemini_model="gemini-primary",
        gemini_fallback_model="gemini-secondary",
        openai_model="gpt-default",
        custom_model="custom-default",
        request_timeout_s=12.0,
    )


@pytest.fixture
def mock_async_openai() -> Iterator[Any]:
    with patch("mealscan.infrastructure.ai.openai.client.AsyncOpenAI") as mock:
        yield mock


@pytest.fixture
def mock_genai_client() -> Iterator[Any]:
    with patch("mealscan.infrastructure.ai.gemini.client.genai.Client") as mock:
        yield mock


class TestCreateVisionProvider:
    """One adapter per ProviderKind."""

    def test_gemini(self, settings: Settings, mock_genai_client: Any) -> None:
        provider = create_vision_provider(ProviderKind.GEMINI, settings, "g-key")

        assert isinstance(provider, GeminiVisionClient)
        assert provider.kind == ProviderKind.GEMINI
        assert provider._model == "gemini-primary"
        assert provider._fallback_model == "gemini-secondary"
        mock_genai_client.assert_called_once_with(api_key="g-key")

    def test_openai(self, settings: Settings, mock_async_openai: Any) -> None:
        provider = create_vision_provider(ProviderKind.OPENAI, settings, "o-key")

        assert isinstance(provider, OpenAICompatibleClient)
        assert provider.kind == ProviderKind.OPENAI
        assert provider._model == "gpt-default"
        kwargs = mock_async_openai.call_args.kwargs
        assert kwargs["base_url"] == "https://api.openai.com/v1"
        assert kwargs["timeout"] == 12.0

    def test_custom_uses_caller_endpoint(self, settings: Settings, mock_async_openai: Any) -> None:
        provider = create_vision_provider(
            ProviderKind.CUSTOM,
            settings,
            "caller-key",
            "https://llm.example.com/v1/chat/completions",
        )

        assert provider.kind == ProviderKind.CUSTOM
        assert provider._model == "custom-default"  # type: ignore[attr-defined]
        assert mock_async_openai.call_args.kwargs["base_url"] == "https://llm.example.com/v1"

    def test_huggingface_without_credential(self, settings: Settings) -> None:
        provider = create_vision_provider(ProviderKind.HUGGINGFACE, settings, None)

        assert isinstance(provider, HuggingFaceVisionClient)
        assert provider._api_key is None
        assert provider._classifier_model == settings.hf_classifier_model

    def test_every_kind_is_handled(self, settings: Settings, mock_async_openai: Any,
                                   mock_genai_client: Any) -> None:
        for kind in ProviderKind:
            assert create_vision_provider(kind, settings, "key").kind == kind
