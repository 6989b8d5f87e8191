"""Unit tests for Settings."""

import pytest

from mealscan.domain.meal.recognition.models import ProviderKind
from mealscan.infrastructure.config import DEFAULT_OPENAI_ENDPOINT, Settings


class TestFromEnv:
    """Settings.from_env with injected environments."""

    def test_defaults(self) -> None:
        settings = Settings.from_env({})

        assert settings.gemini_api_key is None
        assert settings.gemini_model == "gemini-2.5-flash"
        assert settings.gemini_fallback_model == "gemini-2.0-flash"
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.custom_model == "gpt-3.5-turbo"
        assert settings.openai_endpoint == DEFAULT_OPENAI_ENDPOINT
        assert settings.hf_classifier_model == "nateraw/food101"
        assert settings.request_timeout_s == 60.0
        assert settings.max_body_bytes == 10 * 1024 * 1024
        assert settings.cors_origins == ("*",)
        assert settings.static_dir is None
        assert settings.log_level == "INFO"

    def test_values_read(self) -> None:
        settings = Settings.from_env(
            {
                "GEMINI_API_KEY": "g-key",
                "OPENAI_API_KEY": ' "o-key" ',
                "HF_API_KEY": "h-key",
                "GEMINI_FALLBACK_MODEL": "gemini-1.5-flash",
                "HF_BASE_URL": "https://hf.example.com/models/",
                "REQUEST_TIMEOUT_S": "15",
                "MAX_BODY_BYTES": "1024",
                "CORS_ORIGINS": "https://a.example, https://b.example",
                "STATIC_DIR": "public",
                "LOG_LEVEL": "debug",
            }
        )

        assert settings.gemini_api_key == "g-key"
        assert settings.openai_api_key == "o-key"
        assert settings.hf_api_key == "h-key"
        assert settings.gemini_fallback_model == "gemini-1.5-flash"
        assert settings.hf_base_url == "https://hf.example.com/models"
        assert settings.request_timeout_s == 15.0
        assert settings.max_body_bytes == 1024
        assert settings.cors_origins == ("https://a.example", "https://b.example")
        assert settings.static_dir == "public"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("blank", ["", "   ", '""'])
    def test_blank_keys_are_absent(self, blank: str) -> None:
        settings = Settings.from_env({"GEMINI_API_KEY": blank})

        assert settings.gemini_api_key is None


class TestCredentialFor:
    """Per-provider environment credential."""

    def test_each_provider(self) -> None:
        settings = Settings(gemini_api_key="g", openai_api_key="o", hf_api_key="h")

        assert settings.credential_for(ProviderKind.GEMINI) == "g"
        assert settings.credential_for(ProviderKind.OPENAI) == "o"
        assert settings.credential_for(ProviderKind.HUGGINGFACE) == "h"
        assert settings.credential_for(ProviderKind.CUSTOM) is None
