"""Unit tests for Gemini client.

Tests focus on:
- Request shape (instruction + inline media part)
- Model-not-found fallback to a distinct model
- Error mapping to ProviderCallFailed

Note: the genai.Client is a MagicMock; no network access.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import errors as genai_errors

from mealscan.domain.meal.recognition.models import AnalysisMode, MediaInput
from mealscan.domain.meal.recognition.prompts import build_prompt
from mealscan.domain.shared.errors import ProviderCallFailed
from mealscan.infrastructure.ai.gemini.client import GeminiVisionClient, is_model_not_found


def _api_error(code: int, message: str, status: str) -> genai_errors.APIError:
    return genai_errors.APIError(
        code, {"error": {"code": code, "message": message, "status": status}}
    )


@pytest.fixture
def genai_client() -> Any:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client


@pytest.fixture
def gemini(genai_client: Any) -> GeminiVisionClient:
    return GeminiVisionClient(
        api_key="test-key",
        model="gemini-2.5-flash",
        fallback_model="gemini-2.0-flash",
        client=genai_client,
    )


class TestIsModelNotFound:
    """Classification of "model not found" errors."""

    def test_404_code(self) -> None:
        assert is_model_not_found(_api_error(404, "models/x is gone", "NOT_FOUND"))

    def test_message(self) -> None:
        assert is_model_not_found(RuntimeError("model gemini-9 not found"))

    def test_other_errors(self) -> None:
        assert not is_model_not_found(_api_error(403, "permission denied", "PERMISSION_DENIED"))


class TestAnalyze:
    """analyze() behavior."""

    @pytest.mark.asyncio
    async def test_sends_instruction_and_media(
        self, gemini: GeminiVisionClient, genai_client: Any, image_media: MediaInput
    ) -> None:
        genai_client.aio.models.generate_content.return_value = MagicMock(text='{"items": []}')
        prompt = build_prompt(image_media, AnalysisMode.DEFAULT)

        text = await gemini.analyze(image_media, prompt)

        assert text == '{"items": []}'
        kwargs = genai_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        instruction, part = kwargs["contents"]
        assert instruction == prompt.instruction
        assert part.inline_data.mime_type == "image/png"
        assert part.inline_data.data == image_media.decoded_bytes()

    @pytest.mark.asyncio
    async def test_audio_tagged_webm(
        self, gemini: GeminiVisionClient, genai_client: Any, audio_media: MediaInput
    ) -> None:
        genai_client.aio.models.generate_content.return_value = MagicMock(text="{}")

        await gemini.analyze(audio_media, build_prompt(audio_media, AnalysisMode.SEARCH))

        part = genai_client.aio.models.generate_content.call_args.kwargs["contents"][1]
        assert part.inline_data.mime_type == "audio/webm"

    @pytest.mark.asyncio
    async def test_model_override(
        self, gemini: GeminiVisionClient, genai_client: Any, image_media: MediaInput
    ) -> None:
        genai_client.aio.models.generate_content.return_value = MagicMock(text="{}")

        await gemini.analyze(
            image_media, build_prompt(image_media, AnalysisMode.DEFAULT), "gemini-exp"
        )

        assert genai_client.aio.models.generate_content.call_args.kwargs["model"] == "gemini-exp"

    @pytest.mark.asyncio
    async def test_fallback_on_model_not_found(
        self, gemini: GeminiVisionClient, genai_client: Any, image_media: MediaInput
    ) -> None:
        genai_client.aio.models.generate_content.side_effect = [
            _api_error(404, "models/gemini-2.5-flash is not found", "NOT_FOUND"),
            MagicMock(text='{"items": [], "confidence": 0.1}'),
        ]

        text = await gemini.analyze(image_media, build_prompt(image_media, AnalysisMode.DEFAULT))

        assert text == '{"items": [], "confidence": 0.1}'
        models = [
            c.kwargs["model"] for c in genai_client.aio.models.generate_content.call_args_list
        ]
        assert models == ["gemini-2.5-flash", "gemini-2.0-flash"]

    @pytest.mark.asyncio
    async def test_fallback_failure_is_final(
        self, gemini: GeminiVisionClient, genai_client: Any, image_media: MediaInput
    ) -> None:
        genai_client.aio.models.generate_content.side_effect = [
            _api_error(404, "not found", "NOT_FOUND"),
            _api_error(404, "not found either", "NOT_FOUND"),
        ]

        with pytest.raises(ProviderCallFailed) as exc_info:
            await gemini.analyze(image_media, build_prompt(image_media, AnalysisMode.DEFAULT))

        assert exc_info.value.status == 404
        assert genai_client.aio.models.generate_content.await_count == 2

    @pytest.mark.asyncio
    async def test_no_retry_on_other_errors(
        self, gemini: GeminiVisionClient, genai_client: Any, image_media: MediaInput
    ) -> None:
        genai_client.aio.models.generate_content.side_effect = _api_error(
            429, "quota exceeded", "RESOURCE_EXHAUSTED"
        )

        with pytest.raises(ProviderCallFailed) as exc_info:
            await gemini.analyze(image_media, build_prompt(image_media, AnalysisMode.DEFAULT))

        assert exc_info.value.status == 429
        assert "quota exceeded" in exc_info.value.message
        assert genai_client.aio.models.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_no_retry_when_fallback_equals_model(
        self, genai_client: Any, image_media: MediaInput
    ) -> None:
        client = GeminiVisionClient(
            api_key="k", model="gemini-2.0-flash", fallback_model="gemini-2.0-flash",
            client=genai_client,
        )
        genai_client.aio.models.generate_content.side_effect = _api_error(
            404, "not found", "NOT_FOUND"
        )

        with pytest.raises(ProviderCallFailed):
            await client.analyze(image_media, build_prompt(image_media, AnalysisMode.DEFAULT))

        assert genai_client.aio.models.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_text(
        self, gemini: GeminiVisionClient, genai_client: Any, image_media: MediaInput
    ) -> None:
        genai_client.aio.models.generate_content.return_value = MagicMock(text=None)

        assert await gemini.analyze(image_media, build_prompt(image_media, AnalysisMode.DEFAULT)) == ""
