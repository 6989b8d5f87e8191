"""OpenAI-compatible chat client - implements IVisionProvider port.

Serves both the official OpenAI API and "custom" backends exposing the
same chat-completions contract at another URL.

Key Features:
- System instruction + user turn with text and image reference
- Posts to the exact endpoint URL (path and query string untouched)
- No retries: a non-2xx answer is a hard failure with status and body
- Model defaults per flavor, overridable by the caller
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
import structlog
from openai import APIConnectionError, APIStatusError, AsyncOpenAI
from openai.types.chat import ChatCompletion

from mealscan.domain.meal.recognition.models import MediaInput, ProviderKind
from mealscan.domain.meal.recognition.prompts import AnalysisPrompt, build_chat_messages
from mealscan.domain.shared.errors import ProviderCallFailed, UnsupportedMediaError
from mealscan.infrastructure.config import DEFAULT_OPENAI_ENDPOINT

logger = structlog.get_logger(__name__)

_CHAT_COMPLETIONS_SUFFIX = "/chat/completions"


def chat_base_url(endpoint: str) -> str:
    """Turn a full chat-completions URL into the SDK base URL.

    Only used to configure the SDK client; requests go to the endpoint
    itself, so the query string is dropped here.

    Example:
        >>> chat_base_url("https://api.openai.com/v1/chat/completions")
        'https://api.openai.com/v1'
    """
    url = str(httpx.URL(endpoint.strip()).copy_with(query=None, fragment=None)).rstrip("/")
    if url.endswith(_CHAT_COMPLETIONS_SUFFIX):
        url = url[: -len(_CHAT_COMPLETIONS_SUFFIX)]
    return url


class OpenAICompatibleClient:
    """
    Chat-completions client implementing IVisionProvider port.

    Example:
        >>> async with OpenAICompatibleClient(api_key="sk-...") as client:
        ...     text = await client.analyze(media, prompt)
    """

    def __init__(
        self,
        api_key: str,
        kind: ProviderKind = ProviderKind.OPENAI,
        model: str = "gpt-4o-mini",
        endpoint: Optional[str] = None,
        timeout: float = 60.0,
        max_tokens: int = 500,
        temperature: float = 0.1,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize chat client.

        Args:
            api_key: Bearer credential
            kind: OPENAI or CUSTOM (reported in the result)
            model: Default model for this flavor
            endpoint: Full chat-completions URL (defaults to OpenAI)
            timeout: Per-call timeout in seconds
            max_tokens: Completion token cap
            temperature: Sampling temperature (low for consistent JSON)
            client: Optional pre-configured AsyncOpenAI client (for testing)
        """
        self._kind = kind
        self._model = model
        self._endpoint = (endpoint or DEFAULT_OPENAI_ENDPOINT).strip()
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=chat_base_url(self._endpoint),
            timeout=timeout,
            max_retries=0,
        )

    async def __aenter__(self) -> OpenAICompatibleClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._client.close()

    @property
    def kind(self) -> ProviderKind:
        return self._kind

    async def analyze(
        self,
        media: MediaInput,
        prompt: AnalysisPrompt,
        model_override: Optional[str] = None,
    ) -> str:
        """
        Run a single chat completion and return the message content.

        Raises:
            UnsupportedMediaError: For audio input
            ProviderCallFailed: On non-2xx status or connection failure
        """
        if media.is_audio:
            raise UnsupportedMediaError(
                f"Provider '{self._kind.value}' only accepts images; use gemini for audio."
            )

        model = model_override or self._model
        start_time = time.time()
        try:
            # Absolute URL: the SDK sends it as-is instead of joining base_url
            completion = await self._client.post(
                self._endpoint,
                cast_to=ChatCompletion,
                body={
                    "model": model,
                    "messages": build_chat_messages(prompt, media.data_uri()),
                    "max_tokens": self._max_tokens,
                    "temperature": self._temperature,
                },
            )
        except APIStatusError as exc:
            body = exc.response.text if exc.response is not None else str(exc)
            raise ProviderCallFailed(self._kind.value, exc.status_code, body) from exc
        except APIConnectionError as exc:
            raise ProviderCallFailed(self._kind.value, None, str(exc)) from exc

        logger.info(
            "openai.response_received",
            provider=self._kind.value,
            model=model,
            processing_time_ms=int((time.time() - start_time) * 1000),
        )

        if not completion.choices:
            return "{}"
        return completion.choices[0].message.content or "{}"
