"""Unit tests for domain error codes and statuses."""

import pytest

from mealscan.domain.shared.errors import (
    DomainError,
    InvalidMediaError,
    MalformedProviderResponse,
    MissingCredential,
    NoFoodIdentified,
    NoMediaProvided,
    ProviderCallFailed,
    ProviderTimeoutError,
    UnsupportedMediaError,
    UnsupportedProviderError,
)


@pytest.mark.parametrize(
    "error,status_code",
    [
        (NoMediaProvided(), 400),
        (InvalidMediaError("bad"), 400),
        (UnsupportedMediaError("audio"), 400),
        (UnsupportedProviderError("nope"), 400),
        (MissingCredential("gemini"), 400),
        (ProviderCallFailed("openai", 401, "invalid key"), 502),
        (MalformedProviderResponse("oops"), 502),
        (ProviderTimeoutError("slow"), 504),
        (NoFoodIdentified(), 422),
    ],
)
def test_status_codes(error: DomainError, status_code: int) -> None:
    assert isinstance(error, DomainError)
    assert error.status_code == status_code
    assert error.code


def test_missing_credential_names_provider() -> None:
    error = MissingCredential("openai")

    assert error.provider == "openai"
    assert "openai" in error.message


def test_provider_call_failed_message() -> None:
    error = ProviderCallFailed("openai", 429, "rate limited")

    assert error.message == "openai API error: 429 - rate limited"
    assert error.status == 429
    assert error.body == "rate limited"


def test_provider_call_failed_without_status() -> None:
    assert "no response" in ProviderCallFailed("gemini", None, "connect timeout").message
