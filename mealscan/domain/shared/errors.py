"""
Domain exceptions.

Typed exceptions for explicit error handling. Every error carries a stable
machine-readable ``code`` and the HTTP ``status_code`` the API boundary
uses when surfacing it.
"""

from __future__ import annotations

from typing import Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All analysis errors inherit from this, so the API layer can map
    them with a single except clause.
    """

    code: str = "DOMAIN_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ═══════════════════════════════════════════════════════════
# VALIDATION EXCEPTIONS (client side)
# ═══════════════════════════════════════════════════════════


class ValidationError(DomainError):
    """
    Input validation failed.

    Example:
        >>> raise ValidationError("Malformed request body")
    """

    code = "INVALID_REQUEST"
    status_code = 400


class NoMediaProvided(ValidationError):
    """Neither an image nor an audio recording was submitted."""

    code = "NO_MEDIA_PROVIDED"

    def __init__(self, message: str = "No image or audio provided.") -> None:
        super().__init__(message)


class InvalidMediaError(ValidationError):
    """
    Submitted media cannot be used.

    Raised when:
    - Payload is not valid base64
    - Both image and audio are present
    """

    code = "INVALID_MEDIA"


class UnsupportedMediaError(ValidationError):
    """Selected provider cannot process the submitted media kind."""

    code = "UNSUPPORTED_MEDIA"


class UnsupportedProviderError(ValidationError):
    """Caller asked for a provider name that does not exist."""

    code = "UNSUPPORTED_PROVIDER"


class MissingCredential(DomainError):
    """
    No usable credential for the resolved provider.

    Example:
        >>> raise MissingCredential("gemini")
    """

    code = "MISSING_CREDENTIAL"
    status_code = 400

    def __init__(self, provider: str) -> None:
        super().__init__(f"No API key configured for provider '{provider}'.")
        self.provider = provider


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all provider-side failures.
    """

    code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502


class ProviderCallFailed(ExternalServiceError):
    """
    Provider answered with a non-success status (or not at all).

    Example:
        >>> raise ProviderCallFailed("openai", 401, "invalid api key")
    """

    code = "PROVIDER_CALL_FAILED"

    def __init__(self, provider: str, status: Optional[int], body: str) -> None:
        status_txt = status if status is not None else "no response"
        super().__init__(f"{provider} API error: {status_txt} - {body}")
        self.provider = provider
        self.status = status
        self.body = body


class MalformedProviderResponse(ExternalServiceError):
    """
    Provider text is not valid JSON of the expected shape.

    Carries the offending text (truncated) for diagnostics.
    """

    code = "MALFORMED_PROVIDER_RESPONSE"

    MAX_RAW_CHARS = 200

    def __init__(self, raw_text: str, reason: str = "invalid JSON") -> None:
        truncated = raw_text[: self.MAX_RAW_CHARS]
        if len(raw_text) > self.MAX_RAW_CHARS:
            truncated += "..."
        super().__init__(f"Malformed provider response ({reason}): {truncated}")
        self.raw_text = truncated
        self.reason = reason


class ProviderTimeoutError(ExternalServiceError):
    """Analysis did not complete within the request deadline."""

    code = "PROVIDER_TIMEOUT"
    status_code = 504


class NoFoodIdentified(DomainError):
    """Classification and captioning both produced nothing usable."""

    code = "NO_FOOD_IDENTIFIED"
    status_code = 422

    def __init__(self, message: str = "Could not identify any food in the image.") -> None:
        super().__init__(message)
