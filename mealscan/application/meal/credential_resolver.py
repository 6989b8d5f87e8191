"""Provider and credential resolution.

Pure function of the caller overrides and the immutable Settings: no
environment reads, no network.
"""

from dataclasses import dataclass
from typing import Optional

from mealscan.domain.meal.recognition.models import ProviderKind
from mealscan.domain.shared.errors import MissingCredential
from mealscan.infrastructure.config import Settings

# Auto-detection order when the caller names no provider
DETECTION_ORDER = (ProviderKind.GEMINI, ProviderKind.OPENAI)


@dataclass(frozen=True)
class ResolvedProvider:
    """Provider selected for one request, immutable thereafter."""

    kind: ProviderKind
    credential: Optional[str]
    endpoint: Optional[str] = None

    @property
    def requires_credential(self) -> bool:
        return self.kind != ProviderKind.HUGGINGFACE


class CredentialResolver:
    """
    Decide which provider to call and with which credential.

    Rules:
    1. Caller credential: used with the caller provider, or the
       auto-detected one when no provider is named.
    2. Caller provider without credential: that provider's configured key.
    3. Nothing named: Gemini > OpenAI > HuggingFace, by configured keys.

    Example:
        >>> resolver = CredentialResolver(Settings(openai_api_key="sk-x"))
        >>> resolver.resolve().kind
        <ProviderKind.OPENAI: 'openai'>
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    def resolve(
        self,
        provider: Optional[ProviderKind] = None,
        credential: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> ResolvedProvider:
        """
        Resolve (provider, credential, endpoint).

        Raises:
            MissingCredential: If the resolved provider needs a key and none exists
        """
        if credential:
            kind = provider or self._detect()
            resolved = ResolvedProvider(kind, credential, endpoint)
        elif provider is not None:
            resolved = ResolvedProvider(
                provider, self._settings.credential_for(provider), endpoint
            )
        else:
            kind = self._detect()
            resolved = ResolvedProvider(kind, self._settings.credential_for(kind), endpoint)

        if resolved.requires_credential and not resolved.credential:
            raise MissingCredential(resolved.kind.value)
        return resolved

    def _detect(self) -> ProviderKind:
        for kind in DETECTION_ORDER:
            if self._settings.credential_for(kind):
                return kind
        return ProviderKind.HUGGINGFACE
