"""
NotesWise Backend: Provider Factory
=====================================

What:  Resolves a provider name to a ready-to-use `LLMProvider` adapter.
Why:   Callers pick providers by name (from a request, a note, or the default);
       they should not need to know which adapter class or credential is involved.
How:   Two read-only tables:
         - the provider table (ProviderConfig per configured name)
         - PROVIDER_REGISTRY (adapter class per supported name)
       `create()` looks the name up in both and builds a fresh adapter.

Lookup rules:
    - Names are matched case-insensitively ("OpenAI" == "openai")
    - Missing or disabled in configuration → ProviderNotFoundError
    - Configured and enabled but no adapter class → ProviderUnsupportedError
    - A new adapter per call; nothing is cached between calls
"""

import logging
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Type

import httpx

from app.config import ProviderConfig
from app.exceptions import ProviderNotFoundError, ProviderUnsupportedError
from app.services.llm_base import LLMProvider
from app.services.providers import AnthropicProvider, GeminiProvider, OpenAIProvider
from app.services.transport import TransportOptions

logger = logging.getLogger(__name__)


PROVIDER_REGISTRY: Mapping[str, Type[LLMProvider]] = MappingProxyType({
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
})


class ProviderFactory:
    """Builds text-provider adapters from static configuration."""

    def __init__(
        self,
        providers: Mapping[str, ProviderConfig],
        default_provider: str,
        options: Optional[TransportOptions] = None,
        registry: Mapping[str, Type[LLMProvider]] = PROVIDER_REGISTRY,
    ):
        self._providers: Mapping[str, ProviderConfig] = MappingProxyType(
            {name.strip().lower(): config for name, config in providers.items()}
        )
        self._default_provider = default_provider.strip().lower()
        self._options = options or TransportOptions()
        self._registry = registry

    @classmethod
    def from_settings(
        cls, settings: Any, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "ProviderFactory":
        return cls(
            providers=settings.provider_table(),
            default_provider=settings.ai_default_provider,
            options=TransportOptions.from_settings(settings, transport=transport),
        )

    @property
    def default_provider(self) -> str:
        return self._default_provider

    def list_available(self) -> List[str]:
        """Enabled provider names, in configuration order."""
        return [name for name, config in self._providers.items() if config.enabled]

    def supported_providers(self) -> List[str]:
        """Provider names that have an adapter implementation."""
        return list(self._registry)

    def create(self, name: str) -> LLMProvider:
        """
        Build an adapter for `name`.

        Raises:
            ProviderNotFoundError: Name not configured, or configured but disabled
            ProviderUnsupportedError: Configured and enabled, but no adapter exists
        """
        key = (name or "").strip().lower()
        config = self._providers.get(key)
        if config is None or not config.enabled:
            raise ProviderNotFoundError(name)

        adapter_cls = self._registry.get(key)
        if adapter_cls is None:
            raise ProviderUnsupportedError(name)

        logger.debug("Creating %s adapter (model=%s)", adapter_cls.__name__, config.default_model)
        return adapter_cls(config, self._options)

    def create_default(self) -> LLMProvider:
        return self.create(self._default_provider)
