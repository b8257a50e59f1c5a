"""LLM provider factory/registry."""

from __future__ import annotations

import logging

from booksummarizer.config import AppConfig
from booksummarizer.infra.providers.anthropic import AnthropicProvider
from booksummarizer.infra.providers.base import LLMProvider
from booksummarizer.infra.providers.fallback import FallbackProvider
from booksummarizer.infra.providers.openrouter import OpenRouterProvider
from booksummarizer.models.provider import ProviderType

logger = logging.getLogger(__name__)


def _build_provider(provider_type: ProviderType, config: AppConfig) -> LLMProvider:
    """Build a single provider instance."""
    prov_config = config.providers.get(provider_type.value)
    if provider_type == ProviderType.ANTHROPIC:
        return AnthropicProvider(
            api_key=prov_config.api_key if prov_config else "",
            model=prov_config.default_model if prov_config else "",
        )
    elif provider_type == ProviderType.OPENROUTER:
        return OpenRouterProvider(
            api_key=prov_config.api_key if prov_config else "",
            model=prov_config.default_model if prov_config else "",
            base_url=prov_config.base_url if prov_config else "",
        )
    else:
        raise ValueError(f"Unknown provider type: {provider_type}")


def get_provider(provider_type: ProviderType | str, config: AppConfig) -> LLMProvider:
    """Get an LLM provider instance by type, configured from AppConfig."""
    if isinstance(provider_type, str):
        provider_type = ProviderType(provider_type)
    return _build_provider(provider_type, config)


def get_provider_with_fallback(config: AppConfig, primary: str = "") -> LLMProvider:
    """Build a provider that falls back through every configured provider.

    The primary provider goes first; providers without a resolved API key
    are skipped.
    """
    primary = primary or config.summarizer.provider
    try:
        primary_type = ProviderType(primary)
    except ValueError:
        logger.warning("Unknown provider '%s', defaulting to anthropic", primary)
        primary_type = ProviderType.ANTHROPIC

    ordered = [primary_type] + [t for t in ProviderType if t != primary_type]

    providers = []
    names = []
    for ptype in ordered:
        prov_config = config.providers.get(ptype.value)
        if prov_config and prov_config.api_key:
            providers.append(get_provider(ptype, config))
            names.append(ptype.value)
        else:
            logger.debug("Skipping %s: no API key configured", ptype.value)

    if not providers:
        raise RuntimeError("No LLM providers configured. Set at least one API key.")

    if len(providers) == 1:
        return providers[0]

    logger.info("Fallback chain: %s", " -> ".join(names))
    return FallbackProvider(providers, names)
