"""Translation backends.

One implementation per backend, all satisfying ``TranslationProvider``.
``create_provider()`` selects one from configuration once at startup.
"""

from __future__ import annotations

import logging

from i18n_nexus.config import Config
from i18n_nexus.errors import ConfigurationError

from .base import TranslationProvider
from .claude import ClaudeProvider
from .echo import EchoProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider

logger = logging.getLogger(__name__)

OPENAI_COMPATIBLE_URL = "https://api.aihubmix.com/v1/chat/completions"
OPENAI_COMPATIBLE_MODEL = "gpt-4o"


def create_provider(config: Config) -> TranslationProvider:
    """Map a provider name to a ready-to-use provider instance.

    Raises:
        ConfigurationError: If the provider name is unknown or its
            credentials are missing.
    """
    name = config.provider
    logger.info("Initializing LLM provider: %s", name)

    match name:
        case "openai":
            return OpenAIProvider(
                config.api_key,
                model=config.model,
                api_url=config.api_url,
                timeout=config.timeout,
            )
        case "openai-compatible":
            return OpenAIProvider(
                config.api_key,
                model=config.model or OPENAI_COMPATIBLE_MODEL,
                api_url=config.api_url or OPENAI_COMPATIBLE_URL,
                name="OpenAICompatible",
                timeout=config.timeout,
            )
        case "claude":
            return ClaudeProvider(
                config.api_key,
                model=config.model,
                api_url=config.api_url,
                timeout=config.timeout,
            )
        case "gemini":
            return GeminiProvider(
                config.api_key,
                model=config.model,
                api_url=config.api_url,
                timeout=config.timeout,
            )
        case "echo":
            return EchoProvider()
        case _:
            raise ConfigurationError(f"Unsupported LLM provider: {name}")


__all__ = [
    "ClaudeProvider",
    "EchoProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "TranslationProvider",
    "create_provider",
]
