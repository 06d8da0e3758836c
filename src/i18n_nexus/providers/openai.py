"""OpenAI chat-completions backend.

Also serves OpenAI-compatible gateways, which speak the same wire format
at a different URL (``create_provider`` picks the defaults).
"""

from __future__ import annotations

import logging
from typing import Any

from i18n_nexus.core.async_utils import run_sync
from i18n_nexus.errors import ConfigurationError, TranslationServiceError
from i18n_nexus.sync.models import (
    TokenUsage,
    TranslationResult,
    ValidationResult,
)

from .base import (
    DEFAULT_TIMEOUT,
    build_translation_prompt,
    build_validation_prompt,
    create_session,
    extract_json_object,
    parse_validation_response,
    post_json,
)

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
OPENAI_MODEL = "gpt-4o-mini"


class OpenAIProvider:
    """Translation backend using a chat-completions endpoint.

    Args:
        api_key: Bearer token.
        model: Model name.
        api_url: Full chat-completions URL.
        name: Display name used in logs and errors.
        timeout: Read timeout in seconds.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        api_url: str | None = None,
        name: str = "OpenAI",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                f"Invalid or missing {name} API key. "
                "Set LLM_API_KEY or provider.api_key in config.yml."
            )
        self.name = name
        self.model = model or OPENAI_MODEL
        self.api_url = api_url or OPENAI_URL
        self.timeout = timeout
        self.session = create_session(
            {"Authorization": f"Bearer {api_key.strip()}"}
        )
        logger.debug(
            "%s provider initialized (model=%s, url=%s)",
            self.name,
            self.model,
            self.api_url,
        )

    async def translate(
        self, content: dict[str, Any], target_language: str
    ) -> TranslationResult:
        text, usage = await run_sync(
            self._call_api, build_translation_prompt(content, target_language)
        )
        return TranslationResult(
            translated_content=extract_json_object(text, self.name),
            tokens_used=usage,
        )

    async def validate_translation(
        self,
        original: dict[str, Any],
        translated: dict[str, Any],
        target_language: str,
    ) -> ValidationResult:
        text, usage = await run_sync(
            self._call_api,
            build_validation_prompt(original, translated, target_language),
        )
        return ValidationResult(
            is_valid=parse_validation_response(text), tokens_used=usage
        )

    def _call_api(self, prompt: str) -> tuple[str, TokenUsage]:
        data = post_json(
            self.session,
            self.api_url,
            {
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
            },
            self.name,
            timeout=self.timeout,
        )
        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise TranslationServiceError(
                f"{self.name}: unexpected response shape: {exc!r}"
            ) from exc

        usage = data.get("usage") or {}
        return text, TokenUsage(
            input_tokens=usage.get("prompt_tokens") or 0,
            output_tokens=usage.get("completion_tokens") or 0,
        )
