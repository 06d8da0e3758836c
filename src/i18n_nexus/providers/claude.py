"""Anthropic Messages API backend."""

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

CLAUDE_URL = "https://api.anthropic.com/v1/messages"
CLAUDE_MODEL = "claude-3-5-haiku-latest"
ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 8192


class ClaudeProvider:
    """Translation backend for Claude models."""

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        api_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "Invalid or missing Claude API key. "
                "Set LLM_API_KEY or provider.api_key in config.yml."
            )
        self.name = "Claude"
        self.model = model or CLAUDE_MODEL
        self.api_url = api_url or CLAUDE_URL
        self.timeout = timeout
        self.session = create_session(
            {
                "x-api-key": api_key.strip(),
                "anthropic-version": ANTHROPIC_VERSION,
            }
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
                "max_tokens": MAX_TOKENS,
                "messages": [{"role": "user", "content": prompt}],
            },
            self.name,
            timeout=self.timeout,
        )
        try:
            text = "".join(
                block.get("text", "")
                for block in data["content"]
                if block.get("type") == "text"
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise TranslationServiceError(
                f"{self.name}: unexpected response shape: {exc!r}"
            ) from exc

        usage = data.get("usage") or {}
        return text, TokenUsage(
            input_tokens=usage.get("input_tokens") or 0,
            output_tokens=usage.get("output_tokens") or 0,
        )
