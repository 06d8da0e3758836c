"""Google Gemini ``generateContent`` backend (REST)."""

from __future__ import annotations

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

GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model}:generateContent"
)
GEMINI_MODEL = "gemini-1.5-flash"


class GeminiProvider:
    """Translation backend for Gemini models.

    ``api_url`` may contain a ``{model}`` placeholder.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        api_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "Invalid or missing Gemini API key. "
                "Set LLM_API_KEY or provider.api_key in config.yml."
            )
        self.name = "Gemini"
        self.model = model or GEMINI_MODEL
        self.api_url = (api_url or GEMINI_URL).format(model=self.model)
        self.timeout = timeout
        self.session = create_session({"x-goog-api-key": api_key.strip()})

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
            {"contents": [{"parts": [{"text": prompt}]}]},
            self.name,
            timeout=self.timeout,
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise TranslationServiceError(
                f"{self.name}: unexpected response shape: {exc!r}"
            ) from exc

        usage = data.get("usageMetadata") or {}
        return text, TokenUsage(
            input_tokens=usage.get("promptTokenCount") or 0,
            output_tokens=usage.get("candidatesTokenCount") or 0,
        )
