"""A provider that returns the original text (useful for testing)."""

from __future__ import annotations

from typing import Any

from i18n_nexus.sync.models import TranslationResult, ValidationResult


class EchoProvider:
    """Offline backend: every value translates to itself, always valid."""

    name = "Echo"

    async def translate(
        self, content: dict[str, Any], target_language: str
    ) -> TranslationResult:
        return TranslationResult(translated_content=dict(content))

    async def validate_translation(
        self,
        original: dict[str, Any],
        translated: dict[str, Any],
        target_language: str,
    ) -> ValidationResult:
        return ValidationResult(is_valid=True)
