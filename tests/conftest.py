"""Shared pytest fixtures for i18n-nexus tests."""

from __future__ import annotations

from typing import Any

import pytest

from i18n_nexus.config import Config
from i18n_nexus.errors import TranslationServiceError
from i18n_nexus.sync.models import (
    TokenUsage,
    TranslationResult,
    ValidationResult,
)

_ENV_VARS = (
    "I18N_NEXUS_CONFIG",
    "I18N_NEXUS_BASE_PATH",
    "I18N_NEXUS_BASE_LANGUAGE",
    "I18N_NEXUS_TARGET_LANGUAGES",
    "I18N_NEXUS_BATCH_SIZE",
    "I18N_NEXUS_PAUSE",
    "LLM_PROVIDER",
    "LLM_MODEL",
    "LLM_API_KEY",
    "LLM_API_URL",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of every test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class FakeProvider:
    """In-memory translation backend.

    Translates every value to ``"<lang>:<value>"`` and records each call.
    ``fail_on`` makes the matching target language raise; ``invalid``
    makes validation reject the matching language.  ``drop_keys`` answers
    the matching language with an empty reply, and ``validate_error`` is
    raised from every validation call.
    """

    name = "Fake"

    def __init__(
        self,
        fail_on: set[str] | None = None,
        invalid: set[str] | None = None,
        usage: TokenUsage | None = None,
        drop_keys: set[str] | None = None,
        validate_error: Exception | None = None,
    ) -> None:
        self.fail_on = fail_on or set()
        self.invalid = invalid or set()
        self.drop_keys = drop_keys or set()
        self.validate_error = validate_error
        self.usage = usage or TokenUsage(input_tokens=10, output_tokens=5)
        self.translate_calls: list[tuple[dict[str, Any], str]] = []
        self.validate_calls: list[str] = []

    async def translate(
        self, content: dict[str, Any], target_language: str
    ) -> TranslationResult:
        self.translate_calls.append((dict(content), target_language))
        if target_language in self.fail_on:
            raise TranslationServiceError("Fake: API call failed: boom")
        if target_language in self.drop_keys:
            return TranslationResult(translated_content={}, tokens_used=self.usage)
        return TranslationResult(
            translated_content={
                path: f"{target_language}:{value}"
                for path, value in content.items()
            },
            tokens_used=self.usage,
        )

    async def validate_translation(
        self,
        original: dict[str, Any],
        translated: dict[str, Any],
        target_language: str,
    ) -> ValidationResult:
        self.validate_calls.append(target_language)
        if self.validate_error is not None:
            raise self.validate_error
        return ValidationResult(
            is_valid=target_language not in self.invalid,
            tokens_used=TokenUsage(input_tokens=1, output_tokens=1),
        )


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def messages_dir(tmp_path):
    """Locale directory inside a temporary workspace."""
    directory = tmp_path / "messages"
    directory.mkdir()
    return directory


@pytest.fixture
def make_config(tmp_path):
    """Factory for a Config rooted at ``tmp_path`` with locales in messages/."""

    def _make(**overrides: Any) -> Config:
        values: dict[str, Any] = {
            "workspace_root": tmp_path,
            "base_path": "messages",
            "base_language": "en",
            "target_languages": ["fr", "de"],
            "batch_size": 1000,
            "pause_between_languages": 0,
            "validate_translations": True,
            "provider": "echo",
        }
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def make_provider():
    """Factory for ``FakeProvider`` instances with custom behaviour."""
    return FakeProvider
