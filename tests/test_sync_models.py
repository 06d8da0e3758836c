"""Tests for sync/models.py value types and the error taxonomy."""

import pytest
from pydantic import ValidationError

from i18n_nexus.errors import (
    ConfigurationError,
    I18nNexusError,
    LocaleParseError,
    MissingBaseFileError,
    ValidationFailure,
)
from i18n_nexus.sync.models import (
    ChangeKind,
    LanguageResult,
    LanguageState,
    PathChange,
    TokenUsage,
)


class TestTokenUsage:
    def test_addition(self):
        total = TokenUsage(input_tokens=3, output_tokens=1) + TokenUsage(
            input_tokens=2, output_tokens=5
        )
        assert total == TokenUsage(input_tokens=5, output_tokens=6)

    def test_addition_returns_new_value(self):
        a = TokenUsage(input_tokens=1)
        a + TokenUsage(input_tokens=1)
        assert a.input_tokens == 1

    def test_str(self):
        assert str(TokenUsage(input_tokens=7, output_tokens=2)) == (
            "Input: 7, Output: 2"
        )

    def test_frozen(self):
        with pytest.raises(ValidationError):
            TokenUsage().input_tokens = 5


class TestLanguageResult:
    def test_success_and_changes(self):
        ok = LanguageResult(language="fr", state=LanguageState.PERSISTED)
        assert ok.success
        assert not ok.has_changes

        failed = LanguageResult(
            language="fr", state=LanguageState.FAILED, deleted=1
        )
        assert not failed.success
        assert failed.has_changes

    def test_path_change_defaults(self):
        change = PathChange(path="a.b", kind=ChangeKind.DELETED)
        assert change.value is None


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(ConfigurationError, I18nNexusError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(ValidationFailure, I18nNexusError)

    def test_messages(self, tmp_path):
        path = tmp_path / "en.json"
        assert str(MissingBaseFileError(path)) == (
            f"Base language file not found: {path}"
        )
        assert str(LocaleParseError(path, "bad")) == f"Cannot parse {path}: bad"

    def test_validation_failure_carries_tokens(self):
        usage = TokenUsage(input_tokens=4)
        exc = ValidationFailure("ja", tokens_used=usage)
        assert exc.language == "ja"
        assert exc.tokens_used == usage
        assert "ja" in str(exc)
