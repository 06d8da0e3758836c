"""Exception taxonomy for i18n-nexus.

Errors fall into two groups:

* **Run-fatal** -- raised before any language is processed and abort the
  whole run: ``ConfigurationError``, ``MissingBaseFileError`` and a
  ``LocaleParseError`` for the base or snapshot file.
* **Language-local** -- caught by the sync engine at the per-language
  boundary so the remaining languages still run: ``LocaleParseError`` for
  a target file and ``TranslationServiceError``.

``ChangeLogUnavailable`` and ``ValidationFailure`` are never fatal; the
modules that raise them also downgrade them to warnings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class I18nNexusError(Exception):
    """Base exception for all custom errors."""


class ConfigurationError(I18nNexusError, ValueError):
    """Raised when required configuration is missing or invalid."""


class MissingBaseFileError(I18nNexusError):
    """Raised when the base language file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Base language file not found: {path}")
        self.path = path


class LocaleParseError(I18nNexusError):
    """Raised when a locale or snapshot file is not a valid JSON object."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot parse {path}: {reason}")
        self.path = path
        self.reason = reason


class ChangeLogUnavailable(I18nNexusError):
    """Raised when version-control history cannot be queried."""


class TranslationServiceError(I18nNexusError):
    """Raised when a translation backend call fails."""


class ValidationFailure(I18nNexusError):
    """Raised when a backend reports a translation as invalid.

    ``tokens_used`` carries the validation call's ``TokenUsage`` so the
    cost is still accounted for when the failure is downgraded.
    """

    def __init__(self, language: str, tokens_used: Any = None) -> None:
        super().__init__(
            f"Translation validation failed for {language}. "
            "Please review the changes manually."
        )
        self.language = language
        self.tokens_used = tokens_used
