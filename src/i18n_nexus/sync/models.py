"""Pydantic models for the locale sync engine.

Defines the core data contracts used across all sync modules:

- ``ChangeKind``: Tag of a single path change (added/modified/deleted).
- ``PathChange``: One tagged change produced by the differ.
- ``DiffResult``: Ordered set of path changes for one target language.
- ``TokenUsage``: Input/output token counters; additive value type.
- ``TranslationResult`` / ``ValidationResult``: Backend return values.
- ``LanguageState``: Per-language state machine positions.
- ``LanguageResult``: Outcome of syncing one target language.
- ``SyncReport``: Aggregate results for a full sync run.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from .paths import flatten


class ChangeKind(str, Enum):
    """Classification of a path in a three-way diff."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


class PathChange(BaseModel):
    """A single tagged change.

    Attributes:
        path: Dotted key path.
        kind: What happened to the path.
        value: Base value for added/modified (a string, an opaque list, or
            a whole sub-tree); ``None`` for deleted.
    """

    path: str
    kind: ChangeKind
    value: Any = None

    model_config = {"frozen": True}


class DiffResult(BaseModel):
    """Changes of one target tree relative to the base tree.

    ``changes`` keeps the order in which the differ found them: base walk
    order for added/modified, followed by deletions in target walk order.
    """

    changes: list[PathChange] = []

    model_config = {"frozen": True}

    @property
    def added(self) -> dict[str, Any]:
        """Paths present in base but absent from target."""
        return {
            c.path: c.value
            for c in self.changes
            if c.kind == ChangeKind.ADDED
        }

    @property
    def modified(self) -> dict[str, Any]:
        """Paths whose base value changed since the snapshot."""
        return {
            c.path: c.value
            for c in self.changes
            if c.kind == ChangeKind.MODIFIED
        }

    @property
    def deleted(self) -> list[str]:
        """Paths present in target but absent from base."""
        return [c.path for c in self.changes if c.kind == ChangeKind.DELETED]

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def to_translate(self) -> dict[str, Any]:
        """Flat leaf mapping of everything that needs translating.

        Added sub-trees are expanded into their leaf paths so every entry
        is a single translatable value.
        """
        result: dict[str, Any] = {}
        for change in self.changes:
            if change.kind == ChangeKind.DELETED:
                continue
            if isinstance(change.value, dict):
                result.update(flatten(change.value, change.path))
            else:
                result[change.path] = change.value
        return result


class TokenUsage(BaseModel):
    """Token counters reported by a translation backend.

    Values are combined with ``+``; nothing mutates a usage in place.
    """

    input_tokens: int = 0
    output_tokens: int = 0

    model_config = {"frozen": True}

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    def __str__(self) -> str:
        return f"Input: {self.input_tokens}, Output: {self.output_tokens}"


class TranslationResult(BaseModel):
    """Return value of ``TranslationProvider.translate``."""

    translated_content: dict[str, Any]
    tokens_used: TokenUsage = TokenUsage()

    model_config = {"frozen": True}


class ValidationResult(BaseModel):
    """Return value of ``TranslationProvider.validate_translation``."""

    is_valid: bool
    tokens_used: TokenUsage = TokenUsage()

    model_config = {"frozen": True}


class LanguageState(str, Enum):
    """Positions of the per-language sync state machine."""

    IDLE = "idle"
    DIFFING = "diffing"
    TRANSLATING = "translating"
    MERGING = "merging"
    VALIDATING = "validating"
    PERSISTED = "persisted"
    FAILED = "failed"


class LanguageResult(BaseModel):
    """Outcome of syncing one target language.

    Attributes:
        language: Target language code.
        state: Final state (``PERSISTED`` or ``FAILED``; ``DIFFING`` for a
            dry run, which stops after the diff).
        target_file: Path of the target locale file.
        added: Number of added paths.
        modified: Number of modified paths.
        deleted: Number of deleted paths.
        translated: Number of leaf values sent to the backend.
        tokens: Tokens used for this language (translation + validation).
        validated: Validation verdict, ``None`` if validation did not run.
        stage: State in which the failure happened, if any.
        error: Error message if the language failed.
    """

    language: str
    state: LanguageState
    target_file: str = ""
    added: int = 0
    modified: int = 0
    deleted: int = 0
    translated: int = 0
    tokens: TokenUsage = TokenUsage()
    validated: bool | None = None
    stage: LanguageState | None = None
    error: str | None = None

    model_config = {"frozen": True}

    @property
    def success(self) -> bool:
        return self.state != LanguageState.FAILED

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.deleted)


class SyncReport(BaseModel):
    """Aggregate report for a full sync run.

    Attributes:
        base_language: Base language code of the run.
        dry_run: Whether this was a dry-run (no changes applied).
        results: Per-language results, in processing order.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run completed.
    """

    base_language: str
    dry_run: bool = False
    results: list[LanguageResult] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def total_tokens(self) -> TokenUsage:
        """Token usage summed over all languages."""
        total = TokenUsage()
        for r in self.results:
            total = total + r.tokens
        return total

    @property
    def persisted(self) -> list[LanguageResult]:
        """Results that reached ``PERSISTED``."""
        return [
            r for r in self.results if r.state == LanguageState.PERSISTED
        ]

    @property
    def failed(self) -> list[LanguageResult]:
        """Results that ended in ``FAILED``."""
        return [r for r in self.results if r.state == LanguageState.FAILED]

    @property
    def validation_warnings(self) -> list[LanguageResult]:
        """Persisted results whose validation did not pass."""
        return [r for r in self.persisted if r.validated is False]

    def summary(self) -> str:
        """Format a short human-readable summary of the run."""
        lines = [
            f"Sync report for base language '{self.base_language}'"
            + (" (dry run)" if self.dry_run else ""),
            f"  Languages:  {len(self.results)}",
            f"  Persisted:  {len(self.persisted)}",
            f"  Failed:     {len(self.failed)}",
            f"  Warnings:   {len(self.validation_warnings)}",
            f"  Tokens:     {self.total_tokens}",
        ]
        return "\n".join(lines)
