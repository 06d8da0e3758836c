"""Core sync engine that orchestrates a full locale sync run.

The ``SyncEngine`` ties together snapshot store, differ, change log,
batch coordinator and merger into a complete run.  It:

1. Validates shared inputs: configuration, base file, snapshot.
2. For each enabled target language, in configuration order:
   a. Loads the target tree.
   b. Diffs (base, target, snapshot), adding git-reported changes.
   c. Translates the changed leaves batch by batch.
   d. Merges the translations into the new target tree.
   e. Validates the result (warning only).
   f. Writes the target file, then refreshes the snapshot.
3. Builds and returns a ``SyncReport``.

Errors in shared inputs abort the run before any language is processed.
Error handling is otherwise per-language: a single language failure does
not abort the run.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from i18n_nexus.config import Config, validate_config
from i18n_nexus.core.async_utils import run_sync
from i18n_nexus.errors import (
    ConfigurationError,
    MissingBaseFileError,
    TranslationServiceError,
    ValidationFailure,
)
from i18n_nexus.file_handler import (
    read_json_tree_async,
    write_json_tree_async,
)
from i18n_nexus.sync.batcher import BatchCoordinator
from i18n_nexus.sync.changelog import collect_changelog
from i18n_nexus.sync.differ import compute_diff
from i18n_nexus.sync.merger import merge_contents
from i18n_nexus.sync.models import (
    LanguageResult,
    LanguageState,
    SyncReport,
    TokenUsage,
)
from i18n_nexus.sync.snapshot import SnapshotStore

if TYPE_CHECKING:
    from i18n_nexus.providers import TranslationProvider

logger = logging.getLogger(__name__)


class _LanguageFailed(Exception):
    """Carries the stage a language failed in up to ``sync_language``."""

    def __init__(self, stage: LanguageState, cause: Exception) -> None:
        super().__init__(str(cause))
        self.stage = stage
        self.cause = cause


class SyncEngine:
    """Keep every enabled target locale in sync with the base locale.

    Args:
        config: Validated runtime configuration.
        provider: Translation backend.
        snapshot_store: Snapshot persistence (default ``SnapshotStore()``).
        sleep: Coroutine used for the pause between languages.
    """

    def __init__(
        self,
        config: Config,
        provider: TranslationProvider,
        snapshot_store: SnapshotStore | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.provider = provider
        self.snapshot_store = snapshot_store or SnapshotStore()
        self.coordinator = BatchCoordinator(provider, config.batch_size)
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Main entry points
    # ------------------------------------------------------------------

    async def run(
        self,
        languages: list[str] | None = None,
        dry_run: bool = False,
    ) -> SyncReport:
        """Execute a full sync run.

        Args:
            languages: Restrict the run to these languages (in this order).
                Defaults to every enabled target language.
            dry_run: If ``True``, stop after diffing and write nothing.

        Returns:
            A ``SyncReport`` summarising what was (or would be) done.

        Raises:
            ConfigurationError: If the configuration is invalid.
            MissingBaseFileError: If the base locale file does not exist.
            LocaleParseError: If the base or snapshot file is not valid
                JSON.
        """
        started_at = datetime.now(timezone.utc).isoformat()

        validate_config(self.config)
        base_language = self.config.base_language
        targets = self._target_languages(languages)

        logger.info("Base Language: %s", base_language)
        logger.info("Target Languages: %s", ", ".join(targets))
        logger.info(
            "LLM provider: %s, model: %s",
            self.provider.name,
            self.config.model or "default",
        )

        base_tree, snapshot = await self._load_shared_inputs()

        results: list[LanguageResult] = []
        for index, language in enumerate(targets):
            if index > 0 and self.config.pause_between_languages > 0:
                logger.info(
                    "Pausing for %.1fs before next language...",
                    self.config.pause_between_languages,
                )
                await self._sleep(self.config.pause_between_languages)

            result = await self.sync_language(
                language, base_tree, snapshot, dry_run=dry_run
            )
            results.append(result)

        report = SyncReport(
            base_language=base_language,
            dry_run=dry_run,
            results=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Translation process completed. Total tokens used: %s",
            report.total_tokens,
        )
        return report

    async def sync_file(
        self, target_file: Path, dry_run: bool = False
    ) -> SyncReport:
        """Sync a single target locale file.

        The language is taken from the file name (``fr.json`` -> ``fr``).

        Raises:
            ConfigurationError: If *target_file* is not a ``.json`` file in
                the locale directory, or is the base language file.
        """
        target = Path(target_file)
        if not target.is_absolute():
            target = self.config.workspace_root / target
        if (
            target.suffix != ".json"
            or target.resolve().parent != self.config.messages_dir
        ):
            raise ConfigurationError(
                f"{target_file} is not a locale file in "
                f"{self.config.messages_dir}"
            )
        language = target.stem
        if language == self.config.base_language:
            raise ConfigurationError(
                f"{target_file} is the base language file; nothing to translate"
            )
        return await self.run(languages=[language], dry_run=dry_run)

    # ------------------------------------------------------------------
    # Per-language sync
    # ------------------------------------------------------------------

    async def sync_language(
        self,
        language: str,
        base_tree: dict[str, Any],
        snapshot: dict[str, Any] | None,
        dry_run: bool = False,
    ) -> LanguageResult:
        """Run the per-language state machine.

        ``IDLE -> DIFFING -> TRANSLATING -> MERGING -> VALIDATING ->
        PERSISTED``; any error moves to ``FAILED`` and is reported in the
        result rather than raised.
        """
        target_file = self.config.locale_file(language)
        logger.info("Translating to %s...", language)
        try:
            return await self._sync_language(
                language, target_file, base_tree, snapshot, dry_run
            )
        except _LanguageFailed as failure:
            cause = failure.cause
            if isinstance(cause, TranslationServiceError):
                logger.error(
                    "Error translating %s (%s): %s",
                    language,
                    failure.stage.value,
                    cause,
                )
            else:
                logger.error(
                    "Error translating %s (%s): %s",
                    language,
                    failure.stage.value,
                    cause,
                    exc_info=cause,
                )
            return LanguageResult(
                language=language,
                state=LanguageState.FAILED,
                target_file=str(target_file),
                stage=failure.stage,
                error=str(cause),
            )

    async def _sync_language(
        self,
        language: str,
        target_file: Path,
        base_tree: dict[str, Any],
        snapshot: dict[str, Any] | None,
        dry_run: bool,
    ) -> LanguageResult:
        state = LanguageState.DIFFING
        try:
            target_tree = await self._load_target(target_file, language)
            diff = compute_diff(base_tree, target_tree, snapshot)
            to_translate = diff.to_translate()
            if self.config.git_history:
                to_translate.update(
                    await run_sync(
                        collect_changelog,
                        self.config.base_file,
                        self.config.messages_dir,
                        base_tree,
                    )
                )

            counts = {
                "added": len(diff.added),
                "modified": len(diff.modified),
                "deleted": len(diff.deleted),
            }
            if dry_run:
                return LanguageResult(
                    language=language,
                    state=LanguageState.DIFFING,
                    target_file=str(target_file),
                    translated=len(to_translate),
                    **counts,
                )

            if not to_translate and not diff.deleted:
                logger.info("No changes detected for %s", language)
                await self._save_snapshot(base_tree)
                return LanguageResult(
                    language=language,
                    state=LanguageState.PERSISTED,
                    target_file=str(target_file),
                )

            state = LanguageState.TRANSLATING
            logger.info(
                "Translating %d keys for %s...", len(to_translate), language
            )
            translated, tokens = await self.coordinator.run(
                to_translate, language
            )

            state = LanguageState.MERGING
            new_tree = merge_contents(
                base_tree, translated, diff.deleted, existing=target_tree
            )

            state = LanguageState.VALIDATING
            try:
                validated, validation_tokens = await self._validate(
                    base_tree, new_tree, language
                )
            except ValidationFailure as exc:
                logger.warning("%s", exc)
                validated, validation_tokens = False, exc.tokens_used
            tokens = tokens + validation_tokens

            state = LanguageState.PERSISTED
            await write_json_tree_async(target_file, new_tree)
            logger.info("Updated content written to %s", target_file)
            await self._save_snapshot(base_tree)
        except Exception as exc:
            raise _LanguageFailed(state, exc) from exc

        logger.info("Tokens used for %s: %s", language, tokens)
        return LanguageResult(
            language=language,
            state=LanguageState.PERSISTED,
            target_file=str(target_file),
            translated=len(to_translate),
            tokens=tokens,
            validated=validated,
            **counts,
        )

    async def _validate(
        self,
        base_tree: dict[str, Any],
        new_tree: dict[str, Any],
        language: str,
    ) -> tuple[bool | None, TokenUsage]:
        """Validate the merged tree.

        Returns:
            ``(verdict, tokens)``; the verdict is ``None`` when validation
            is disabled or the validation call itself failed.

        Raises:
            ValidationFailure: If the provider reports the translation as
                invalid.  The caller downgrades this to a warning.
        """
        if not self.config.validate_translations:
            return None, TokenUsage()

        logger.info("Validating translation...")
        try:
            result = await self.provider.validate_translation(
                base_tree, new_tree, language
            )
        except TranslationServiceError as exc:
            logger.warning(
                "Translation validation for %s could not run: %s",
                language,
                exc,
            )
            return None, TokenUsage()
        except Exception as exc:
            logger.warning(
                "Translation validation for %s could not run: %s: %s",
                language,
                type(exc).__name__,
                exc,
                exc_info=exc,
            )
            return None, TokenUsage()

        if not result.is_valid:
            raise ValidationFailure(language, tokens_used=result.tokens_used)
        logger.info("Translation validation passed.")
        return True, result.tokens_used

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _target_languages(self, languages: list[str] | None) -> list[str]:
        """Languages to process, in order, without the base language."""
        selected = (
            languages
            if languages is not None
            else self.config.target_languages
        )
        targets: list[str] = []
        for language in selected:
            if language == self.config.base_language:
                logger.debug("Skipping base language %s", language)
                continue
            if language not in targets:
                targets.append(language)
        if not targets:
            raise ConfigurationError("No target languages to translate")
        return targets

    async def _load_shared_inputs(
        self,
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Load the base tree and its snapshot.

        On the first run the snapshot is seeded with the base content in
        memory; it is written only after a language succeeds.
        """
        base_file = self.config.base_file
        if not base_file.exists():
            raise MissingBaseFileError(base_file)

        base_tree = await read_json_tree_async(base_file)
        logger.info("Base content loaded from %s", base_file)

        snapshot = await run_sync(self.snapshot_store.load, base_file)
        if snapshot is None:
            snapshot = base_tree
        return base_tree, snapshot

    async def _load_target(
        self, target_file: Path, language: str
    ) -> dict[str, Any]:
        if not target_file.exists():
            logger.info(
                "No existing content found for %s, starting fresh", language
            )
            return {}
        tree = await read_json_tree_async(target_file)
        logger.info("Existing content loaded for %s", language)
        return tree

    async def _save_snapshot(self, base_tree: dict[str, Any]) -> None:
        await run_sync(
            self.snapshot_store.save, self.config.base_file, base_tree
        )
