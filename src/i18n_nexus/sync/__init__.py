"""Incremental locale sync engine.

Public API for keeping target-language JSON locale files in sync with a
base-language file.

Architecture
------------
Every run compares three trees: the current **base** file, each
**target** file, and the **snapshot** of the base taken after the last
successful sync (``<base>.json.original``).  Paths missing from the
target are *added*, base values that differ from the snapshot are
*modified*, and target paths missing from the base are *deleted*.  Only
added and modified leaves are sent to the translation backend.

Modules:

- ``engine``    -- ``SyncEngine``: orchestrates a full sync run.
- ``paths``     -- dotted-path helpers (flatten/unflatten/get/set/delete).
- ``differ``    -- ``compute_diff``: three-way base/target/snapshot diff.
- ``changelog`` -- optional git-history based change detection.
- ``batcher``   -- ``BatchCoordinator``: sequential batch translation.
- ``merger``    -- ``merge_contents`` / ``apply_changes``.
- ``snapshot``  -- ``SnapshotStore``: load/save the snapshot sidecar.
- ``models``    -- ``PathChange``, ``DiffResult``, ``TokenUsage``,
  ``LanguageResult``, ``SyncReport``: core data contracts.
- ``reporter``  -- Human-readable and JSON report formatting.

Usage example
-------------
::

    import asyncio
    from i18n_nexus.config import load_config
    from i18n_nexus.providers import create_provider
    from i18n_nexus.sync import SyncEngine, format_sync_report

    config = load_config(cli_overrides={
        "base_path": "messages",
        "base_language": "en",
        "target_languages": ["fr", "de"],
        "provider": "echo",
    })
    engine = SyncEngine(config, create_provider(config))

    preview = asyncio.run(engine.run(dry_run=True))
    report = asyncio.run(engine.run())
    print(format_sync_report(report))
"""

from .batcher import BatchCoordinator, split_into_batches
from .differ import compute_diff
from .engine import SyncEngine
from .merger import apply_changes, merge_contents
from .models import (
    ChangeKind,
    DiffResult,
    LanguageResult,
    LanguageState,
    PathChange,
    SyncReport,
    TokenUsage,
)
from .paths import flatten, unflatten
from .reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)
from .snapshot import SnapshotStore

__all__ = [
    "BatchCoordinator",
    "ChangeKind",
    "DiffResult",
    "LanguageResult",
    "LanguageState",
    "PathChange",
    "SnapshotStore",
    "SyncEngine",
    "SyncReport",
    "TokenUsage",
    "apply_changes",
    "compute_diff",
    "flatten",
    "format_dry_run_preview",
    "format_sync_report",
    "merge_contents",
    "report_to_json",
    "split_into_batches",
    "unflatten",
]
