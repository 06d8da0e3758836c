"""Snapshot persistence layer.

The snapshot is the base language tree as of the last successful sync.  It
is the baseline the differ compares the current base tree against to tell
a genuinely changed base string from a target that merely differs from the
base (because it is a translation).

The snapshot lives next to the base file as ``<base>.json.original``.

Key design choices:

* **Missing is not an error** -- ``load()`` returns ``None`` on the first
  run; the caller seeds the snapshot with the current base content.
* **Atomic writes** -- ``save()`` writes to a temp file then calls
  ``os.replace()`` so readers never see partial data.
* **Written last** -- the engine saves the snapshot only after the target
  file of a language has been written.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from i18n_nexus.file_handler import read_json_tree, write_json_tree

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".original"


class SnapshotStore:
    """Load and save the base-content snapshot for a base locale file."""

    @staticmethod
    def snapshot_path(base_file: Path) -> Path:
        """Return the sidecar path for *base_file* (``en.json.original``)."""
        return base_file.with_name(base_file.name + SNAPSHOT_SUFFIX)

    def exists(self, base_file: Path) -> bool:
        return self.snapshot_path(base_file).exists()

    def load(self, base_file: Path) -> dict[str, Any] | None:
        """Load the snapshot for *base_file*.

        Returns:
            The snapshot tree, or ``None`` if no snapshot has been written
            yet (first run).

        Raises:
            LocaleParseError: If the snapshot file is not valid JSON.
        """
        path = self.snapshot_path(base_file)
        if not path.exists():
            logger.info("No snapshot found at %s (first sync)", path)
            return None
        return read_json_tree(path)

    def save(self, base_file: Path, tree: dict[str, Any]) -> None:
        """Persist *tree* as the snapshot for *base_file*.

        Callers always pass the current base content.
        """
        path = self.snapshot_path(base_file)
        write_json_tree(path, tree)
        logger.debug("Snapshot written to %s", path)
