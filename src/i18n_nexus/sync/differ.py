"""Three-way diff of a target locale tree against the base tree.

Compares (base, target, snapshot) where *snapshot* is the base content as
of the last successful sync:

* A base key missing from the target is **added**.
* A base leaf that differs from the target leaf is **modified** only when
  the base value also differs from the snapshot.  Base and target strings
  are expected to differ (they are in different languages), so a textual
  difference alone never triggers a retranslation.
* A target key missing from the base is **deleted**.

Type mismatches (one side a sub-tree, the other a leaf) are reported as
added so the whole node is replaced rather than partially merged.
"""

from __future__ import annotations

import logging
from typing import Any

from .models import ChangeKind, DiffResult, PathChange
from .paths import join_path

logger = logging.getLogger(__name__)

_MISSING = object()


def compute_diff(
    base: dict[str, Any],
    target: dict[str, Any],
    snapshot: dict[str, Any] | None,
) -> DiffResult:
    """Classify every differing path of *target* relative to *base*.

    Args:
        base: Current base language tree.
        target: Current target language tree.
        snapshot: Base tree as of the last successful sync, or ``None`` on
            the first ever sync.  Without a snapshot there is nothing to
            compare against, so existing target values are accepted and
            nothing is reported as modified.

    Returns:
        A ``DiffResult`` whose paths are pairwise disjoint across kinds.
    """
    changes: list[PathChange] = []
    _diff_level(base, target, snapshot, "", changes)

    result = DiffResult(changes=changes)
    logger.debug(
        "Diff result: added=%d, modified=%d, deleted=%d",
        len(result.added),
        len(result.modified),
        len(result.deleted),
    )
    return result


def _diff_level(
    base: dict[str, Any],
    target: dict[str, Any],
    snapshot: Any,
    prefix: str,
    changes: list[PathChange],
) -> None:
    """Diff one tree level and recurse into shared sub-trees."""
    has_snapshot = snapshot is not None
    snapshot_level = snapshot if isinstance(snapshot, dict) else {}

    for key, base_value in base.items():
        path = join_path(prefix, key)

        if key not in target:
            changes.append(
                PathChange(path=path, kind=ChangeKind.ADDED, value=base_value)
            )
            continue

        target_value = target[key]
        base_is_tree = isinstance(base_value, dict)
        target_is_tree = isinstance(target_value, dict)

        if base_is_tree and target_is_tree:
            # A missing snapshot sub-tree under an existing snapshot means
            # the whole sub-tree is new in base since the last sync.
            child_snapshot = (
                snapshot_level.get(key, {}) if has_snapshot else None
            )
            _diff_level(
                base_value, target_value, child_snapshot, path, changes
            )
            continue

        if base_is_tree != target_is_tree:
            changes.append(
                PathChange(path=path, kind=ChangeKind.ADDED, value=base_value)
            )
            continue

        if base_value == target_value or not has_snapshot:
            continue

        if snapshot_level.get(key, _MISSING) != base_value:
            changes.append(
                PathChange(
                    path=path, kind=ChangeKind.MODIFIED, value=base_value
                )
            )

    for key in target:
        if key not in base:
            changes.append(
                PathChange(path=join_path(prefix, key), kind=ChangeKind.DELETED)
            )
