"""Merge translated values back into a locale tree.

Key design choices:

* The **base tree is the template**.  The merged tree has exactly the base
  tree's paths in the base tree's key order, so keys removed from the base
  disappear from every target and new keys appear in the same position.
* Changes are applied as tagged ``PathChange`` records; ``apply_changes``
  matches on the tag so every kind is handled explicitly.
* Existing target translations are carried over for paths this sync did
  not touch when the caller passes ``existing``.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from .models import ChangeKind, PathChange
from .paths import delete_path, flatten, get_path, set_path


def apply_changes(
    template: dict[str, Any], changes: Iterable[PathChange]
) -> dict[str, Any]:
    """Apply tagged changes to a deep copy of *template*.

    Added and modified changes overlay their value at the path, creating
    intermediate nodes as needed.  Deleted changes remove the node at the
    path; deleting under a missing parent is a no-op.

    Returns:
        The new tree.  *template* is not modified.
    """
    merged = copy.deepcopy(template)
    for change in changes:
        match change.kind:
            case ChangeKind.ADDED | ChangeKind.MODIFIED:
                set_path(merged, change.path, copy.deepcopy(change.value))
            case ChangeKind.DELETED:
                delete_path(merged, change.path)
            case _:
                raise ValueError(f"Unhandled change kind: {change.kind}")
    return merged


def merge_contents(
    base: dict[str, Any],
    translated: Mapping[str, Any],
    deleted: Iterable[str] = (),
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the new target tree from the base tree and this sync's results.

    Args:
        base: Current base language tree (the template).
        translated: Flat ``{path: translated_value}`` mapping for this sync.
        deleted: Paths to remove.
        existing: Current target tree.  When given, every base leaf that is
            not in *translated* and is also a leaf in *existing* keeps the
            existing target value.  When ``None``, untouched leaves are
            taken verbatim from *base*.

    Returns:
        The merged target tree.
    """
    changes: list[PathChange] = []

    if existing is not None:
        for path in flatten(base):
            if path in translated:
                continue
            current = get_path(existing, path)
            if current is not None and not isinstance(current, dict):
                changes.append(
                    PathChange(
                        path=path, kind=ChangeKind.MODIFIED, value=current
                    )
                )

    changes.extend(
        PathChange(path=path, kind=ChangeKind.MODIFIED, value=value)
        for path, value in translated.items()
    )
    changes.extend(
        PathChange(path=path, kind=ChangeKind.DELETED) for path in deleted
    )
    return apply_changes(base, changes)
