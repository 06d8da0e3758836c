"""Dotted key-path helpers for nested locale trees.

A locale tree is a nested ``dict`` whose leaves are strings.  Diffing and
merging work on a flat view of the tree where every leaf is addressed by
its dot-joined key path (``"menu.file.open"``).

Only ``dict`` nodes are recursed into.  Anything else -- strings, numbers,
lists -- terminates a path and is treated as an opaque leaf.
"""

from __future__ import annotations

from typing import Any

SEPARATOR = "."


def join_path(prefix: str, key: str) -> str:
    """Append *key* to *prefix* (an empty prefix yields *key*)."""
    return f"{prefix}{SEPARATOR}{key}" if prefix else key


def split_path(path: str) -> list[str]:
    """Split a dotted path into its key segments."""
    return path.split(SEPARATOR)


def flatten(tree: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten a nested tree into ``{dotted_path: leaf}``.

    Leaves are emitted depth-first in the tree's own key order.  Empty
    sub-trees contribute no entries.
    """
    flat: dict[str, Any] = {}
    for key, value in tree.items():
        path = join_path(prefix, key)
        if isinstance(value, dict):
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def unflatten(mapping: dict[str, Any]) -> dict[str, Any]:
    """Rebuild a nested tree from a ``{dotted_path: leaf}`` mapping."""
    tree: dict[str, Any] = {}
    for path, value in mapping.items():
        set_path(tree, path, value)
    return tree


def get_path(tree: dict[str, Any], path: str, default: Any = None) -> Any:
    """Return the node at *path*, or *default* if any segment is missing."""
    current: Any = tree
    for key in split_path(path):
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def set_path(tree: dict[str, Any], path: str, value: Any) -> None:
    """Set *value* at *path*, creating intermediate dicts on demand.

    A non-dict intermediate node is replaced by a dict.  Mutates *tree*.
    """
    keys = split_path(path)
    current = tree
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def delete_path(tree: dict[str, Any], path: str) -> bool:
    """Remove the node at *path*.

    No-op when the node or any of its parents is missing.

    Returns:
        ``True`` if a node was removed.
    """
    keys = split_path(path)
    current: Any = tree
    for key in keys[:-1]:
        if not isinstance(current, dict) or key not in current:
            return False
        current = current[key]
    if not isinstance(current, dict) or keys[-1] not in current:
        return False
    del current[keys[-1]]
    return True
