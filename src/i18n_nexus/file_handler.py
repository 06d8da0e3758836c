"""File handler module: encoding-aware JSON locale read/write.

Provides the file I/O infrastructure shared by the sync engine and the
snapshot store.  Sync functions do the work; async wrappers hand them to
a worker thread via ``run_sync()`` so the event loop is never blocked.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from charset_normalizer import from_bytes

from i18n_nexus.core.async_utils import run_sync
from i18n_nexus.errors import LocaleParseError

# =============================================================================
# Raw Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a text file, detecting its encoding.

    UTF-8 (with or without BOM) is tried first since locale files almost
    always use it; otherwise charset-normalizer picks the encoding.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    try:
        return (raw.decode("utf-8-sig"), "utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        # Detection failed, fall back to utf-8
        return (raw.decode("utf-8", errors="replace"), "utf-8")
    return (str(result).lstrip("\ufeff"), result.encoding)


def write_file_atomic(path: Path, content: str) -> int:
    """Write UTF-8 *content* to *path* atomically.

    Writes to a temporary file in the same directory then replaces the
    target, so readers never see a partially written file.  Creates parent
    directories as needed.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode("utf-8")
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up temp file on any failure.
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(encoded)


# =============================================================================
# JSON Locale Trees
# =============================================================================


def read_json_tree(path: Path) -> dict[str, Any]:
    """Load a locale tree from a JSON file.

    An empty file is read as an empty tree.

    Raises:
        FileNotFoundError: If *path* does not exist.
        LocaleParseError: If the content is not a JSON object.
    """
    content, _ = read_file_with_encoding(path)
    if not content.strip():
        return {}
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise LocaleParseError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise LocaleParseError(
            path, f"expected a JSON object, got {type(data).__name__}"
        )
    return data


def dump_json_tree(tree: dict[str, Any]) -> str:
    """Serialise a locale tree the way locale files are written."""
    return json.dumps(tree, indent=2, ensure_ascii=False) + "\n"


def write_json_tree(path: Path, tree: dict[str, Any]) -> int:
    """Atomically write a locale tree as indented UTF-8 JSON."""
    return write_file_atomic(path, dump_json_tree(tree))


# =============================================================================
# Async Wrappers
# =============================================================================


async def read_json_tree_async(path: Path) -> dict[str, Any]:
    """Async wrapper around ``read_json_tree``."""
    return await run_sync(read_json_tree, path)


async def write_json_tree_async(path: Path, tree: dict[str, Any]) -> int:
    """Async wrapper around ``write_json_tree``."""
    return await run_sync(write_json_tree, path, tree)
