"""Version-control change detection for the base locale file.

A secondary change source next to the snapshot diff: reads the base file
as committed at ``HEAD~1`` and ``HEAD`` and reports every leaf path that was
inserted or changed by the last commit.  This catches edits committed
outside of the snapshot's view (for example when the snapshot was refreshed
by a run on another machine).

The git queries are read-only (``rev-parse`` and ``show``).  Every failure
mode -- git missing, not a repository, a single commit, the file not yet
tracked, invalid JSON -- degrades to an empty result and never aborts a
run.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from i18n_nexus.errors import ChangeLogUnavailable

from .paths import flatten

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 10


def _git(args: list[str], cwd: Path) -> str:
    """Run a read-only git command and return its stdout.

    Raises:
        ChangeLogUnavailable: If git is unavailable or the command fails.
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=GIT_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as exc:
        raise ChangeLogUnavailable(f"git {args[0]} failed: {exc}") from exc

    if result.returncode != 0:
        raise ChangeLogUnavailable(
            f"git {' '.join(args)} exited with {result.returncode}: "
            f"{result.stderr.strip()}"
        )
    return result.stdout


def is_git_repository(directory: Path) -> bool:
    """Return ``True`` if *directory* is inside a git work tree."""
    try:
        output = _git(["rev-parse", "--is-inside-work-tree"], directory)
    except ChangeLogUnavailable:
        return False
    return output.strip() == "true"


def read_revision(
    base_file: Path, repo_root: Path, revision: str
) -> dict[str, Any]:
    """Return the JSON tree of *base_file* as committed at *revision*.

    Raises:
        ChangeLogUnavailable: If the revision or file cannot be read or is
            not a JSON object.
    """
    try:
        relative = base_file.resolve().relative_to(repo_root.resolve())
    except ValueError as exc:
        raise ChangeLogUnavailable(
            f"{base_file} is outside repository {repo_root}"
        ) from exc

    # "./" makes git resolve the path against cwd rather than the top level
    content = _git(
        ["show", f"{revision}:./{relative.as_posix()}"], repo_root
    )
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ChangeLogUnavailable(
            f"{relative} at {revision} is not valid JSON: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise ChangeLogUnavailable(
            f"{relative} at {revision} is not a JSON object"
        )
    return data


def committed_changes(base_file: Path, repo_root: Path) -> dict[str, Any]:
    """Leaf paths inserted or changed between ``HEAD~1`` and ``HEAD``.

    Raises:
        ChangeLogUnavailable: On any git or parse failure.
    """
    if not is_git_repository(repo_root):
        raise ChangeLogUnavailable(f"{repo_root} is not a git repository")

    previous = flatten(read_revision(base_file, repo_root, "HEAD~1"))
    current = flatten(read_revision(base_file, repo_root, "HEAD"))
    return {
        path: value
        for path, value in current.items()
        if previous.get(path) != value
    }


def collect_changelog(
    base_file: Path,
    repo_root: Path,
    current: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Best-effort set of base paths changed by the last commit.

    Args:
        base_file: Path of the base locale file.
        repo_root: Directory to run git in.
        current: The live base tree.  When given, only paths that still
            exist in it are returned, carrying the live value.

    Returns:
        ``{path: value}``; empty when history is unavailable.
    """
    try:
        changes = committed_changes(base_file, repo_root)
    except ChangeLogUnavailable as exc:
        logger.warning("Skipping base change detection: %s", exc)
        return {}

    if current is not None:
        live = flatten(current)
        changes = {path: live[path] for path in changes if path in live}

    logger.debug("Git history reports %d changed base paths", len(changes))
    return changes
