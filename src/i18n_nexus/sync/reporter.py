"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync runs:

- ``format_sync_report`` -- full post-sync summary.
- ``format_dry_run_preview`` -- dry-run preview of pending changes.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import LanguageResult, SyncReport

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def _counts(result: LanguageResult) -> str:
    return (
        f"{result.added} added, {result.modified} modified, "
        f"{result.deleted} deleted"
    )


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one result.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = f"Sync report for base language '{report.base_language}'"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    lines.append(
        f"Synced {len(report.results)} languages: "
        f"{len(report.persisted)} persisted, "
        f"{len(report.failed)} failed, "
        f"{len(report.validation_warnings)} validation warnings"
    )
    lines.append(f"Total tokens used: {report.total_tokens}")
    lines.append("")

    if report.persisted:
        lines.append("Persisted:")
        for r in report.persisted:
            if r.has_changes:
                lines.append(
                    f"  {r.language}: {_counts(r)} "
                    f"({r.translated} translated, tokens {r.tokens})"
                )
            else:
                lines.append(f"  {r.language}: no changes")
        lines.append("")

    if report.validation_warnings:
        lines.append("Validation warnings (review manually):")
        for r in report.validation_warnings:
            lines.append(f"  {r.language}: {r.target_file}")
        lines.append("")

    if report.failed:
        lines.append("Errors:")
        for r in report.failed:
            stage = r.stage.value if r.stage else "unknown"
            lines.append(f"  {r.language} ({stage}): {r.error}")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# Dry-run preview
# ------------------------------------------------------------------


def format_dry_run_preview(report: SyncReport) -> str:
    """Format a dry-run preview, one line per language.

    Each language with pending work is shown as
    ``[lang] N added, N modified, N deleted -> N to translate``.

    Args:
        report: A dry-run sync report (``dry_run=True``).

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append("DRY RUN -- No changes will be made")
    lines.append(f"Base language: {report.base_language}")
    lines.append("")

    unchanged = 0
    for r in report.results:
        if not r.success:
            lines.append(f"[{r.language}] error: {r.error}")
        elif r.has_changes or r.translated:
            lines.append(
                f"[{r.language}] {_counts(r)} -> "
                f"{r.translated} to translate"
            )
        else:
            unchanged += 1

    if unchanged:
        lines.append("")
        lines.append(f"Unchanged: {unchanged} languages")

    if unchanged == len(report.results):
        lines.append("")
        lines.append("No changes needed.")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a structured dict for JSON serialisation.

    Args:
        report: The sync report.

    Returns:
        Dict with run info, counts, token totals and per-language details.
    """
    results_list = []
    for r in report.results:
        entry: dict = {
            "language": r.language,
            "state": r.state.value,
            "target_file": r.target_file,
            "success": r.success,
            "added": r.added,
            "modified": r.modified,
            "deleted": r.deleted,
            "translated": r.translated,
            "tokens": r.tokens.model_dump(),
            "validated": r.validated,
        }
        if r.error:
            entry["stage"] = r.stage.value if r.stage else None
            entry["error"] = r.error
        results_list.append(entry)

    return {
        "base_language": report.base_language,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": {
            "total": len(report.results),
            "persisted": len(report.persisted),
            "failed": len(report.failed),
            "validation_warnings": len(report.validation_warnings),
        },
        "tokens": report.total_tokens.model_dump(),
        "results": results_list,
    }
