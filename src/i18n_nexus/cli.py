"""Command line interface for i18n-nexus.

Subcommands:

- ``sync``        -- sync every enabled target language (or ``--lang``).
- ``sync-file``   -- sync the single target file given on the command line.
- ``show-config`` -- print the effective configuration (API key masked).
- ``init``        -- create a starter ``.i18n_nexus/config.yml``.

Reports go to stdout; logs and errors go to stderr.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import Config, load_config
from .config_loader import ensure_config, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config
from .errors import ConfigurationError, I18nNexusError
from .logger import setup_logging
from .providers import create_provider
from .sync import (
    SyncEngine,
    SyncReport,
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18n-nexus",
        description="Incrementally translate JSON locale files with an LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a starter config in ./.i18n_nexus/config.yml
  i18n-nexus init

  # Preview what would be translated
  i18n-nexus sync --dry-run

  # Sync French and German only
  i18n-nexus sync --lang fr --lang de

  # Sync one file with an explicit provider
  i18n-nexus --provider claude sync-file messages/ja.json

Settings are resolved from CLI args, then environment variables (.env is
loaded automatically), then .i18n_nexus/config.yml.
        """,
    )

    parser.add_argument(
        "--root",
        help="Workspace root that base_path is relative to (default: CWD)",
    )
    parser.add_argument(
        "--base-path",
        help="Locale directory (overrides I18N_NEXUS_BASE_PATH and config files)",
    )
    parser.add_argument(
        "--base-language",
        help="Base language code (overrides I18N_NEXUS_BASE_LANGUAGE and config files)",
    )
    parser.add_argument(
        "--provider",
        help="Translation backend: openai, openai-compatible, claude, gemini or echo",
    )
    parser.add_argument("--model", help="Model name for the provider")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log line format (default: text)",
    )
    parser.add_argument("--log-file", help="Also append logs to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"i18n-nexus version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sync_parser = sub.add_parser(
        "sync", help="Sync all enabled target languages"
    )
    sync_parser.add_argument(
        "--lang",
        action="append",
        metavar="LANG",
        help="Restrict the run to this language (repeatable)",
    )
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show pending changes without translating or writing",
    )
    sync_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )

    file_parser = sub.add_parser(
        "sync-file", help="Sync a single target locale file"
    )
    file_parser.add_argument(
        "path",
        help="Locale file in the locale directory, e.g. messages/fr.json",
    )
    file_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show pending changes without translating or writing",
    )
    file_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )

    sub.add_parser(
        "show-config", help="Print the effective configuration as JSON"
    )
    sub.add_parser("init", help="Create a starter config file")

    return parser


def _cli_overrides(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.base_path:
        overrides["base_path"] = args.base_path
    if args.base_language:
        overrides["base_language"] = args.base_language
    if args.provider:
        overrides["provider"] = args.provider
    if args.model:
        overrides["model"] = args.model
    if getattr(args, "lang", None):
        overrides["target_languages"] = args.lang
    if args.debug:
        overrides["debug"] = True
    return overrides


def _load_unified(root: Path) -> UnifiedConfig:
    try:
        return build_config(load_hierarchical_config(root))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config file: {exc}") from exc


def _print_report(report: SyncReport, as_json: bool) -> None:
    if as_json:
        print(json.dumps(report_to_json(report), indent=2, ensure_ascii=False))
    elif report.dry_run:
        print(format_dry_run_preview(report))
    else:
        print(format_sync_report(report))


async def _sync(config: Config, args: argparse.Namespace) -> SyncReport:
    engine = SyncEngine(config, create_provider(config))
    if args.command == "sync-file":
        return await engine.sync_file(
            Path(args.path).resolve(), dry_run=args.dry_run
        )
    return await engine.run(dry_run=args.dry_run)


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, execute the subcommand and return the exit code.

    Exit codes: 0 on success, 1 on a fatal error or when any language
    failed.
    """
    args = _build_parser().parse_args(argv)
    load_dotenv()

    root = Path(args.root).resolve() if args.root else Path.cwd()

    if args.command == "init":
        setup_logging(debug=args.debug, log_file=args.log_file)
        path = ensure_config(root)
        print(f"Config file: {path}")
        return 0

    unified = _load_unified(root)
    setup_logging(
        debug=args.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=args.log_format,
        level=unified.logging.level,
    )

    overrides = _cli_overrides(args)
    if overrides:
        logger.debug("Config overrides from CLI: %s", ", ".join(overrides))
    config = load_config(unified, overrides, workspace_root=root)

    if args.command == "show-config":
        print(json.dumps(config.masked(), indent=2, ensure_ascii=False))
        return 0

    report = asyncio.run(_sync(config, args))
    _print_report(report, args.json)
    return 1 if report.failed else 0


def run() -> None:
    """Entry point that handles errors gracefully."""
    try:
        sys.exit(main())
    except I18nNexusError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
