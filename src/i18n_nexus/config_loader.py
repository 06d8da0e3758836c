"""
Hierarchical configuration loader for i18n_nexus.

Provides convention-based config file discovery, env var interpolation,
and hierarchical merge with "project wins" semantics.

Usage:
    from i18n_nexus.config_loader import load_hierarchical_config

    config = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = ".i18n_nexus"

# ---------------------------------------------------------------------------
# 1. Env var interpolation
# ---------------------------------------------------------------------------

# Matches ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` patterns with env values.

    * ``${VAR}`` is replaced with ``os.environ.get(VAR, "")``.
    * ``${VAR:-default}`` uses *default* when VAR is unset or empty.

    Lets API keys stay out of committed config files::

        provider:
          api_key: ${OPENAI_API_KEY}
    """

    def _replace(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(obj: Any) -> Any:
    """Walk a nested dict/list and interpolate env vars in all strings."""
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# 2. Convention-based file discovery
# ---------------------------------------------------------------------------


def discover_config_files(root: Path | None = None) -> list[Path]:
    """Return existing config file paths in precedence order (highest first).

    Search order:
        1. ``I18N_NEXUS_CONFIG`` env var (explicit single path).
        2. ``.i18n_nexus/config.yml`` in the workspace root (default CWD).
        3. ``.i18n_nexus/config.yaml`` in the workspace root.
        4. ``~/.config/i18n_nexus/config.yml`` (XDG global).

    Only paths that exist on disk are returned.
    """
    candidates: list[Path] = []

    env_path = os.environ.get("I18N_NEXUS_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser().resolve())

    workspace = root or Path.cwd()
    candidates.append(workspace / CONFIG_DIR / "config.yml")
    candidates.append(workspace / CONFIG_DIR / "config.yaml")

    candidates.append(Path.home() / ".config" / "i18n_nexus" / "config.yml")

    return [p for p in candidates if p.exists()]


# ---------------------------------------------------------------------------
# 3. Config bootstrapping
# ---------------------------------------------------------------------------

_STARTER_CONFIG = """\
# i18n-nexus configuration
#
# Values can also be set via environment variables:
#   I18N_NEXUS_BASE_PATH, I18N_NEXUS_BASE_LANGUAGE,
#   I18N_NEXUS_TARGET_LANGUAGES (comma separated), I18N_NEXUS_BATCH_SIZE,
#   LLM_PROVIDER, LLM_MODEL, LLM_API_KEY, LLM_API_URL
#
# translation:
#   base_path: messages
#   base_language: en
#   target_languages:
#     fr: true
#     de: true
#     ja: false
#   batch_size: 1000
#   pause_between_languages: 1.0
#   validate_translations: true
#   git_history: false
#
# provider:
#   name: openai          # openai | openai-compatible | claude | gemini | echo
#   model: gpt-4o-mini
#   api_key: ${LLM_API_KEY}
#   api_url: null
#
# logging:
#   level: INFO
#   file: null
"""


def ensure_config(root: Path | None = None) -> Path:
    """Ensure a config file exists, creating directory and starter file if needed.

    If a config file already exists (per ``discover_config_files()``),
    return its path without modification.  Otherwise write a starter
    ``config.yml`` with commented-out sections as a template.

    Returns:
        Path to the config file (existing or newly created).
    """
    existing = discover_config_files(root)
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    config_path = (root or Path.cwd()) / CONFIG_DIR / "config.yml"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", config_path)

    return config_path


# ---------------------------------------------------------------------------
# 4. Hierarchical merge
# ---------------------------------------------------------------------------


def _load_yaml(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in config file {path}: {exc}"
        ) from exc


def load_hierarchical_config(root: Path | None = None) -> dict[str, Any]:
    """Load and merge all discovered config files.

    Merge strategy ("project wins"):
        Files are loaded from lowest precedence to highest.  Each file's
        top-level keys **replace** (not deep-merge) those from earlier files.

    After merging, env var interpolation is applied to all string values.

    Returns an empty dict when no config files exist (zero-config).

    Raises:
        ConfigurationError: If a config file is not valid YAML.
    """
    paths = discover_config_files(root)

    if not paths:
        logger.debug("No config files found -- using zero-config defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        data = _load_yaml(path)

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s) -- skipping",
                path,
                type(data).__name__,
            )

    return _interpolate_recursive(merged)
