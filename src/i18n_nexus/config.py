"""Effective runtime configuration.

Resolves every setting from CLI args, environment variables, .env files
and the YAML config (see ``config_loader``/``config_schema``).

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    I18N_NEXUS_BASE_PATH: Locale directory relative to the workspace root
    I18N_NEXUS_BASE_LANGUAGE: Base language code
    I18N_NEXUS_TARGET_LANGUAGES: Comma-separated enabled target languages
    I18N_NEXUS_BATCH_SIZE: Max keys per translation request (default: 1000)
    I18N_NEXUS_PAUSE: Seconds between languages (default: 1.0)
    LLM_PROVIDER: openai | openai-compatible | claude | gemini | echo
    LLM_MODEL, LLM_API_KEY, LLM_API_URL: Provider settings
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import get_args

from .config_schema import ProviderName, UnifiedConfig
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PROVIDER_NAMES: tuple[str, ...] = get_args(ProviderName)


@dataclass
class Config:
    workspace_root: Path
    base_path: str
    base_language: str
    target_languages: list[str] = field(default_factory=list)
    batch_size: int = 1000
    pause_between_languages: float = 1.0
    validate_translations: bool = True
    git_history: bool = False
    provider: str = "openai"
    model: str | None = None
    api_key: str | None = None
    api_url: str | None = None
    timeout: float = 120.0
    debug: bool = False

    @property
    def messages_dir(self) -> Path:
        """Absolute directory holding the locale files."""
        return (self.workspace_root / self.base_path).resolve()

    def locale_file(self, language: str) -> Path:
        return self.messages_dir / f"{language}.json"

    @property
    def base_file(self) -> Path:
        return self.locale_file(self.base_language)

    def masked(self) -> dict:
        """Config as a JSON-friendly dict with the API key hidden."""
        data = asdict(self)
        data["workspace_root"] = str(self.workspace_root)
        data["api_key"] = "******" if self.api_key else None
        return data


def validate_config(config: Config) -> None:
    """Validate configuration values.

    Raises:
        ConfigurationError: If the locale location, base language, target
            languages, batch size or provider are missing or invalid.
    """
    config.base_path = (config.base_path or "").strip()
    if not config.base_path:
        raise ConfigurationError(
            "Invalid or missing basePath configuration. Set "
            "I18N_NEXUS_BASE_PATH, pass --base-path, or add "
            "'translation.base_path' to config.yml."
        )

    config.base_language = (config.base_language or "").strip()
    if not config.base_language:
        raise ConfigurationError(
            "Invalid or missing baseLanguage configuration. Set "
            "I18N_NEXUS_BASE_LANGUAGE, pass --base-language, or add "
            "'translation.base_language' to config.yml."
        )

    enabled = [
        lang
        for lang in config.target_languages
        if lang and lang != config.base_language
    ]
    if not enabled:
        raise ConfigurationError(
            "No target languages enabled. Please enable at least one "
            "target language other than the base language."
        )

    if config.batch_size < 1:
        raise ConfigurationError(
            f"Invalid batch size {config.batch_size}: must be at least 1"
        )

    if config.provider not in PROVIDER_NAMES:
        raise ConfigurationError(
            f"Unsupported LLM provider: {config.provider}. "
            f"Choose one of: {', '.join(PROVIDER_NAMES)}"
        )


def _env_int(key: str) -> int | None:
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid {key} '{raw}': must be an integer"
        ) from None


def _env_float(key: str) -> float | None:
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid {key} '{raw}': must be a number"
        ) from None


def _split_languages(raw: str) -> list[str]:
    return [lang.strip() for lang in raw.split(",") if lang.strip()]


def load_config(
    unified: UnifiedConfig | None = None,
    cli_overrides: dict | None = None,
    workspace_root: Path | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI override > env var / .env > YAML (``unified``) > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        unified: Parsed YAML configuration; defaults when ``None``.
        cli_overrides: Dict of CLI values.  Recognised keys: base_path,
            base_language, target_languages (list), provider, model,
            api_key, api_url, batch_size, debug.
        workspace_root: Directory ``base_path`` is relative to (CWD when
            ``None``).

    Returns:
        Validated Config instance.

    Raises:
        ConfigurationError: If required values are missing or invalid.
    """
    fb = unified or UnifiedConfig()
    cli = cli_overrides or {}
    tr = fb.translation
    pv = fb.provider

    # --- Locale layout: CLI > env > YAML ---

    base_path = (
        cli.get("base_path")
        or os.getenv("I18N_NEXUS_BASE_PATH")
        or tr.base_path
        or ""
    )
    base_language = (
        cli.get("base_language")
        or os.getenv("I18N_NEXUS_BASE_LANGUAGE")
        or tr.base_language
        or ""
    )

    env_languages = os.getenv("I18N_NEXUS_TARGET_LANGUAGES")
    if cli.get("target_languages"):
        target_languages = list(cli["target_languages"])
    elif env_languages:
        target_languages = _split_languages(env_languages)
    else:
        target_languages = [
            lang for lang, enabled in tr.target_languages.items() if enabled
        ]

    # --- Numeric fields: CLI > env > YAML ---

    batch_size = cli.get("batch_size")
    if batch_size is None:
        batch_size = _env_int("I18N_NEXUS_BATCH_SIZE")
    if batch_size is None:
        batch_size = tr.batch_size

    pause = _env_float("I18N_NEXUS_PAUSE")
    if pause is None:
        pause = tr.pause_between_languages

    # --- Provider: CLI > env > YAML ---

    provider = (
        cli.get("provider") or os.getenv("LLM_PROVIDER") or pv.name
    ).strip().lower()

    config = Config(
        workspace_root=(workspace_root or Path.cwd()).resolve(),
        base_path=base_path,
        base_language=base_language,
        target_languages=target_languages,
        batch_size=batch_size,
        pause_between_languages=pause,
        validate_translations=tr.validate_translations,
        git_history=tr.git_history,
        provider=provider,
        model=cli.get("model") or os.getenv("LLM_MODEL") or pv.model,
        api_key=cli.get("api_key") or os.getenv("LLM_API_KEY") or pv.api_key,
        api_url=cli.get("api_url") or os.getenv("LLM_API_URL") or pv.api_url,
        timeout=pv.timeout,
        debug=bool(cli.get("debug", False)),
    )

    validate_config(config)

    return config
