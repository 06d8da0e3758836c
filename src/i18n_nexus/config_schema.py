"""Unified configuration schema for i18n_nexus.

Defines Pydantic models for the YAML config structure with dedicated
sections for translation settings, the LLM provider and logging.

Usage:
    from i18n_nexus.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ProviderName = Literal[
    "openai", "openai-compatible", "claude", "gemini", "echo"
]


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class TranslationConfig(BaseModel):
    """Locale file layout and sync behaviour.

    All location fields are optional to support zero-config: env vars and
    CLI args can supply them at runtime instead.
    """

    base_path: str | None = Field(
        default=None,
        description="Directory holding <lang>.json files, relative to the workspace root",
    )
    base_language: str | None = Field(
        default=None, description="Base language code, e.g. 'en'"
    )
    target_languages: dict[str, bool] = Field(
        default_factory=dict,
        description="Target language codes mapped to enabled flags",
    )
    batch_size: int = Field(
        default=1000,
        ge=1,
        le=100000,
        description="Maximum keys per translation request (1-100000)",
    )
    pause_between_languages: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait between two languages",
    )
    validate_translations: bool = Field(
        default=True,
        description="Ask the provider to validate each merged translation",
    )
    git_history: bool = Field(
        default=False,
        description="Also retranslate keys changed by the last git commit",
    )

    model_config = {"frozen": True}


class ProviderConfig(BaseModel):
    """LLM provider settings."""

    name: ProviderName = Field(
        default="openai", description="Translation backend"
    )
    model: str | None = Field(default=None, description="Model name")
    api_key: str | None = Field(default=None, description="API key")
    api_url: str | None = Field(
        default=None, description="Override the backend endpoint URL"
    )
    timeout: float = Field(
        default=120.0, gt=0, description="Request read timeout in seconds"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    translation: TranslationConfig = Field(
        default_factory=TranslationConfig
    )
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully -- anything absent gets defaults.

    Raises:
        pydantic.ValidationError: If a present value is invalid.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
