"""i18n-nexus: incremental LLM-backed localization sync for JSON locale files."""

__version__ = "0.1.0"
