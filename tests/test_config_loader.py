"""Tests for i18n_nexus.config_loader -- hierarchical config loading."""

import textwrap

import pytest

from i18n_nexus.config_loader import (
    _interpolate_recursive,
    discover_config_files,
    ensure_config,
    interpolate_env_vars,
    load_hierarchical_config,
)
from i18n_nexus.errors import ConfigurationError


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point HOME at an empty directory so the global config is absent."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


# -------------------------------------------------------------------------
# Env var interpolation
# -------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for ${VAR} and ${VAR:-default} substitution."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("OPENAI_KEY", "sk-123")
        assert interpolate_env_vars("${OPENAI_KEY}") == "sk-123"

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ}") == ""

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ:-messages}") == "messages"

    def test_empty_env_var_uses_default(self, monkeypatch):
        monkeypatch.setenv("EMPTY_VAR", "")
        assert interpolate_env_vars("${EMPTY_VAR:-en}") == "en"

    def test_literal_without_closing_brace(self):
        assert interpolate_env_vars("${NO_CLOSE") == "${NO_CLOSE"

    def test_recursive(self, monkeypatch):
        monkeypatch.setenv("LANG_DIR", "locales")
        data = {
            "translation": {"base_path": "${LANG_DIR}", "batch_size": 50},
            "list": ["${LANG_DIR}", 1],
        }
        assert _interpolate_recursive(data) == {
            "translation": {"base_path": "locales", "batch_size": 50},
            "list": ["locales", 1],
        }


# -------------------------------------------------------------------------
# File discovery
# -------------------------------------------------------------------------


class TestDiscoverConfigFiles:
    def test_empty_returns_empty(self, home, workspace):
        assert discover_config_files(workspace) == []

    def test_precedence_order(self, home, workspace, monkeypatch, tmp_path):
        explicit = _write(tmp_path / "explicit.yml", "a: 1\n")
        project = _write(workspace / ".i18n_nexus" / "config.yml", "a: 2\n")
        legacy = _write(workspace / ".i18n_nexus" / "config.yaml", "a: 3\n")
        global_cfg = _write(home / ".config" / "i18n_nexus" / "config.yml", "a: 4\n")
        monkeypatch.setenv("I18N_NEXUS_CONFIG", str(explicit))

        assert discover_config_files(workspace) == [
            explicit.resolve(),
            project,
            legacy,
            global_cfg,
        ]

    def test_defaults_to_cwd(self, home, workspace, monkeypatch):
        project = _write(workspace / ".i18n_nexus" / "config.yml", "a: 1\n")
        monkeypatch.chdir(workspace)
        assert discover_config_files() == [project.relative_to(workspace).absolute()]


# -------------------------------------------------------------------------
# Hierarchical merge
# -------------------------------------------------------------------------


class TestLoadHierarchicalConfig:
    def test_zero_config_returns_empty_dict(self, home, workspace):
        assert load_hierarchical_config(workspace) == {}

    def test_project_overrides_global_at_section_level(self, home, workspace):
        _write(
            home / ".config" / "i18n_nexus" / "config.yml",
            """\
            translation:
              base_path: global
              base_language: de
            provider:
              name: claude
            """,
        )
        _write(
            workspace / ".i18n_nexus" / "config.yml",
            """\
            translation:
              base_path: messages
            """,
        )

        merged = load_hierarchical_config(workspace)

        # Whole section replaced, not deep-merged
        assert merged["translation"] == {"base_path": "messages"}
        assert merged["provider"] == {"name": "claude"}

    def test_env_var_interpolation_after_merge(
        self, home, workspace, monkeypatch
    ):
        monkeypatch.setenv("MY_LLM_KEY", "secret")
        _write(
            workspace / ".i18n_nexus" / "config.yml",
            """\
            provider:
              api_key: ${MY_LLM_KEY}
            """,
        )
        assert load_hierarchical_config(workspace) == {
            "provider": {"api_key": "secret"}
        }

    def test_non_dict_root_skipped(self, home, workspace):
        _write(workspace / ".i18n_nexus" / "config.yml", "- a\n- b\n")
        assert load_hierarchical_config(workspace) == {}

    def test_invalid_yaml_raises(self, home, workspace):
        _write(workspace / ".i18n_nexus" / "config.yml", "a: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_hierarchical_config(workspace)


# -------------------------------------------------------------------------
# Bootstrapping
# -------------------------------------------------------------------------


class TestEnsureConfig:
    def test_creates_starter_file(self, home, workspace):
        path = ensure_config(workspace)

        assert path == workspace / ".i18n_nexus" / "config.yml"
        text = path.read_text(encoding="utf-8")
        assert "translation:" in text
        # Starter file is fully commented out: it loads as empty config
        assert load_hierarchical_config(workspace) == {}

    def test_noop_when_exists(self, home, workspace):
        existing = _write(workspace / ".i18n_nexus" / "config.yml", "a: 1\n")

        assert ensure_config(workspace) == existing
        assert existing.read_text(encoding="utf-8") == "a: 1\n"
