"""Tests for the i18n-nexus command line interface."""

import json
from unittest.mock import patch

import pytest

from i18n_nexus import __version__
from i18n_nexus.cli import main, run
from i18n_nexus.errors import ConfigurationError


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A workspace with an English base file and the echo provider."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("I18N_NEXUS_BASE_PATH", "messages")
    monkeypatch.setenv("I18N_NEXUS_BASE_LANGUAGE", "en")
    monkeypatch.setenv("I18N_NEXUS_TARGET_LANGUAGES", "fr,de")
    monkeypatch.setenv("I18N_NEXUS_PAUSE", "0")
    monkeypatch.setenv("LLM_PROVIDER", "echo")

    messages = tmp_path / "messages"
    messages.mkdir()
    (messages / "en.json").write_text(
        json.dumps({"greeting": "Hello", "menu": {"open": "Open"}}),
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture(autouse=True)
def quiet_setup():
    """Keep the CLI from reconfiguring pytest's logging handlers."""
    with patch("i18n_nexus.cli.setup_logging") as mock_setup, patch(
        "i18n_nexus.cli.load_dotenv"
    ):
        yield mock_setup


def _cli(workspace, *args):
    return main(["--root", str(workspace), *args])


class TestSync:
    def test_sync_writes_targets(self, workspace, capsys):
        assert _cli(workspace, "sync") == 0

        out = capsys.readouterr().out
        assert "Sync report for base language 'en'" in out
        assert "2 persisted" in out
        fr = json.loads(
            (workspace / "messages" / "fr.json").read_text(encoding="utf-8")
        )
        assert fr == {"greeting": "Hello", "menu": {"open": "Open"}}
        assert (workspace / "messages" / "en.json.original").exists()

    def test_sync_json_output(self, workspace, capsys):
        assert _cli(workspace, "sync", "--json", "--lang", "fr") == 0

        data = json.loads(capsys.readouterr().out)
        assert [r["language"] for r in data["results"]] == ["fr"]
        assert data["results"][0]["added"] == 2

    def test_dry_run(self, workspace, capsys):
        assert _cli(workspace, "sync", "--dry-run") == 0

        out = capsys.readouterr().out
        assert out.startswith("DRY RUN -- No changes will be made")
        assert "[fr] 2 added" in out
        assert not (workspace / "messages" / "fr.json").exists()

    def test_failed_language_exit_code(self, workspace, capsys):
        (workspace / "messages" / "fr.json").write_text("{", encoding="utf-8")

        assert _cli(workspace, "sync") == 1
        assert "Errors:" in capsys.readouterr().out

    def test_sync_file(self, workspace):
        target = workspace / "messages" / "it.json"
        assert _cli(workspace, "sync-file", str(target)) == 0
        assert target.exists()
        assert not (workspace / "messages" / "fr.json").exists()

    def test_sync_file_outside_locale_dir(self, workspace):
        (workspace / "other").mkdir()
        target = workspace / "other" / "fr.json"

        with pytest.raises(ConfigurationError, match="not a locale file"):
            _cli(workspace, "sync-file", str(target))
        assert not (workspace / "messages" / "fr.json").exists()

    def test_global_overrides(self, workspace, quiet_setup):
        (workspace / "locales").mkdir()
        (workspace / "locales" / "de.json").write_text(
            '{"a": "Hallo"}', encoding="utf-8"
        )

        code = _cli(
            workspace,
            "--base-path",
            "locales",
            "--base-language",
            "de",
            "--debug",
            "sync",
            "--lang",
            "en",
        )

        assert code == 0
        assert (workspace / "locales" / "en.json").exists()
        assert quiet_setup.call_args[1]["debug"] is True


class TestShowConfig:
    def test_masks_api_key(self, workspace, monkeypatch, capsys):
        monkeypatch.setenv("LLM_API_KEY", "sk-very-secret")

        assert _cli(workspace, "show-config") == 0

        data = json.loads(capsys.readouterr().out)
        assert data["api_key"] == "******"
        assert data["base_language"] == "en"
        assert data["target_languages"] == ["fr", "de"]
        assert data["provider"] == "echo"

    def test_yaml_config_used(self, workspace, monkeypatch, capsys):
        monkeypatch.delenv("I18N_NEXUS_TARGET_LANGUAGES")
        config_dir = workspace / ".i18n_nexus"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text(
            "translation:\n  target_languages:\n    ja: true\n    ko: false\n",
            encoding="utf-8",
        )

        assert _cli(workspace, "show-config") == 0
        assert json.loads(capsys.readouterr().out)["target_languages"] == ["ja"]


class TestInit:
    def test_creates_config(self, workspace, capsys):
        assert _cli(workspace, "init") == 0
        assert (workspace / ".i18n_nexus" / "config.yml").exists()
        assert "Config file:" in capsys.readouterr().out


class TestRun:
    def test_fatal_error_exit_code(self, workspace, monkeypatch, capsys):
        (workspace / "messages" / "en.json").unlink()
        monkeypatch.setattr(
            "sys.argv", ["i18n-nexus", "--root", str(workspace), "sync"]
        )

        with pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: Base language file not found")

    def test_invalid_config_exit_code(self, workspace, monkeypatch, capsys):
        monkeypatch.setenv("LLM_PROVIDER", "deepl")
        monkeypatch.setattr(
            "sys.argv", ["i18n-nexus", "--root", str(workspace), "show-config"]
        )

        with pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 1
        assert "Unsupported LLM provider" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])
        assert __version__ in capsys.readouterr().out
