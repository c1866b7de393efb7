"""Tests for config loading, validation, and env var overrides."""

from pathlib import Path

import pytest

from gitdiffwrap.config.defaults import DEFAULT_TOML
from gitdiffwrap.config.loader import ConfigError, load_config
from gitdiffwrap.errors import ErrorKind


class TestConfigLoading:
    def test_default_config(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg.tool.name == "windiff"
        assert cfg.tool.args is None
        assert cfg.git.executable == "git"
        assert cfg.run.untracked is True
        assert cfg.log.level == "info"

    def test_starter_template_loads(self, tmp_path: Path):
        (tmp_path / ".gitdiffwrap.toml").write_text(DEFAULT_TOML)
        cfg = load_config(tmp_path)
        assert cfg.tool.name == "windiff"
        assert cfg.run.keep_temp is False

    def test_custom_toml(self, tmp_path: Path):
        (tmp_path / ".gitdiffwrap.toml").write_text(
            'version = "1.0"\n'
            '[tool]\n'
            'name = "meld"\n'
            'args = "$1 $2"\n'
            '[git]\n'
            'timeout = 60\n'
            '[run]\n'
            'untracked = false\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.tool.name == "meld"
        assert cfg.tool.args == "$1 $2"
        assert cfg.git.timeout == 60
        assert cfg.run.untracked is False

    def test_unknown_keys_ignored(self, tmp_path: Path):
        (tmp_path / ".gitdiffwrap.toml").write_text('[tool]\nname = "kdiff3"\ncolour = "blue"\n')
        assert load_config(tmp_path).tool.name == "kdiff3"

    def test_config_override_path(self, tmp_path: Path):
        custom = tmp_path / "custom.toml"
        custom.write_text('[log]\nlevel = "debug"\n')
        cfg = load_config(tmp_path, config_override=str(custom))
        assert cfg.log.level == "debug"

    def test_missing_override_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path, config_override="/nonexistent/config.toml")
        assert exc_info.value.kind == ErrorKind.CONFIG

    def test_invalid_toml_raises(self, tmp_path: Path):
        (tmp_path / ".gitdiffwrap.toml").write_text("this is not valid [toml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_section_must_be_table(self, tmp_path: Path):
        (tmp_path / ".gitdiffwrap.toml").write_text('tool = "meld"\n')
        with pytest.raises(ConfigError, match="must be a table"):
            load_config(tmp_path)

    def test_invalid_log_level(self, tmp_path: Path):
        (tmp_path / ".gitdiffwrap.toml").write_text('[log]\nlevel = "chatty"\n')
        with pytest.raises(ConfigError, match="Invalid log level"):
            load_config(tmp_path)

    def test_invalid_timeout(self, tmp_path: Path):
        (tmp_path / ".gitdiffwrap.toml").write_text("[git]\ntimeout = -1\n")
        with pytest.raises(ConfigError, match="timeout"):
            load_config(tmp_path)


class TestEnvVarOverrides:
    def test_tool_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITDIFFWRAP_TOOL", "bcompare")
        monkeypatch.setenv("GITDIFFWRAP_ARGS", "$1 $2")
        cfg = load_config(tmp_path)
        assert cfg.tool.name == "bcompare"
        assert cfg.tool.args == "$1 $2"

    def test_env_beats_file(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".gitdiffwrap.toml").write_text('[git]\nexecutable = "/usr/bin/git"\n')
        monkeypatch.setenv("GITDIFFWRAP_GIT", "/opt/git/bin/git")
        assert load_config(tmp_path).git.executable == "/opt/git/bin/git"

    def test_untracked_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITDIFFWRAP_UNTRACKED", "0")
        assert load_config(tmp_path).run.untracked is False

    def test_untracked_override_ignores_junk(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITDIFFWRAP_UNTRACKED", "maybe")
        assert load_config(tmp_path).run.untracked is True

    def test_temp_and_log_level(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITDIFFWRAP_TEMP", str(tmp_path / "stage"))
        monkeypatch.setenv("GITDIFFWRAP_LOG_LEVEL", "WARNING")
        cfg = load_config(tmp_path)
        assert cfg.run.temp == str(tmp_path / "stage")
        assert cfg.log.level == "warning"

    def test_unknown_log_level_rejected(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITDIFFWRAP_LOG_LEVEL", "verbose")
        with pytest.raises(ConfigError, match="Invalid log level: verbose"):
            load_config(tmp_path)
