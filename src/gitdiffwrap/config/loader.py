"""Load and merge configuration from .gitdiffwrap.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gitdiffwrap.config.schema import (
    LOG_LEVELS,
    GitConfig,
    GitDiffWrapConfig,
    LogConfig,
    RunConfig,
    ToolConfig,
)
from gitdiffwrap.errors import ConfigError

CONFIG_FILE_NAME = ".gitdiffwrap.toml"


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _merge_env_overrides(cfg: GitDiffWrapConfig) -> None:
    """Apply GITDIFFWRAP_* environment variable overrides."""
    if val := os.environ.get("GITDIFFWRAP_TOOL"):
        cfg.tool.name = val
    if val := os.environ.get("GITDIFFWRAP_ARGS"):
        cfg.tool.args = val
    if val := os.environ.get("GITDIFFWRAP_GIT"):
        cfg.git.executable = val
    if val := os.environ.get("GITDIFFWRAP_TEMP"):
        cfg.run.temp = val
    if val := os.environ.get("GITDIFFWRAP_UNTRACKED"):
        if val in ("0", "1"):
            cfg.run.untracked = val == "1"
    if val := os.environ.get("GITDIFFWRAP_LOG_LEVEL"):
        cfg.log.level = val.strip().lower()  # type: ignore[assignment]


def _validate(cfg: GitDiffWrapConfig) -> None:
    if cfg.log.level not in LOG_LEVELS:
        raise ConfigError(f"Invalid log level: {cfg.log.level}")
    if cfg.git.timeout is not None:
        if not isinstance(cfg.git.timeout, (int, float)) or cfg.git.timeout <= 0:
            raise ConfigError(f"git.timeout must be a positive number, got {cfg.git.timeout!r}")


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> GitDiffWrapConfig:
    """Load, validate, and return a GitDiffWrapConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = GitDiffWrapConfig()
    else:
        raw = _parse_toml(config_path)
        try:
            cfg = GitDiffWrapConfig(
                version=raw.get("version", "1.0"),
                tool=_build_section(raw, ToolConfig, "tool"),
                git=_build_section(raw, GitConfig, "git"),
                run=_build_section(raw, RunConfig, "run"),
                log=_build_section(raw, LogConfig, "log"),
            )
        except TypeError as exc:
            raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
