"""Configuration loading, schema, and defaults."""

from gitdiffwrap.config.loader import load_config
from gitdiffwrap.config.schema import GitDiffWrapConfig
from gitdiffwrap.errors import ConfigError

__all__ = ["ConfigError", "GitDiffWrapConfig", "load_config"]
