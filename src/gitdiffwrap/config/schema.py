"""Configuration schema: dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

LogLevel = Literal["debug", "info", "warning"]

LOG_LEVELS = ("debug", "info", "warning")


@dataclass
class ToolConfig:
    name: str = "windiff"  # profile id or executable
    args: Optional[str] = None  # None = the profile's default template
    profiles_dir: str = ".gitdiffwrap-tools"


@dataclass
class GitConfig:
    executable: str = "git"
    timeout: Optional[float] = None  # seconds; None = wait forever


@dataclass
class RunConfig:
    untracked: bool = True
    temp: Optional[str] = None  # None = system temp dir
    keep_temp: bool = False


@dataclass
class LogConfig:
    level: LogLevel = "info"


@dataclass
class GitDiffWrapConfig:
    version: str = "1.0"
    tool: ToolConfig = field(default_factory=ToolConfig)
    git: GitConfig = field(default_factory=GitConfig)
    run: RunConfig = field(default_factory=RunConfig)
    log: LogConfig = field(default_factory=LogConfig)
