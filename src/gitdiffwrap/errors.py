"""Error kinds and the exception hierarchy shared by every layer."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    FORMAT = "format"
    PROTOCOL = "protocol"
    RETRIEVAL = "retrieval"
    PRODUCER_EXIT = "producer_exit"
    GIT = "git"
    CONFIG = "config"
    ARGUMENT = "argument"
    TOOL = "tool"


class GitDiffWrapError(Exception):
    """Base error. Callers branch on ``kind`` rather than on the class."""

    kind: ErrorKind = ErrorKind.GIT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FormatError(GitDiffWrapError):
    """Malformed ``diff --raw`` line or path escape sequence."""

    kind = ErrorKind.FORMAT

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        if offset is not None:
            message = f"{message} at position {offset}"
        super().__init__(message)
        self.offset = offset


class ProtocolError(GitDiffWrapError):
    """The cat-file stream ended early or did not follow the batch framing."""

    kind = ErrorKind.PROTOCOL


class ProducerExitError(GitDiffWrapError):
    """A record producer (git diff / git ls-files) exited non-zero."""

    kind = ErrorKind.PRODUCER_EXIT

    def __init__(self, producer: str, returncode: int) -> None:
        super().__init__(f"{producer} exited with status {returncode}")
        self.producer = producer
        self.returncode = returncode


class GitError(GitDiffWrapError):
    """Raised when git is unavailable or returns an unexpected error."""

    kind = ErrorKind.GIT


class ConfigError(GitDiffWrapError):
    """Raised when config is malformed or unreadable."""

    kind = ErrorKind.CONFIG


class ArgumentError(GitDiffWrapError):
    """Revisions and paths on the command line could not be resolved."""

    kind = ErrorKind.ARGUMENT


class ToolError(GitDiffWrapError):
    """The comparison tool could not be configured or started."""

    kind = ErrorKind.TOOL
