"""Staging workspace: a temp directory holding the two comparison trees.

Layout::

    gitdiffwrap_XXXX/
        lock            created exclusively; the cleanup process requires it
        cleanup         written once the cleanup process has taken over
        toolPid         pid of the comparison tool
        list            one quoted "left" "right" pair per line
        left/
        right/
            " summary"  leading space sorts it first in the tool
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "gitdiffwrap_"
LEFT_DIR = "left"
RIGHT_DIR = "right"
LIST_FILE = "list"
SUMMARY_NAME = " summary"
LOCK_FILE = "lock"
CLEANUP_FILE = "cleanup"
TOOL_PID_FILE = "toolPid"


@dataclass(frozen=True)
class Workspace:
    root: Path

    @property
    def left(self) -> Path:
        return self.root / LEFT_DIR

    @property
    def right(self) -> Path:
        return self.root / RIGHT_DIR

    @property
    def list_file(self) -> Path:
        return self.root / LIST_FILE

    @property
    def summary_file(self) -> Path:
        return self.right / SUMMARY_NAME

    @property
    def summary_entry(self) -> str:
        """The summary file's path relative to the workspace."""
        return os.path.join(RIGHT_DIR, SUMMARY_NAME)

    @property
    def lock_file(self) -> Path:
        return self.root / LOCK_FILE

    @property
    def cleanup_marker(self) -> Path:
        return self.root / CLEANUP_FILE

    @property
    def tool_pid_file(self) -> Path:
        return self.root / TOOL_PID_FILE

    def prepare(self) -> None:
        self.left.mkdir(exist_ok=True)
        self.right.mkdir(exist_ok=True)


def resolve_temp_root(temp: Optional[str]) -> Optional[Path]:
    """Expand environment variables in a configured temp root."""
    if not temp:
        return None
    return Path(os.path.expandvars(os.path.expanduser(temp)))


def create_workspace(temp: Optional[str] = None, log: Optional[logging.Logger] = None) -> Workspace:
    """Create a fresh, locked workspace under *temp* (default: system temp dir)."""
    log = log or logger
    root = resolve_temp_root(temp)
    if root is not None:
        root.mkdir(parents=True, exist_ok=True)
    path = Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=root))
    (path / LOCK_FILE).touch(exist_ok=False)
    log.debug("Created temp dir: %s", path)
    return Workspace(path)


def delete_workspace(path: Union[Path, Workspace, None], log: Optional[logging.Logger] = None) -> bool:
    """Remove a workspace. Failures are logged, not raised. Returns True if removed."""
    log = log or logger
    if path is None:
        return False
    root = path.root if isinstance(path, Workspace) else path
    if not root.exists():
        return False
    log.debug("Removing temp dir: %s", root)
    try:
        shutil.rmtree(root)
    except OSError as exc:
        log.error('Failed to clean up temp dir "%s": %s', root, exc)
        return False
    return True
