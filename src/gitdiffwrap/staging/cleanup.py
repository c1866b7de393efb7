"""Deferred workspace cleanup.

The main run returns as soon as the comparison tool is started, while the
tool still reads the staging trees. A detached ``gitdiffwrap cleanup``
process waits for the main process and then for the tool before deleting
the workspace.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from gitdiffwrap.errors import ToolError
from gitdiffwrap.staging.workspace import Workspace, delete_workspace

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.5

_WINDOWS_DETACHED = 0x00000008 | 0x00000200 | 0x08000000  # DETACHED_PROCESS | NEW_PROCESS_GROUP | NO_WINDOW
_SYNCHRONIZE = 0x00100000
_WAIT_TIMEOUT = 0x00000102


def cleanup_command(parent_pid: int, workspace: Workspace) -> List[str]:
    return [
        sys.executable,
        "-m",
        "gitdiffwrap",
        "cleanup",
        "--parent-pid",
        str(parent_pid),
        "--temp",
        str(workspace.root),
    ]


def _detach_kwargs() -> Dict[str, Any]:
    if os.name == "nt":
        return {"creationflags": _WINDOWS_DETACHED}
    return {"start_new_session": True}


def spawn_cleanup(workspace: Workspace, log: Optional[logging.Logger] = None) -> int:
    """Launch the detached cleanup process for *workspace*. Returns its pid."""
    log = log or logger
    argv = cleanup_command(os.getpid(), workspace)
    log.debug("CLEANUP launch: %s", " ".join(argv))
    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            close_fds=True,
            **_detach_kwargs(),
        )
    except OSError as exc:
        raise ToolError(f"Failed to launch cleanup process: {exc}") from exc
    return proc.pid


def _pid_alive_windows(pid: int) -> bool:
    import ctypes

    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    handle = kernel32.OpenProcess(_SYNCHRONIZE, False, pid)
    if not handle:
        return False
    try:
        return kernel32.WaitForSingleObject(handle, 0) == _WAIT_TIMEOUT
    finally:
        kernel32.CloseHandle(handle)


def pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    if os.name == "nt":
        return _pid_alive_windows(pid)
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else.
        return True
    return True


def wait_for_exit(pid: int, poll_interval: float = POLL_INTERVAL) -> None:
    while pid_alive(pid):
        time.sleep(poll_interval)


def _read_tool_pid(workspace: Workspace) -> Optional[int]:
    try:
        return int(workspace.tool_pid_file.read_text(encoding="ascii").strip())
    except FileNotFoundError:
        return None
    except ValueError:
        logger.warning("CLEANUP: unreadable %s", workspace.tool_pid_file)
        return None


def run_cleanup(
    parent_pid: int,
    temp: Path,
    *,
    poll_interval: float = POLL_INTERVAL,
    log: Optional[logging.Logger] = None,
) -> bool:
    """Wait for the parent and the tool to exit, then delete the workspace.

    Refuses (returns False) when *temp* has no lock file, so an arbitrary
    directory is never removed.
    """
    log = log or logger
    workspace = Workspace(temp)
    log.debug("CLEANUP: start: %d %s", parent_pid, temp)
    if not workspace.lock_file.is_file():
        log.error("CLEANUP: exiting (no lock)")
        return False

    workspace.cleanup_marker.write_text("", encoding="ascii")
    wait_for_exit(parent_pid, poll_interval)

    tool_pid = _read_tool_pid(workspace)
    if tool_pid is not None:
        wait_for_exit(tool_pid, poll_interval)

    delete_workspace(workspace, log=log)
    log.debug("CLEANUP: exiting (done)")
    return True
