"""Comparison-tool argument expansion and launch."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from gitdiffwrap.errors import ToolError
from gitdiffwrap.staging.workspace import LEFT_DIR, LIST_FILE, RIGHT_DIR, TOOL_PID_FILE
from gitdiffwrap.tools.models import ToolProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpandedArgs:
    text: str
    uses_list_file: bool

    def split(self) -> List[str]:
        return shlex.split(self.text, posix=os.name != "nt")


def expand_args(template: str) -> ExpandedArgs:
    """Substitute ``$1``, ``$2``, ``$F`` and ``$$`` in *template*.

    Paths are relative to the staging workspace, which is the tool's working
    directory.
    """
    out: List[str] = []
    uses_list_file = False
    i = 0
    while i < len(template):
        ch = template[i]
        if ch != "$":
            out.append(ch)
            i += 1
            continue
        if i + 1 == len(template):
            raise ToolError("Invalid escape sequence in --args: $")
        code = template[i + 1]
        if code == "$":
            out.append("$")
        elif code == "1":
            out.append(LEFT_DIR)
        elif code == "2":
            out.append(RIGHT_DIR)
        elif code in ("F", "f"):
            out.append(LIST_FILE)
            uses_list_file = True
        else:
            raise ToolError(f"Invalid escape sequence in --args: ${code}")
        i += 2
    return ExpandedArgs("".join(out), uses_list_file)


def start_tool(
    workspace: Path,
    profile: ToolProfile,
    args: ExpandedArgs,
    log: Optional[logging.Logger] = None,
) -> int:
    """Start the tool in *workspace* without waiting; record and return its pid."""
    log = log or logger
    argv = [profile.program, *args.split()]
    log.info("%s", " ".join(argv))
    try:
        proc = subprocess.Popen(argv, cwd=workspace)
    except OSError as exc:
        raise ToolError(f"Failed to start {profile.program}: {exc}") from exc
    (workspace / TOOL_PID_FILE).write_text(str(proc.pid), encoding="ascii")
    return proc.pid
