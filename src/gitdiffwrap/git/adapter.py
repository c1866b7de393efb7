"""Git subprocess wrapper: repo root, revision checks, object format."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional

from gitdiffwrap.errors import GitError


def _run_git(
    args: List[str],
    cwd: Path,
    git: str = "git",
    timeout: Optional[float] = 30,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run a git command and return the completed process. Raises GitError on failure."""
    try:
        result = subprocess.run(
            [git, *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError(f"git is not installed or not on PATH: {git}")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")

    if check and result.returncode != 0:
        stderr = result.stderr.strip()
        raise GitError(f"git error: {stderr or f'git {args[0]} exited with {result.returncode}'}")
    return result


def get_repo_root(cwd: Optional[Path] = None, git: str = "git") -> Path:
    """Return the root of the current git repository."""
    cwd = cwd or Path.cwd()
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd, git=git).stdout
    return Path(out.strip())


def is_object(name: str, cwd: Path, git: str = "git") -> bool:
    """True if *name* resolves to a commit or tree (``rev-parse --verify -q``)."""
    result = _run_git(["rev-parse", "--verify", "-q", name], cwd=cwd, git=git, check=False)
    return result.returncode == 0


def get_object_format(cwd: Path, git: str = "git") -> str:
    """Return the repository hash algorithm name (``sha1`` or ``sha256``)."""
    result = _run_git(
        ["rev-parse", "--show-object-format"], cwd=cwd, git=git, check=False
    )
    fmt = result.stdout.strip()
    # git older than 2.29 does not know the option; those repos are always sha1
    if result.returncode != 0 or fmt not in ("sha1", "sha256"):
        return "sha1"
    return fmt
