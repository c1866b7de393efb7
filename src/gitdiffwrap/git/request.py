"""Resolve command-line revisions, paths and options into a ``git diff`` call.

Mirrors ``git diff`` usage::

    (nothing)            index         vs working copy
    A                    A             vs working copy
    A B  |  A..B         A             vs B
    A...B                merge-base    vs B
    --cached [A]         A (or HEAD)   vs index

Without ``--`` each positional name is classified: a name that resolves as a
revision is a commit, an existing file or directory starts the path list,
and a name that is both (or neither) is ambiguous.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from gitdiffwrap.errors import ArgumentError
from gitdiffwrap.git.adapter import is_object
from gitdiffwrap.git.models import Side

logger = logging.getLogger(__name__)

_PASSTHROUGH_SHORT = ("-M", "-C", "-l", "-S", "-G", "-B")
_PASSTHROUGH_LONG = (
    "--no-renames",
    "--break-rewrites",
    "--find-renames",
    "--find-copies",
    "--find-copies-harder",
    "--diff-filter",
)


@dataclass
class ParsedArgs:
    """git-style arguments that Typer leaves in ``ctx.args``."""

    names: List[str] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)
    options: List[str] = field(default_factory=list)
    cached: bool = False
    reverse: bool = False
    # None: relative to the current directory; "": not relative; "dir": relative to dir
    relative: Optional[str] = ""
    untracked: Optional[bool] = None
    log_level: Optional[str] = None
    dash_dash: bool = False


def parse_args(args: List[str], log: Optional[logging.Logger] = None) -> ParsedArgs:
    """Split raw arguments into names, paths and recognised git options."""
    log = log or logger
    parsed = ParsedArgs()
    for arg in args:
        if arg == "...":
            parsed.relative = None
        elif parsed.dash_dash:
            parsed.paths.append(arg)
        elif arg == "--":
            parsed.dash_dash = True
        elif not arg.startswith("-") or arg == "-":
            parsed.names.append(arg)
        elif arg in ("-v", "-V"):
            parsed.log_level = "debug"
        elif arg in ("-q", "-Q"):
            parsed.log_level = "warning"
        elif arg.lower() == "-u":
            parsed.untracked = True
        elif arg.lower() == "-uno":
            parsed.untracked = False
        elif arg == "-R":
            parsed.reverse = True
        elif arg.lower() in ("--cached", "--staged"):
            parsed.cached = True
        elif arg.lower() == "--relative":
            parsed.relative = None
        elif arg.lower().startswith("--relative="):
            parsed.relative = arg.split("=", 1)[1]
        elif arg.startswith(_PASSTHROUGH_SHORT) and not arg.startswith("--"):
            parsed.options.append(arg)
        elif arg.lower().startswith(_PASSTHROUGH_LONG):
            parsed.options.append(arg)
        else:
            log.warning('ignoring unsupported/unrecognized option "%s".', arg)
    return parsed


def _is_object_name(name: str, check: Callable[[str], bool]) -> bool:
    """Classify *name*, splitting ``A..B`` and ``A...B`` into their ends."""
    i = name.find("..")
    if i < 0:
        return check(name)
    left = name[:i]
    rest = name[i + 2:]
    right = rest[1:] if rest.startswith(".") else rest
    if left:
        return check(left) and (not right or check(right))
    if right:
        return check(right)
    return False


@dataclass
class DiffRequest:
    """A resolved comparison: what to pass to ``git diff`` and which side is live."""

    names: List[str]
    paths: List[str]
    options: List[str]
    cached: bool
    reverse: bool
    relative: Optional[str]
    working_side: Side

    def diff_args(self) -> List[str]:
        args: List[str] = []
        if self.relative is None:
            args.append("--relative")
        elif self.relative:
            args.append(f"--relative={self.relative}")
        if self.reverse:
            args.append("-R")
        args.extend(self.options)
        if self.cached:
            args.append("--cached")
        args.extend(self.names)
        args.append("--")
        args.extend(self.paths)
        return args

    def input_dir(self, repo_root: Path, cwd: Path) -> Path:
        """Directory that diff paths are relative to."""
        if self.relative is None:
            return cwd
        if not self.relative:
            return repo_root
        return repo_root / self.relative

    def command_line(self, git: str = "git") -> str:
        return " ".join([git, "diff", *self.diff_args()])


def resolve_request(
    parsed: ParsedArgs,
    *,
    cwd: Path,
    git: str = "git",
    object_check: Optional[Callable[[str], bool]] = None,
    log: Optional[logging.Logger] = None,
) -> DiffRequest:
    """Classify names, validate the commit count and pick the working side."""
    log = log or logger
    check = object_check or (lambda name: is_object(name, cwd=cwd, git=git))
    names = list(parsed.names)
    paths = list(parsed.paths)

    if not parsed.dash_dash:
        for i, name in enumerate(names):
            obj = _is_object_name(name, check)
            is_path = (cwd / name).exists()
            if obj == is_path:
                if obj:
                    raise ArgumentError(
                        f"ambiguous argument '{name}': both revision and filename. "
                        "Use '--' to separate paths from revisions."
                    )
                raise ArgumentError(
                    f"ambiguous argument '{name}': unknown revision or path not in "
                    "the working tree. Use '--' to separate paths from revisions."
                )
            if is_path:
                log.debug("Assuming argument is a path: %s", name)
                paths = names[i:] + paths
                names = names[:i]
                break
            log.debug("Assuming argument is an object: %s", name)

    commit_count = sum(2 if ".." in name else 1 for name in names)
    limit = 1 if parsed.cached else 2
    if commit_count > limit:
        raise ArgumentError(
            f"Too many <commit> parameters. Found {commit_count}. "
            f"Expected no more than {limit}."
        )

    if parsed.cached or commit_count >= 2:
        side = Side.NEITHER
    else:
        side = Side.LEFT if parsed.reverse else Side.RIGHT

    return DiffRequest(
        names=names,
        paths=paths,
        options=list(parsed.options),
        cached=parsed.cached,
        reverse=parsed.reverse,
        relative=parsed.relative,
        working_side=side,
    )
