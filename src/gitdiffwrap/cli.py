"""gitdiffwrap CLI: Typer application with diff, list, init, and cleanup commands."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import typer
from rich.console import Console

from gitdiffwrap import __version__
from gitdiffwrap.errors import ErrorKind, GitDiffWrapError

app = typer.Typer(
    name="gitdiffwrap",
    help="Show git diffs in an external comparison tool.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

# git-style flags (-R, -uno, -M50%, --relative=dir, ...) are parsed by
# gitdiffwrap.git.request, so Typer must pass them through untouched.
_GIT_STYLE = {"ignore_unknown_options": True, "allow_extra_args": True}

_USAGE_ERRORS = (ErrorKind.ARGUMENT, ErrorKind.CONFIG)


def _fail(exc: GitDiffWrapError) -> typer.Exit:
    label = exc.kind.value.replace("_", " ").capitalize()
    console.print(f"[bold red]{label} error:[/bold red] {exc}")
    return typer.Exit(code=2 if exc.kind in _USAGE_ERRORS else 1)


def _default_git(git: Optional[str]) -> str:
    return git or os.environ.get("GITDIFFWRAP_GIT") or "git"


def _resolve_repo_root(git: str) -> Path:
    """Find the git repo root, exit 2 on failure."""
    from gitdiffwrap.git.adapter import get_repo_root
    from gitdiffwrap.errors import GitError

    try:
        return get_repo_root(git=git)
    except GitError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _prepare(
    extra_args: Sequence[str],
    paths: Optional[List[str]],
    config: Optional[str],
    git: Optional[str],
):
    """Shared setup for ``diff`` and ``list``: config, logging, and the request."""
    from gitdiffwrap.config.loader import load_config
    from gitdiffwrap.git.request import parse_args, resolve_request
    from gitdiffwrap.logs import configure_logging

    parsed = parse_args(list(extra_args))
    if paths:
        parsed.paths.extend(paths)
        parsed.dash_dash = True

    repo_root = _resolve_repo_root(_default_git(git))
    try:
        cfg = load_config(repo_root, config)
    except GitDiffWrapError as exc:
        raise _fail(exc) from exc
    if git:
        cfg.git.executable = git

    log = configure_logging(parsed.log_level or cfg.log.level)
    cwd = Path.cwd()
    log.debug("GitRoot = %s", repo_root)

    try:
        request = resolve_request(parsed, cwd=cwd, git=cfg.git.executable, log=log)
    except GitDiffWrapError as exc:
        raise _fail(exc) from exc

    if parsed.untracked is not None:
        cfg.run.untracked = parsed.untracked
    return cfg, log, repo_root, cwd, request


def _collect(cfg, log: logging.Logger, repo_root: Path, cwd: Path, request) -> Tuple[Path, tuple]:
    from gitdiffwrap.git.collector import collect_changes

    input_dir = request.input_dir(repo_root, cwd)
    records = collect_changes(
        request.diff_args(),
        working_side=request.working_side,
        include_untracked=cfg.run.untracked,
        git=cfg.git.executable,
        cwd=cwd,
        input_dir=input_dir,
        timeout=cfg.git.timeout,
        log=log,
    )
    return input_dir, records


# ── diff ──────────────────────────────────────────────────────────────────────


@app.command(context_settings=_GIT_STYLE)
def diff(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", help="Path to .gitdiffwrap.toml"),
    tool: Optional[str] = typer.Option(None, "--tool", help="Tool profile or executable"),
    tool_args: Optional[str] = typer.Option(
        None, "--args", help="Tool arguments: $1 left dir, $2 right dir, $F list file, $$ = $"
    ),
    git: Optional[str] = typer.Option(None, "--git", help="git executable"),
    temp: Optional[str] = typer.Option(None, "--temp", help="Directory for staging files"),
    path: Optional[List[str]] = typer.Option(None, "--path", help="Limit the diff to PATH (repeatable)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Stage files but do not start the tool"),
    keep: bool = typer.Option(False, "--keep", help="Keep the staging directory after the tool exits"),
) -> None:
    """Compare commits, the index, or the working copy in an external tool.

    Accepts git diff revisions ([A] [B], A..B, A...B, --cached) plus -R,
    -u/-uno, --relative[=dir], ..., -M/-C/-B/-l/-S/-G and the rename, copy and
    --diff-filter options. Everything after "--" is a path.
    """
    from gitdiffwrap.git.adapter import get_object_format
    from gitdiffwrap.git.catfile import CatFileProcess
    from gitdiffwrap.git.models import Side
    from gitdiffwrap.output import terminal
    from gitdiffwrap.staging.cleanup import spawn_cleanup
    from gitdiffwrap.staging.materialize import Materializer
    from gitdiffwrap.staging.workspace import create_workspace, delete_workspace
    from gitdiffwrap.tools.launcher import expand_args, start_tool
    from gitdiffwrap.tools.registry import build_registry

    cfg, log, repo_root, cwd, request = _prepare(ctx.args, path, config, git)
    if tool:
        cfg.tool.name = tool
    if tool_args is not None:
        cfg.tool.args = tool_args
    if temp:
        cfg.run.temp = temp
    keep = keep or cfg.run.keep_temp

    if request.working_side != Side.NEITHER:
        log.info("WorkingDir = %s", request.working_side.value.capitalize())

    try:
        registry = build_registry(repo_root / cfg.tool.profiles_dir)
        profile = registry.resolve(cfg.tool.name, cfg.tool.args)
        expanded = expand_args(profile.args)
        log.debug('GuiTool = "%s" %s', profile.program, profile.args)

        input_dir, records = _collect(cfg, log, repo_root, cwd, request)
    except GitDiffWrapError as exc:
        raise _fail(exc) from exc

    if not records:
        console.print("[dim]No changes.[/dim]")
        raise typer.Exit(code=0)

    workspace = create_workspace(cfg.run.temp, log=log)
    owned = True
    try:
        if not (dry_run or keep):
            spawn_cleanup(workspace, log=log)
            owned = False

        log.debug("Generating compare directories...")
        git_exe = cfg.git.executable
        with CatFileProcess(git=git_exe, cwd=cwd, timeout=cfg.git.timeout, log=log) as reader:
            materializer = Materializer(
                workspace,
                reader,
                input_dir=input_dir,
                working_side=request.working_side,
                use_list_file=expanded.uses_list_file,
                algorithm=get_object_format(cwd, git=git_exe),
                log=log,
            )
            result = materializer.run(
                records, root=input_dir, diff_command=request.command_line(git_exe)
            )

        if dry_run:
            terminal.render_summary(result, console)
            console.print(f"[bold]Dry run:[/bold] staged in {workspace.root}")
        else:
            start_tool(workspace.root, profile, expanded, log=log)
            if keep:
                console.print(f"[dim]Staging directory kept: {workspace.root}[/dim]")
    except GitDiffWrapError as exc:
        if owned and not keep:
            delete_workspace(workspace, log=log)
        raise _fail(exc) from exc


# ── list ──────────────────────────────────────────────────────────────────────


@app.command("list", context_settings=_GIT_STYLE)
def list_changes(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", help="Path to .gitdiffwrap.toml"),
    git: Optional[str] = typer.Option(None, "--git", help="git executable"),
    path: Optional[List[str]] = typer.Option(None, "--path", help="Limit the diff to PATH (repeatable)"),
    format: str = typer.Option("terminal", "--format", "-f", help="Output format: terminal | json"),
) -> None:
    """Print the changed files that ``diff`` would stage, without staging them."""
    from gitdiffwrap.output import json_report, terminal

    if format not in ("terminal", "json"):
        console.print(f"[bold red]Invalid format:[/bold red] {format}")
        raise typer.Exit(code=2)

    cfg, log, repo_root, cwd, request = _prepare(ctx.args, path, config, git)
    try:
        _, records = _collect(cfg, log, repo_root, cwd, request)
    except GitDiffWrapError as exc:
        raise _fail(exc) from exc

    command = request.command_line(cfg.git.executable)
    if format == "json":
        print(json_report.render(records, working_side=request.working_side, diff_command=command))
    else:
        terminal.render_records(records, Console())


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .gitdiffwrap.toml in the repo root."""
    from gitdiffwrap.config.defaults import DEFAULT_TOML
    from gitdiffwrap.config.loader import CONFIG_FILE_NAME

    repo_root = _resolve_repo_root(_default_git(None))
    config_path = repo_root / CONFIG_FILE_NAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILE_NAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── cleanup ───────────────────────────────────────────────────────────────────


@app.command(hidden=True)
def cleanup(
    parent_pid: int = typer.Option(..., "--parent-pid", help="Process to wait for"),
    temp: Path = typer.Option(..., "--temp", help="Staging directory to remove"),
) -> None:
    """Wait for gitdiffwrap and the tool to exit, then remove the staging directory."""
    from gitdiffwrap.logs import configure_logging
    from gitdiffwrap.staging.cleanup import run_cleanup

    log = configure_logging()
    if not run_cleanup(parent_pid, temp, log=log):
        raise typer.Exit(code=1)


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"gitdiffwrap {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """gitdiffwrap: show git diffs in an external comparison tool."""


def rewrite_dash_dash(argv: Sequence[str]) -> List[str]:
    """Turn ``-- PATH...`` into ``--path`` options; Click drops the ``--`` marker."""
    argv = list(argv)
    if "--" not in argv:
        return argv
    i = argv.index("--")
    return argv[:i] + [f"--path={p}" for p in argv[i + 1:]]


def main() -> None:
    app(args=rewrite_dash_dash(sys.argv[1:]), prog_name="gitdiffwrap")
