"""Tests for command-line revision/path resolution."""

from pathlib import Path

import pytest

from gitdiffwrap.errors import ArgumentError, ErrorKind
from gitdiffwrap.git.models import Side
from gitdiffwrap.git.request import parse_args, resolve_request

REVS = {"HEAD", "HEAD~1", "main", "v1.0"}


def _check(name: str) -> bool:
    return name in REVS


def _resolve(args, cwd: Path):
    return resolve_request(parse_args(args), cwd=cwd, object_check=_check)


class TestParseArgs:
    def test_names_and_paths(self):
        parsed = parse_args(["HEAD", "--", "src", "docs"])
        assert parsed.names == ["HEAD"]
        assert parsed.paths == ["src", "docs"]
        assert parsed.dash_dash

    def test_flags(self):
        parsed = parse_args(["-R", "--staged", "-uno", "-v"])
        assert parsed.reverse
        assert parsed.cached
        assert parsed.untracked is False
        assert parsed.log_level == "debug"

    def test_quiet(self):
        assert parse_args(["-q"]).log_level == "warning"

    def test_relative(self):
        assert parse_args([]).relative == ""
        assert parse_args(["--relative"]).relative is None
        assert parse_args(["..."]).relative is None
        assert parse_args(["--relative=sub/dir"]).relative == "sub/dir"

    def test_passthrough_options(self):
        parsed = parse_args(["-M50%", "-C", "--diff-filter=AM", "--find-renames=40%", "-Sneedle"])
        assert parsed.options == ["-M50%", "-C", "--diff-filter=AM", "--find-renames=40%", "-Sneedle"]

    def test_unknown_option_warns(self, caplog):
        with caplog.at_level("WARNING"):
            parsed = parse_args(["--frobnicate"])
        assert parsed.options == []
        assert "--frobnicate" in caplog.text


class TestResolve:
    def test_no_names_compares_working_copy(self, tmp_path):
        request = _resolve([], tmp_path)
        assert request.working_side == Side.RIGHT
        assert request.diff_args() == ["--"]

    def test_one_commit(self, tmp_path):
        request = _resolve(["HEAD"], tmp_path)
        assert request.names == ["HEAD"]
        assert request.working_side == Side.RIGHT

    def test_reverse_puts_working_copy_left(self, tmp_path):
        request = _resolve(["-R", "HEAD"], tmp_path)
        assert request.working_side == Side.LEFT
        assert request.diff_args() == ["-R", "HEAD", "--"]

    def test_two_commits(self, tmp_path):
        assert _resolve(["HEAD~1", "HEAD"], tmp_path).working_side == Side.NEITHER

    def test_range_counts_as_two(self, tmp_path):
        assert _resolve(["main..HEAD"], tmp_path).working_side == Side.NEITHER
        assert _resolve(["main...HEAD"], tmp_path).working_side == Side.NEITHER

    def test_cached(self, tmp_path):
        request = _resolve(["--cached", "HEAD"], tmp_path)
        assert request.working_side == Side.NEITHER
        assert request.diff_args() == ["--cached", "HEAD", "--"]

    def test_too_many_commits(self, tmp_path):
        with pytest.raises(ArgumentError, match="Too many <commit> parameters. Found 3") as exc_info:
            _resolve(["main", "HEAD~1", "HEAD"], tmp_path)
        assert exc_info.value.kind == ErrorKind.ARGUMENT

    def test_cached_allows_one_commit(self, tmp_path):
        with pytest.raises(ArgumentError, match="Expected no more than 1"):
            _resolve(["--cached", "HEAD~1", "HEAD"], tmp_path)

    def test_existing_path_starts_path_list(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "notes.txt").write_text("x")
        request = _resolve(["HEAD", "src", "notes.txt"], tmp_path)
        assert request.names == ["HEAD"]
        assert request.paths == ["src", "notes.txt"]
        assert request.diff_args() == ["HEAD", "--", "src", "notes.txt"]

    def test_name_both_revision_and_path(self, tmp_path):
        (tmp_path / "main").write_text("x")
        with pytest.raises(ArgumentError, match="both revision and filename"):
            _resolve(["main"], tmp_path)

    def test_name_neither_revision_nor_path(self, tmp_path):
        with pytest.raises(ArgumentError, match="unknown revision or path"):
            _resolve(["nothing-here"], tmp_path)

    def test_dash_dash_skips_classification(self, tmp_path):
        request = _resolve(["--", "nothing-here"], tmp_path)
        assert request.paths == ["nothing-here"]

    def test_bad_range_end(self, tmp_path):
        with pytest.raises(ArgumentError):
            _resolve(["HEAD..bogus"], tmp_path)


class TestRequestPaths:
    def test_input_dir(self, tmp_path):
        root, cwd = tmp_path, tmp_path / "sub"
        assert _resolve([], tmp_path).input_dir(root, cwd) == root
        assert _resolve(["--relative"], tmp_path).input_dir(root, cwd) == cwd
        assert _resolve(["--relative=lib"], tmp_path).input_dir(root, cwd) == root / "lib"

    def test_relative_args(self, tmp_path):
        assert _resolve(["--relative"], tmp_path).diff_args() == ["--relative", "--"]
        assert _resolve(["--relative=lib"], tmp_path).diff_args() == ["--relative=lib", "--"]

    def test_command_line(self, tmp_path):
        request = _resolve(["-M", "HEAD"], tmp_path)
        assert request.command_line() == "git diff -M HEAD --"
