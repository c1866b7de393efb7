"""Shared test fixtures: sample raw lines, cat-file streams, temp git repos."""

from __future__ import annotations

import io
import subprocess
from pathlib import Path
from typing import Dict, Optional

import pytest

HASH_A = "89abcdef" * 8
HASH_B = "0123abcd" * 8
NULL_64 = "0" * 64


@pytest.fixture
def raw_modified() -> str:
    """A working-copy modification with a quoted path."""
    return f':100644 100644 {"0" * 40} {HASH_A} M\t"a\\"b.txt"'


@pytest.fixture
def raw_rename() -> str:
    """A rename with a similarity score and two paths."""
    return f":100644 100644 {HASH_A} {HASH_B} R087\told/name.py\tnew/name.py"


@pytest.fixture
def raw_unicode() -> str:
    """An added file whose name is escaped as UTF-8 octal."""
    return f':000000 100644 {NULL_64} {HASH_B} A\t"caf\\303\\251.txt"'


@pytest.fixture
def raw_unmerged() -> str:
    """The null-hash placeholder git prints for an unmerged path."""
    return f":000000 000000 {NULL_64} {NULL_64} U\tconflict.txt"


def batch_response(objects: Dict[str, Optional[bytes]]) -> bytes:
    """Build the byte stream ``git cat-file --batch=Z%(objectsize)`` would answer with."""
    out = bytearray()
    for name, data in objects.items():
        if data is None:
            out += f"{name} missing\n".encode("ascii")
        else:
            out += f"Z{len(data)}\n".encode("ascii") + data + b"\n"
    return bytes(out)


@pytest.fixture
def make_reader():
    """Factory for an ObjectReader over in-memory streams."""
    from gitdiffwrap.git.catfile import ObjectReader

    def _make(payload: bytes):
        requests = io.BytesIO()
        return ObjectReader(requests, io.BytesIO(payload)), requests

    return _make


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    # Initial commit
    readme = tmp_path / "README.md"
    readme.write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=tmp_path, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    return tmp_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep GITDIFFWRAP_* variables from the developer's shell out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("GITDIFFWRAP_"):
            monkeypatch.delenv(name)
