"""Tests for the cat-file batch reader, driven by in-memory streams."""

import subprocess

import pytest

from gitdiffwrap.errors import ErrorKind, GitError, ProtocolError
from gitdiffwrap.git.catfile import FAILURE_PREFIX, CatFileProcess

from conftest import HASH_A, HASH_B, batch_response


class TestFetch:
    def test_returns_content(self, make_reader):
        reader, requests = make_reader(batch_response({HASH_A: b"hello\n"}))
        result = reader.fetch(HASH_A)
        assert result.ok
        assert result.data == b"hello\n"
        assert result.size == 6
        assert requests.getvalue() == f"{HASH_A}\n".encode()

    def test_sequential_requests(self, make_reader):
        reader, requests = make_reader(batch_response({HASH_A: b"one", HASH_B: b""}))
        assert reader.fetch(HASH_A).data == b"one"
        empty = reader.fetch(HASH_B)
        assert empty.ok
        assert empty.data == b""
        assert requests.getvalue() == f"{HASH_A}\n{HASH_B}\n".encode()

    def test_binary_payload_with_newlines(self, make_reader):
        payload = b"\x00\nZ12\n\xff" * 10
        reader, _ = make_reader(batch_response({HASH_A: payload}))
        assert reader.fetch(HASH_A).data == payload

    def test_missing_object_is_a_value(self, make_reader):
        reader, _ = make_reader(batch_response({HASH_A: None, HASH_B: b"ok"}))
        missing = reader.fetch(HASH_A)
        assert not missing.ok
        assert missing.error == f"{HASH_A} missing"
        # the stream stays usable after a per-object failure
        assert reader.fetch(HASH_B).data == b"ok"


class TestFetchTo:
    def test_writes_file(self, make_reader, tmp_path):
        reader, _ = make_reader(batch_response({HASH_A: b"content"}))
        target = tmp_path / "out.txt"
        result = reader.fetch_to(HASH_A, target)
        assert result.ok
        assert result.size == 7
        assert target.read_bytes() == b"content"

    def test_missing_object_writes_placeholder(self, make_reader, tmp_path):
        reader, _ = make_reader(batch_response({HASH_A: None}))
        target = tmp_path / "out.txt"
        result = reader.fetch_to(HASH_A, target)
        assert not result.ok
        assert target.read_text(encoding="utf-8") == f"{FAILURE_PREFIX}{HASH_A} missing\n"

    def test_refuses_existing_file(self, make_reader, tmp_path):
        reader, requests = make_reader(batch_response({HASH_A: b"x"}))
        target = tmp_path / "out.txt"
        target.write_text("already here")
        with pytest.raises(GitError, match="Cannot create") as exc_info:
            reader.fetch_to(HASH_A, target)
        assert exc_info.value.kind == ErrorKind.GIT
        assert target.read_text() == "already here"
        # nothing was requested, so the stream is still in step
        assert requests.getvalue() == b""
        assert reader.fetch(HASH_A).data == b"x"


class TestProtocolErrors:
    def test_empty_stream(self, make_reader):
        reader, _ = make_reader(b"")
        with pytest.raises(ProtocolError, match="end-of-output") as exc_info:
            reader.fetch(HASH_A)
        assert exc_info.value.kind == ErrorKind.PROTOCOL

    def test_short_payload(self, make_reader):
        reader, _ = make_reader(b"Z10\nabc")
        with pytest.raises(ProtocolError, match="end-of-output"):
            reader.fetch(HASH_A)

    def test_bad_size_line(self, make_reader):
        reader, _ = make_reader(b"Z1x\nabc\n")
        with pytest.raises(ProtocolError, match="pre-blob"):
            reader.fetch(HASH_A)

    def test_empty_size(self, make_reader):
        reader, _ = make_reader(b"Z\n\n")
        with pytest.raises(ProtocolError, match="pre-blob"):
            reader.fetch(HASH_A)

    def test_missing_trailer(self, make_reader):
        reader, _ = make_reader(b"Z3\nabcX")
        with pytest.raises(ProtocolError, match="post-blob"):
            reader.fetch(HASH_A)

    def test_unterminated_error_line(self, make_reader):
        reader, _ = make_reader(b"deadbeef missing")
        with pytest.raises(ProtocolError, match="end-of-output"):
            reader.fetch(HASH_A)


class TestCatFileProcess:
    @pytest.fixture
    def large_blob(self, tmp_git_repo):
        data = bytes(range(256)) * 8192
        (tmp_git_repo / "big.bin").write_bytes(data)
        subprocess.run(["git", "add", "big.bin"], cwd=tmp_git_repo, capture_output=True, check=True)
        blob = subprocess.run(
            ["git", "hash-object", "big.bin"],
            cwd=tmp_git_repo, capture_output=True, text=True, check=True,
        ).stdout.strip()
        return blob, data

    def test_unwritable_target_keeps_stream_usable(self, tmp_git_repo, tmp_path, large_blob):
        blob, data = large_blob
        process = CatFileProcess(cwd=tmp_git_repo, timeout=30)
        with process as reader:
            with pytest.raises(GitError, match="Cannot create"):
                reader.fetch_to(blob, tmp_path / "no-such-dir" / "out")
            out = tmp_path / "out"
            assert reader.fetch_to(blob, out).size == len(data)
        assert out.read_bytes() == data
        assert process.returncode == 0

    def test_error_mid_payload_kills_process(self, tmp_git_repo, large_blob):
        blob, _ = large_blob
        process = CatFileProcess(cwd=tmp_git_repo)
        with pytest.raises(RuntimeError):
            with process as reader:
                # header read, 2 MB payload left unread in the pipe
                reader._request(blob)
                raise RuntimeError("abort")
        assert process.returncode != 0

    def test_reads_real_blob(self, tmp_git_repo):
        blob = subprocess.run(
            ["git", "rev-parse", "HEAD:README.md"],
            cwd=tmp_git_repo, capture_output=True, text=True, check=True,
        ).stdout.strip()
        process = CatFileProcess(cwd=tmp_git_repo)
        with process as reader:
            assert reader.fetch(blob).data == b"# Test\n"
            assert not reader.fetch("0" * 40).ok
        assert process.returncode == 0
