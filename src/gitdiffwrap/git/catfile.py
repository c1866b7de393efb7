"""Client for ``git cat-file --batch=Z%(objectsize)``.

Each request is ``<hash>\\n``. A found object answers with::

    Z<size>\\n<size raw bytes>\\n

Anything that does not start with ``Z`` is a one-line error message from git
(``<hash> missing``, ``<hash> ambiguous``). That is a per-object retrieval
failure, not a broken stream, so it is returned as a value.

The protocol is not multiplexed: one request must be fully answered before
the next is sent. ``ObjectReader`` holds a lock for the whole exchange.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Tuple

from gitdiffwrap.errors import GitError, ProtocolError

logger = logging.getLogger(__name__)

BATCH_FORMAT = "Z%(objectsize)"
CHUNK_SIZE = 65536
FAILURE_PREFIX = "cat-file failed: "


@dataclass(frozen=True)
class ObjectResult:
    """Outcome of one retrieval: content (or bytes written) or git's message."""

    hash: str
    data: Optional[bytes] = None
    size: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ObjectReader:
    """Sequential request/response reader over a cat-file batch channel."""

    def __init__(
        self,
        requests: BinaryIO,
        responses: BinaryIO,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._requests = requests
        self._responses = responses
        self._log = log or logger
        self._lock = threading.Lock()

    # ---- low-level reads ----

    def _read_byte(self) -> int:
        b = self._responses.read(1)
        if not b:
            raise ProtocolError("Unexpected end-of-output from 'git cat-file'")
        return b[0]

    def _read_error_line(self, first: int) -> str:
        chars = bytearray([first])
        while True:
            b = self._read_byte()
            if b == 0x0A:
                return chars.decode("utf-8", errors="replace")
            chars.append(b)

    def _read_size(self) -> int:
        size = 0
        digits = 0
        while True:
            b = self._read_byte()
            if 0x30 <= b <= 0x39:
                size = size * 10 + (b - 0x30)
                digits += 1
                continue
            if b != 0x0A or digits == 0:
                raise ProtocolError(f"Unexpected pre-blob output from 'git cat-file': {b}")
            return size

    def _copy_payload(self, size: int, sink: Callable[[bytes], object]) -> None:
        remaining = size
        while remaining:
            chunk = self._responses.read(min(remaining, CHUNK_SIZE))
            if not chunk:
                raise ProtocolError("Unexpected end-of-output from 'git cat-file'")
            sink(chunk)
            remaining -= len(chunk)
        trailer = self._read_byte()
        if trailer != 0x0A:
            raise ProtocolError(f"Unexpected post-blob output from 'git cat-file': {trailer}")

    def _request(self, object_hash: str) -> Tuple[int, Optional[str]]:
        """Send a request and read the header: ``(size, None)`` or ``(0, message)``."""
        self._requests.write(f"{object_hash}\n".encode("ascii"))
        self._requests.flush()
        first = self._read_byte()
        if first != ord("Z"):
            return 0, self._read_error_line(first)
        return self._read_size(), None

    # ---- public API ----

    def fetch(self, object_hash: str) -> ObjectResult:
        """Return the object's content, or git's error message for it."""
        with self._lock:
            size, error = self._request(object_hash)
            if error is not None:
                self._log.warning("cat-file failed: %s", error)
                return ObjectResult(hash=object_hash, error=error)
            parts: List[bytes] = []
            self._copy_payload(size, parts.append)
        return ObjectResult(hash=object_hash, data=b"".join(parts), size=size)

    def fetch_to(self, object_hash: str, target: Path) -> ObjectResult:
        """Stream the object into a new file at *target*.

        The target is created before the request is sent, so a path that
        cannot be written never leaves an unread payload in the pipe. On a
        retrieval failure the file receives a one-line placeholder with git's
        message so the comparison tool still shows something.
        """
        try:
            fh = open(target, "xb")
        except OSError as exc:
            raise GitError(f"Cannot create {target}: {exc}") from exc
        with fh, self._lock:
            size, error = self._request(object_hash)
            if error is not None:
                self._log.warning("cat-file failed: %s", error)
                fh.write(f"{FAILURE_PREFIX}{error}\n".encode("utf-8"))
                return ObjectResult(hash=object_hash, error=error)
            try:
                self._copy_payload(size, fh.write)
            except OSError as exc:
                raise GitError(f"Failed to write {target}: {exc}") from exc
        return ObjectResult(hash=object_hash, size=size)


class CatFileProcess:
    """Owns the ``git cat-file`` subprocess behind an ``ObjectReader``.

    Usage::

        with CatFileProcess(git="git", cwd=repo) as reader:
            result = reader.fetch(blob_hash)
    """

    def __init__(
        self,
        git: str = "git",
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.argv = [git, "cat-file", f"--batch={BATCH_FORMAT}"]
        self.cwd = cwd
        self.timeout = timeout
        self.returncode: Optional[int] = None
        self._log = log or logger
        self._proc: Optional[subprocess.Popen[bytes]] = None

    def __enter__(self) -> ObjectReader:
        self._log.debug("git launch: %s", " ".join(self.argv))
        try:
            self._proc = subprocess.Popen(
                self.argv,
                cwd=self.cwd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise GitError(f"git executable not found: {self.argv[0]}") from exc
        assert self._proc.stdin is not None and self._proc.stdout is not None
        return ObjectReader(self._proc.stdin, self._proc.stdout, log=self._log)

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        proc = self._proc
        if proc is None:
            return
        if exc_type is not None:
            # The stream may be mid-payload; git would block writing it.
            proc.kill()
        try:
            if proc.stdin is not None:
                proc.stdin.close()
        except BrokenPipeError:
            pass
        try:
            self.returncode = proc.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            self.returncode = proc.wait()
        finally:
            if proc.stdout is not None:
                proc.stdout.close()
        if self.returncode == 0:
            self._log.debug("git return: %d", self.returncode)
        else:
            self._log.error("git return: %d", self.returncode)
