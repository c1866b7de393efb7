"""Concurrent collection of diff records from two git producers.

``git diff --raw`` (tracked changes) and ``git ls-files --others`` (untracked
files) run at the same time. Each is drained on its own worker thread; lines
are parsed outside the lock and only the append is serialized. The merged
list is read once, after both producers have exited, and sorted by source
path ignoring case.

Unmerged entries that carry null hashes on both sides only repeat a
modified entry for the same path. They are dropped from every producer,
``git diff`` included, not just from the untracked-file listing.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from gitdiffwrap.errors import GitError, ProducerExitError
from gitdiffwrap.git.models import DiffRecord, Side
from gitdiffwrap.git.pathcodec import decode_path
from gitdiffwrap.git.records import normalize_separators, parse_raw_line, untracked_record

logger = logging.getLogger(__name__)

LineParser = Callable[[str], DiffRecord]


def sort_key(record: DiffRecord) -> str:
    """Case-insensitive ordinal key on the source path."""
    return record.src_path.upper()


class RecordCollector:
    """Shared, lock-guarded accumulation of records from several producers."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._records: List[DiffRecord] = []
        self._lock = threading.Lock()
        self._log = log or logger

    def add(self, record: DiffRecord) -> None:
        with self._lock:
            if not self._records:
                self._log.debug("receiving data from git...")
            self._records.append(record)

    def drain(self, lines: Iterable[str], parse: LineParser) -> int:
        """Parse every non-empty line and add the result. Returns the count added."""
        added = 0
        for line in lines:
            line = line.rstrip("\n")
            if not line:
                continue
            record = parse(line)
            # Unmerged entries with null hashes repeat the modified entries.
            if record.is_unmerged_placeholder:
                continue
            self.add(record)
            added += 1
        return added

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def sorted_records(self) -> Tuple[DiffRecord, ...]:
        with self._lock:
            snapshot = list(self._records)
        snapshot.sort(key=sort_key)
        return tuple(snapshot)


@dataclass
class Producer:
    """A git command whose stdout lines become records."""

    name: str
    argv: List[str]
    parse: LineParser
    cwd: Optional[Path] = None
    timeout: Optional[float] = None
    returncode: Optional[int] = field(default=None, init=False)


def run_producer(
    producer: Producer,
    collector: RecordCollector,
    log: Optional[logging.Logger] = None,
) -> int:
    """Run *producer* to completion, feeding *collector*. Returns records added.

    A parse failure kills the process and propagates. A non-zero exit raises
    ``ProducerExitError``.
    """
    log = log or logger
    log.info("%s", " ".join(producer.argv))
    try:
        proc = subprocess.Popen(
            producer.argv,
            cwd=producer.cwd,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
        )
    except FileNotFoundError as exc:
        raise GitError(f"git executable not found: {producer.argv[0]}") from exc

    timer: Optional[threading.Timer] = None
    timed_out = threading.Event()
    if producer.timeout is not None:

        def _expire() -> None:
            timed_out.set()
            proc.kill()

        timer = threading.Timer(producer.timeout, _expire)
        timer.daemon = True
        timer.start()

    with proc:
        try:
            assert proc.stdout is not None
            added = collector.drain(proc.stdout, producer.parse)
        except BaseException:
            proc.kill()
            raise
        finally:
            if timer is not None:
                timer.cancel()
        producer.returncode = proc.wait()

    if timed_out.is_set():
        raise GitError(f"{producer.name} timed out after {producer.timeout}s")
    if producer.returncode != 0:
        log.error("%s return: %d", producer.name, producer.returncode)
        raise ProducerExitError(producer.name, producer.returncode)
    log.debug("%s return: %d", producer.name, producer.returncode)
    return added


def collect(
    producers: Sequence[Producer],
    log: Optional[logging.Logger] = None,
) -> Tuple[DiffRecord, ...]:
    """Run all *producers* concurrently and return their merged, sorted records."""
    log = log or logger
    collector = RecordCollector(log=log)
    with ThreadPoolExecutor(max_workers=max(1, len(producers))) as pool:
        futures = [pool.submit(run_producer, p, collector, log) for p in producers]
        # result() re-raises the first producer failure; the pool still waits
        # for the remaining producers before returning.
        for future in futures:
            future.result()
    return collector.sorted_records()


def untracked_parser(side: Side, log: Optional[logging.Logger] = None) -> LineParser:
    """Build the line parser for ``git ls-files --others`` output."""

    def parse(line: str) -> DiffRecord:
        name, _ = decode_path(line)
        return untracked_record(normalize_separators(name), side, log=log)

    return parse


def diff_producers(
    diff_args: Sequence[str],
    *,
    working_side: Side,
    include_untracked: bool,
    git: str = "git",
    cwd: Optional[Path] = None,
    input_dir: Optional[Path] = None,
    timeout: Optional[float] = None,
    log: Optional[logging.Logger] = None,
) -> List[Producer]:
    """The tracked-changes producer, plus the untracked one when a working copy is compared."""
    producers = [
        Producer(
            name="git diff",
            argv=[git, "diff", "--raw", "--abbrev=64", *diff_args],
            parse=lambda line: parse_raw_line(line, log=log),
            cwd=cwd,
            timeout=timeout,
        )
    ]
    if include_untracked and working_side != Side.NEITHER:
        producers.append(
            Producer(
                name="git ls-files",
                argv=[git, "ls-files", "--others", "--exclude-standard"],
                parse=untracked_parser(working_side, log=log),
                cwd=input_dir or cwd,
                timeout=timeout,
            )
        )
    return producers


def collect_changes(
    diff_args: Sequence[str],
    *,
    working_side: Side,
    include_untracked: bool = True,
    git: str = "git",
    cwd: Optional[Path] = None,
    input_dir: Optional[Path] = None,
    timeout: Optional[float] = None,
    log: Optional[logging.Logger] = None,
) -> Tuple[DiffRecord, ...]:
    """Collect tracked (and optionally untracked) changes for one run."""
    producers = diff_producers(
        diff_args,
        working_side=working_side,
        include_untracked=include_untracked,
        git=git,
        cwd=cwd,
        input_dir=input_dir,
        timeout=timeout,
        log=log,
    )
    return collect(producers, log=log)
