"""Materialize collected records into the left/right staging trees.

For each record, the side backed by the working copy is referenced in place
(and copied when the tool cannot read a list file). The other side is
fetched from the object store through ``git cat-file``. Working-copy files
that were touched but whose content still matches the index are skipped.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from gitdiffwrap.git.catfile import ObjectReader
from gitdiffwrap.git.hashing import hash_matches
from gitdiffwrap.git.models import NULL_HASH, DiffRecord, Side
from gitdiffwrap.staging.workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class MaterializeResult:
    """Counts and paths from one materialization pass."""

    total: int = 0
    placed: int = 0
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def summary_line(record: DiffRecord) -> str:
    if record.is_rename:
        return (
            f"{record.status} {record.src_path} ==> {record.dst_path} "
            f"({record.src_hash} ==> {record.dst_hash})"
        )
    return f"{record.status} {record.src_path} ({record.src_hash} ==> {record.dst_hash})"


class Materializer:
    """Places each record's two sides into a workspace."""

    def __init__(
        self,
        workspace: Workspace,
        reader: ObjectReader,
        *,
        input_dir: Path,
        working_side: Side,
        use_list_file: bool,
        algorithm: str = "sha1",
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.workspace = workspace
        self.reader = reader
        self.input_dir = input_dir
        self.working_side = working_side
        self.use_list_file = use_list_file
        self.algorithm = algorithm
        self._log = log or logger

    def is_unchanged(self, record: DiffRecord) -> bool:
        """True when the working file still hashes to the other side's object.

        git reports a null hash for working-copy files whose stat data
        changed; hashing the file tells whether the content did.
        """
        if record.is_rename or self.working_side == Side.NEITHER:
            return False
        working_hash, other_hash = record.hashes_for(self.working_side)
        if working_hash != NULL_HASH or other_hash == NULL_HASH:
            return False
        return hash_matches(self.input_dir / record.src_path, other_hash, self.algorithm)

    def _place(
        self,
        list_out: TextIO,
        compare_dir: Path,
        file_path: str,
        file_hash: str,
        from_working_copy: bool,
        result: MaterializeResult,
    ) -> None:
        target = compare_dir / file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        if from_working_copy:
            source = self.input_dir / file_path
            list_out.write(f'"{source}"')
            if not self.use_list_file and source.is_file() and not target.exists():
                self._log.info("FileCopy: %s", file_path)
                shutil.copy2(source, target)
            return

        list_out.write(f'"{Path(compare_dir.name) / file_path}"')
        if file_hash != NULL_HASH and not target.exists():
            self._log.info("cat-file: %s (%s)", file_path, file_hash)
            fetched = self.reader.fetch_to(file_hash, target)
            if not fetched.ok:
                result.failed.append(file_path)

    def run(
        self,
        records: Sequence[DiffRecord],
        *,
        root: Path,
        diff_command: str,
    ) -> MaterializeResult:
        """Write the list and summary files and place every record."""
        self.workspace.prepare()
        result = MaterializeResult(total=len(records))
        left_is_working = self.working_side == Side.LEFT
        right_is_working = self.working_side == Side.RIGHT

        with open(self.workspace.list_file, "w", encoding="utf-8") as list_out, open(
            self.workspace.summary_file, "w", encoding="utf-8"
        ) as summary:
            entry = self.workspace.summary_entry
            list_out.write(f'"{entry}" "{entry}"\n')
            summary.write(f"Root: {root}\n")
            summary.write(f"Diff: {diff_command}\n\n")
            summary.write(f"{len(records)} changed file(s)\n\n")

            for record in records:
                if self.is_unchanged(record):
                    self._log.debug("Skipping unchanged file: %s", record.src_path)
                    result.skipped.append(record.src_path)
                    continue

                summary.write(summary_line(record) + "\n")
                self._place(
                    list_out,
                    self.workspace.left,
                    record.src_path,
                    record.src_hash,
                    left_is_working,
                    result,
                )
                list_out.write(" ")
                self._place(
                    list_out,
                    self.workspace.right,
                    record.dst_path,
                    record.dst_hash,
                    right_is_working,
                    result,
                )
                list_out.write("\n")
                result.placed += 1

        return result
