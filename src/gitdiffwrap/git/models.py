"""Data models for raw diff records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

NULL_HASH = "0"
REGULAR_FILE_MODE = 0o100644


class Side(str, Enum):
    """Which side of the comparison is the live working copy."""

    NEITHER = "neither"
    LEFT = "left"
    RIGHT = "right"


class ChangeStatus(str, Enum):
    ADDED = "A"
    COPIED = "C"
    DELETED = "D"
    MODIFIED = "M"
    RENAMED = "R"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"


@dataclass(frozen=True, slots=True)
class DiffRecord:
    """One changed path: the before/after state parsed from a ``--raw`` line."""

    src_mode: int
    dst_mode: int
    src_hash: str
    dst_hash: str
    status: str
    score: int
    src_path: str
    dst_path: str

    @property
    def is_rename(self) -> bool:
        return self.src_path != self.dst_path

    @property
    def is_unmerged_placeholder(self) -> bool:
        """Unmerged entries with null hashes duplicate the modified entries."""
        return (
            self.status == ChangeStatus.UNMERGED.value
            and self.src_hash == NULL_HASH
            and self.dst_hash == NULL_HASH
        )

    def hashes_for(self, working_side: Side) -> tuple[str, str]:
        """Return ``(working_hash, other_hash)`` for *working_side*."""
        if working_side == Side.LEFT:
            return self.src_hash, self.dst_hash
        return self.dst_hash, self.src_hash

    def __str__(self) -> str:
        return (
            f"0o{self.src_mode:o} 0o{self.dst_mode:o} {self.src_hash} {self.dst_hash} "
            f'{self.status}{self.score} "{self.src_path}" "{self.dst_path}"'
        )
