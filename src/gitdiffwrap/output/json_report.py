"""JSON rendering of collected change records."""

from __future__ import annotations

import json
from typing import Any, Dict, Sequence

from gitdiffwrap.git.models import DiffRecord, Side


def record_to_dict(rec: DiffRecord) -> Dict[str, Any]:
    return {
        "status": rec.status,
        "score": rec.score,
        "src_mode": f"{rec.src_mode:06o}",
        "dst_mode": f"{rec.dst_mode:06o}",
        "src_hash": rec.src_hash,
        "dst_hash": rec.dst_hash,
        "src_path": rec.src_path,
        "dst_path": rec.dst_path,
    }


def to_dict(records: Sequence[DiffRecord], *, working_side: Side, diff_command: str) -> Dict[str, Any]:
    return {
        "version": "1.0",
        "diff": diff_command,
        "working_side": working_side.value,
        "total": len(records),
        "records": [record_to_dict(r) for r in records],
    }


def render(records: Sequence[DiffRecord], *, working_side: Side, diff_command: str) -> str:
    """Return formatted JSON string."""
    return json.dumps(
        to_dict(records, working_side=working_side, diff_command=diff_command),
        indent=2,
    )
