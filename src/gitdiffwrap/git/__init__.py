"""Git interface layer: raw record parsing, cat-file reader, record collection."""

from gitdiffwrap.git.adapter import get_object_format, get_repo_root, is_object
from gitdiffwrap.git.catfile import CatFileProcess, ObjectReader, ObjectResult
from gitdiffwrap.git.collector import Producer, RecordCollector, collect, collect_changes
from gitdiffwrap.git.hashing import hash_matches, object_hash, prefix_match
from gitdiffwrap.git.models import NULL_HASH, ChangeStatus, DiffRecord, Side
from gitdiffwrap.git.pathcodec import decode_path, quote_path
from gitdiffwrap.git.records import parse_raw_line, untracked_record
from gitdiffwrap.git.request import DiffRequest, ParsedArgs, parse_args, resolve_request

__all__ = [
    "NULL_HASH",
    "CatFileProcess",
    "ChangeStatus",
    "DiffRecord",
    "DiffRequest",
    "ObjectReader",
    "ObjectResult",
    "ParsedArgs",
    "Producer",
    "RecordCollector",
    "Side",
    "collect",
    "collect_changes",
    "decode_path",
    "get_object_format",
    "get_repo_root",
    "hash_matches",
    "is_object",
    "object_hash",
    "parse_args",
    "parse_raw_line",
    "prefix_match",
    "quote_path",
    "resolve_request",
    "untracked_record",
]
