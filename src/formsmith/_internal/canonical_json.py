"""Centralized JSON serialization.

Two writers are used everywhere output is produced:
- canonical_dumps: byte-stable reports (sorted keys, compact separators)
- document_dumps: human-readable config documents (declaration key order, indented)

Both are deterministic for equal inputs, so re-running a stage on unchanged
inputs yields byte-identical files.
"""

import json
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization for byte-stable reports.

    Rules:
    - UTF-8 encoding
    - Sorted keys
    - Stable separators (",", ":")
    - Lists keep the order they were built in
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def document_dumps(obj: Any) -> str:
    """Indented JSON that keeps key insertion order, with a trailing newline."""
    return json.dumps(obj, indent=2, ensure_ascii=False) + "\n"
