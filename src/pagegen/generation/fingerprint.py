"""Row fingerprints for change tracking."""

import hashlib
import json
from collections.abc import Mapping


def row_fingerprint(row: Mapping[str, str]) -> str:
    """SHA-256 over the row serialized as compact JSON in column order."""
    payload = json.dumps(dict(row), separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
