"""Canonical ID and content-hash factories.

All modules import from here instead of defining local helpers.

ID Categories
-------------
1. Run IDs: UUID v4 strings, one per pipeline invocation.
2. Content-derived IDs: SHA256[:N] deterministic hashes (rule fingerprints).
"""

from __future__ import annotations

import hashlib
import json
import uuid
from typing import Any


def new_id() -> str:
    """Generate a new UUID v4 string.  Use for run IDs."""
    return str(uuid.uuid4())


def payload_hash(payload: Any, *, length: int = 16) -> str:
    """Generate a deterministic hash from a JSON-serializable value.

    Parameters
    ----------
    payload:
        Value to hash.  Serialized with sorted keys and ``default=str``
        so ``date`` values hash by their ISO form.
    length:
        Number of hex characters to return (default 16).
    """
    raw = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(raw.encode()).hexdigest()[:length]
