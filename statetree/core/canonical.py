"""
Canonical serialization of state trees.

Used to fingerprint state for deep change detection and for display.
Values JSON cannot encode natively are rendered with repr(), so the
fingerprint is stable for a given object graph within one process.
"""

import hashlib
import json
from typing import Any


def _key(k: Any) -> str:
    """String keys as-is; other keys tagged with their type, so 1 and "1" differ."""
    if isinstance(k, str):
        return k
    return f"{type(k).__name__}:{k!r}"


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested dict/list/set to canonical form.

    Rules:
    - dict keys sorted; non-string keys rendered as "type:repr"
    - tuples converted to lists
    - sets converted to sorted lists
    - recursive normalization
    """
    if isinstance(obj, dict):
        return {_key(k): canonicalize(obj[k]) for k in sorted(obj.keys(), key=_key)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((canonicalize(x) for x in obj), key=repr)
    return obj


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Deterministic JSON bytes for hashing.

    Returns:
        UTF-8 encoded JSON bytes
    """
    canon = canonicalize(obj)
    s = json.dumps(
        canon,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=repr,
    )
    return s.encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    return canonical_json_bytes(obj).decode("utf-8")


def state_fingerprint(obj: Any) -> str:
    """SHA-256 of the canonical JSON form of obj."""
    return hashlib.sha256(canonical_json_bytes(obj)).hexdigest()
