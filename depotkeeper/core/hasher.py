"""Canonical hashing helpers for content signatures.

A version's signature is the content address of its documents in a
canonical, order-independent form, so two stores holding the same
entities produce the same signature.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any

from depotkeeper.models.documents import EntityDocument


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def content_address(obj: Any) -> str:
    """Content-address a JSON-serializable object as ``sha256:<hex>``."""
    return f"sha256:{sha256_hex(canonical_json_bytes(obj))}"


def entities_signature(entities: Iterable[EntityDocument]) -> str | None:
    """Signature over a set of entities, or ``None`` for an empty set.

    Coordinates are left out so the same content published under a
    different version still hashes identically.
    """
    payload = sorted(
        (
            {
                "path": e.entity_path,
                "classifier": e.classifier_path,
                "versioned": e.versioned_entity,
                "content": e.content,
            }
            for e in entities
        ),
        key=lambda item: (item["path"], item["versioned"]),
    )
    if not payload:
        return None
    return content_address(payload)
