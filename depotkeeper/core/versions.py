"""Version ordering — semantic precedence, snapshot branch excluded."""

from __future__ import annotations

from collections.abc import Iterable

from depotkeeper.models.versioning import SemanticVersion, is_snapshot


def order_versions(version_ids: Iterable[str]) -> list[str]:
    """Return the non-snapshot *version_ids* ordered oldest to newest.

    Raises ``MalformedVersionError`` for any identifier that is not a
    semantic triple and ``ValueError`` for duplicates.
    """
    parsed: dict[str, SemanticVersion] = {}
    for version_id in version_ids:
        if is_snapshot(version_id):
            continue
        if version_id in parsed:
            raise ValueError(f"Duplicate version identifier: {version_id!r}")
        parsed[version_id] = SemanticVersion.parse(version_id)
    return sorted(parsed, key=lambda v: parsed[v].sort_key)
