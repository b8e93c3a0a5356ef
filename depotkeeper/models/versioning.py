"""Version identifiers — semantic triples plus the reserved snapshot branch."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

MASTER_SNAPSHOT = "master-SNAPSHOT"

_SEMVER = re.compile(r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)")


class MalformedVersionError(ValueError):
    """Raised when a version identifier is not a MAJOR.MINOR.PATCH triple."""


class SemanticVersion(BaseModel):
    """A parsed, immutable ``MAJOR.MINOR.PATCH`` version identifier.

    The snapshot branch token is deliberately not representable here;
    callers must test for it with ``is_snapshot`` before parsing.
    """

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse *text*, raising ``MalformedVersionError`` on anything else."""
        match = _SEMVER.fullmatch(text or "")
        if match is None:
            raise MalformedVersionError(f"Not a semantic version: {text!r}")
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def is_snapshot(version_id: str) -> bool:
    """Whether *version_id* names the mutable snapshot branch."""
    return version_id == MASTER_SNAPSHOT
