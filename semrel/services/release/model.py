from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from semrel.core.config import ReleaseBump
from semrel.git.repository import CommitRecord
from semrel.services.release.semver import SemVer

__all__ = [
    "Artifact",
    "CommitClassification",
    "CommitRecord",
    "PublishResult",
    "ReleaseBump",
    "ReleaseKind",
    "ReleasePlan",
]


ReleaseKind = Literal["breaking", "feature", "fix"]

KIND_FOR_BUMP: dict[ReleaseBump, ReleaseKind] = {
    "major": "breaking",
    "minor": "feature",
    "patch": "fix",
}


@dataclass(frozen=True, slots=True)
class CommitClassification:
    """How one commit message contributes to the next release."""

    kind: ReleaseKind
    bump: ReleaseBump
    type: str
    scope: str | None
    subject: str
    # Text of the BREAKING CHANGE footer, when present.
    breaking_note: str | None = None


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    last_version: SemVer | None
    next_version: SemVer | None
    bump: ReleaseBump | None
    notes: str
    should_release: bool
    classified: tuple[tuple[CommitRecord, CommitClassification], ...] = ()


@dataclass(frozen=True, slots=True)
class Artifact:
    """An asset whose presence (and checksum, if declared) was verified."""

    path: Path
    checksum: str | None = None
    label: str | None = None


@dataclass(frozen=True, slots=True)
class PublishResult:
    release_id: str
    url: str | None
    uploaded: tuple[Path, ...]
