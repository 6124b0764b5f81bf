"""Artifact verification and release publishing.

Publishing is all-or-nothing per invocation: every declared asset is
checked before the release is created, so a missing or corrupt file never
leaves a half-uploaded release behind. Uploads then run one at a time in
declared order; the first transport failure is returned as is.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from semrel.core.config import AssetConfig
from semrel.core.result import Err, Ok, Result
from semrel.services.release.errors import (
    ArtifactError,
    ChecksumMismatchError,
    MissingArtifactError,
    PublishError,
    PublishFailure,
)
from semrel.services.release.model import Artifact, PublishResult, ReleasePlan


class ReleasePublisher(Protocol):
    """Release API client consumed by ``publish``."""

    def create_release(
        self,
        *,
        tag: str,
        title: str,
        notes: str,
        target: str | None,
    ) -> Result[tuple[str, str | None], PublishError]:
        """Create a release; returns (release id, url)."""
        ...

    def upload_asset(
        self,
        *,
        release_id: str,
        artifact: Artifact,
    ) -> Result[None, PublishError]: ...


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def _read_checksum(path: Path) -> str | None:
    """First token of a ``sha256sum``-style file, lowercased."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    tokens = text.split()
    return tokens[0].lower() if tokens else None


def _resolve(root: Path, rel: str) -> Path:
    p = Path(rel).expanduser()
    return p if p.is_absolute() else root / p


def verify_artifacts(
    assets: Sequence[AssetConfig], *, root: Path
) -> Result[tuple[Artifact, ...], ArtifactError]:
    """Check that every declared asset exists (and matches its checksum)."""
    artifacts: list[Artifact] = []
    for asset in assets:
        path = _resolve(root, asset.path)
        if not path.is_file():
            return Err(MissingArtifactError(path=path))

        checksum: str | None = None
        if asset.checksum_file is not None:
            checksum_path = _resolve(root, asset.checksum_file)
            expected = _read_checksum(checksum_path) if checksum_path.is_file() else None
            if expected is None:
                return Err(MissingArtifactError(path=checksum_path))

            try:
                actual = sha256_file(path)
            except OSError:
                return Err(MissingArtifactError(path=path))
            if actual != expected:
                return Err(ChecksumMismatchError(path=path, expected=expected, actual=actual))
            checksum = actual

        artifacts.append(Artifact(path=path, checksum=checksum, label=asset.label))
    return Ok(tuple(artifacts))


def publish(
    plan: ReleasePlan,
    assets: Sequence[AssetConfig],
    publisher: ReleasePublisher,
    *,
    root: Path,
    tag: str,
    target: str | None = None,
) -> Result[PublishResult, PublishFailure]:
    """Create the release for ``plan`` and upload its artifacts.

    Args:
        plan: A plan with ``should_release`` set.
        assets: Declared assets, uploaded in this order.
        publisher: Release API client.
        root: Directory relative asset paths are resolved against.
        tag: Tag name for the release.
        target: Commit the tag should point at (None lets the API decide).
    """
    if not plan.should_release or plan.next_version is None:
        return Err(PublishError(message="nothing to publish: plan has no release", hint=tag))

    verified = verify_artifacts(assets, root=root)
    if isinstance(verified, Err):
        return verified

    created = publisher.create_release(
        tag=tag,
        title=tag,
        notes=plan.notes,
        target=target,
    )
    if isinstance(created, Err):
        return created
    release_id, url = created.value

    uploaded: list[Path] = []
    for artifact in verified.value:
        result = publisher.upload_asset(release_id=release_id, artifact=artifact)
        if isinstance(result, Err):
            return result
        uploaded.append(artifact.path)

    return Ok(PublishResult(release_id=release_id, url=url, uploaded=tuple(uploaded)))
