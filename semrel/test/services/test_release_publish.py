from __future__ import annotations

import hashlib
from pathlib import Path

from semrel.core.config import AssetConfig
from semrel.core.result import Err, Ok
from semrel.services.release.errors import (
    ChecksumMismatchError,
    MissingArtifactError,
    PublishError,
)
from semrel.services.release.model import ReleasePlan
from semrel.services.release.publish import publish, verify_artifacts
from semrel.services.release.semver import SemVer
from semrel.test.fakes import FakePublisher


def _plan(*, should_release: bool = True) -> ReleasePlan:
    return ReleasePlan(
        last_version=SemVer(1, 2, 3),
        next_version=SemVer(1, 3, 0) if should_release else SemVer(1, 2, 3),
        bump="minor" if should_release else None,
        notes="## 1.3.0\n" if should_release else "",
        should_release=should_release,
    )


def _write(path: Path, data: bytes = b"binary") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def test_uploads_in_declared_order(tmp_path: Path, publisher: FakePublisher) -> None:
    _write(tmp_path / "dist" / "b.tar.gz")
    _write(tmp_path / "dist" / "a.zip")
    assets = [
        AssetConfig(path="dist/b.tar.gz"),
        AssetConfig(path="dist/a.zip", label="Windows build"),
    ]

    result = publish(_plan(), assets, publisher, root=tmp_path, tag="v1.3.0", target="abc")

    assert isinstance(result, Ok)
    assert result.value.release_id == "v1.3.0"
    assert result.value.uploaded == (tmp_path / "dist" / "b.tar.gz", tmp_path / "dist" / "a.zip")
    assert [a.path.name for a in publisher.uploaded] == ["b.tar.gz", "a.zip"]
    assert publisher.uploaded[1].label == "Windows build"
    assert publisher.created == [
        {"tag": "v1.3.0", "title": "v1.3.0", "notes": "## 1.3.0\n", "target": "abc"}
    ]


def test_missing_artifact_aborts_before_any_upload(
    tmp_path: Path, publisher: FakePublisher
) -> None:
    _write(tmp_path / "first.bin")
    assets = [AssetConfig(path="first.bin"), AssetConfig(path="target/release/propeller")]

    result = publish(_plan(), assets, publisher, root=tmp_path, tag="v1.3.0")

    assert isinstance(result, Err)
    assert result.error == MissingArtifactError(path=tmp_path / "target/release/propeller")
    assert publisher.created == []
    assert publisher.uploaded == []


def test_checksum_verified(tmp_path: Path) -> None:
    data = b"release payload"
    _write(tmp_path / "app.bin", data)
    digest = hashlib.sha256(data).hexdigest()
    (tmp_path / "app.bin.sha256").write_text(f"{digest.upper()}  app.bin\n", encoding="utf-8")

    result = verify_artifacts(
        [AssetConfig(path="app.bin", checksum_file="app.bin.sha256")], root=tmp_path
    )

    assert isinstance(result, Ok)
    assert result.value[0].checksum == digest


def test_checksum_mismatch(tmp_path: Path) -> None:
    _write(tmp_path / "app.bin")
    (tmp_path / "app.bin.sha256").write_text("0" * 64 + "\n", encoding="utf-8")

    result = verify_artifacts(
        [AssetConfig(path="app.bin", checksum_file="app.bin.sha256")], root=tmp_path
    )

    assert isinstance(result, Err)
    assert isinstance(result.error, ChecksumMismatchError)
    assert result.error.expected == "0" * 64


def test_missing_checksum_file(tmp_path: Path) -> None:
    _write(tmp_path / "app.bin")

    result = verify_artifacts(
        [AssetConfig(path="app.bin", checksum_file="app.bin.sha256")], root=tmp_path
    )

    assert isinstance(result, Err)
    assert result.error == MissingArtifactError(path=tmp_path / "app.bin.sha256")


def test_absolute_asset_path(tmp_path: Path) -> None:
    absolute = _write(tmp_path / "elsewhere" / "x.bin")
    result = verify_artifacts([AssetConfig(path=str(absolute))], root=tmp_path / "repo")
    assert isinstance(result, Ok)
    assert result.value[0].path == absolute


def test_create_failure_is_surfaced_without_uploads(tmp_path: Path) -> None:
    _write(tmp_path / "a.bin")
    publisher = FakePublisher(fail_create="HTTP 422: tag exists")

    result = publish(_plan(), [AssetConfig(path="a.bin")], publisher, root=tmp_path, tag="v1.3.0")

    assert isinstance(result, Err)
    assert isinstance(result.error, PublishError)
    assert publisher.uploaded == []


def test_upload_failure_stops_remaining_uploads(tmp_path: Path) -> None:
    for name in ("a.bin", "b.bin", "c.bin"):
        _write(tmp_path / name)
    publisher = FakePublisher(fail_upload_at=1)
    assets = [AssetConfig(path=n) for n in ("a.bin", "b.bin", "c.bin")]

    result = publish(_plan(), assets, publisher, root=tmp_path, tag="v1.3.0")

    assert isinstance(result, Err)
    assert isinstance(result.error, PublishError)
    assert result.error.asset == tmp_path / "b.bin"
    assert [a.path.name for a in publisher.uploaded] == ["a.bin"]


def test_refuses_plan_without_release(tmp_path: Path, publisher: FakePublisher) -> None:
    result = publish(_plan(should_release=False), [], publisher, root=tmp_path, tag="v1.2.3")
    assert isinstance(result, Err)
    assert isinstance(result.error, PublishError)
    assert publisher.created == []
