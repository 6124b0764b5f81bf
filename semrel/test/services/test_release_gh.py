from __future__ import annotations

from pathlib import Path

import pytest

from semrel.core.result import Err, Ok, Result
from semrel.platform.process import ProcessError
from semrel.services.release import gh as gh_mod
from semrel.services.release.model import Artifact


class _Recorder:
    def __init__(self, responses: list[Result[str, ProcessError]]) -> None:
        self.calls: list[list[str]] = []
        self.notes: list[str] = []
        self._responses = responses

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd
        del timeout
        self.calls.append(cmd)
        if "--notes-file" in cmd:
            notes_path = Path(cmd[cmd.index("--notes-file") + 1])
            self.notes.append(notes_path.read_text(encoding="utf-8"))
        return self._responses.pop(0)


def _err(stderr: str) -> Err[ProcessError]:
    return Err(ProcessError(command=("gh",), returncode=1, stdout="", stderr=stderr))


def test_create_release_passes_notes_file_and_target(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = _Recorder([Ok("https://github.com/o/r/releases/tag/v1.3.0\n")])
    monkeypatch.setattr(gh_mod, "run_process", fake)

    publisher = gh_mod.GhPublisher(workspace_root=tmp_path, repository="o/r")
    result = publisher.create_release(
        tag="v1.3.0", title="v1.3.0", notes="## 1.3.0\n", target="abc123"
    )

    assert result == Ok(("v1.3.0", "https://github.com/o/r/releases/tag/v1.3.0"))
    cmd = fake.calls[0]
    assert cmd[:4] == ["gh", "release", "create", "v1.3.0"]
    assert cmd[cmd.index("--repo") + 1] == "o/r"
    assert cmd[cmd.index("--target") + 1] == "abc123"
    assert fake.notes == ["## 1.3.0\n"]
    notes_path = Path(cmd[cmd.index("--notes-file") + 1])
    assert not notes_path.exists()


def test_create_release_failure_is_publish_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(gh_mod, "run_process", _Recorder([_err("HTTP 422: already_exists")]))

    result = gh_mod.GhPublisher(workspace_root=tmp_path).create_release(
        tag="v1.3.0", title="v1.3.0", notes="", target=None
    )

    assert isinstance(result, Err)
    assert "v1.3.0" in result.error.message
    assert result.error.hint == "HTTP 422: already_exists"


def test_upload_asset_uses_label(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = _Recorder([Ok("")])
    monkeypatch.setattr(gh_mod, "run_process", fake)
    artifact = Artifact(path=tmp_path / "app.zip", label="App (Windows)")

    result = gh_mod.GhPublisher(workspace_root=tmp_path).upload_asset(
        release_id="v1.3.0", artifact=artifact
    )

    assert result == Ok(None)
    assert fake.calls[0] == [
        "gh",
        "release",
        "upload",
        "v1.3.0",
        f"{tmp_path / 'app.zip'}#App (Windows)",
        "--clobber",
    ]


def test_upload_failure_names_asset(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod, "run_process", _Recorder([_err("connection reset")]))
    artifact = Artifact(path=tmp_path / "app.zip")

    result = gh_mod.GhPublisher(workspace_root=tmp_path).upload_asset(
        release_id="v1.3.0", artifact=artifact
    )

    assert isinstance(result, Err)
    assert result.error.asset == artifact.path


def test_ensure_gh_available_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh_mod.shutil, "which", lambda _name: None)
    result = gh_mod.ensure_gh_available()
    assert isinstance(result, Err)
    assert result.error.message == "gh: missing"


def test_ensure_gh_auth(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod, "run_process", _Recorder([_err("not logged in"), Ok("")]))
    assert isinstance(gh_mod.ensure_gh_auth(workspace_root=tmp_path), Err)
    assert gh_mod.ensure_gh_auth(workspace_root=tmp_path) == Ok(None)


def test_gh_preflight_stops_at_missing_binary(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = _Recorder([])
    monkeypatch.setattr(gh_mod.shutil, "which", lambda _name: None)
    monkeypatch.setattr(gh_mod, "run_process", fake)

    result = gh_mod.gh_preflight(workspace_root=tmp_path)

    assert isinstance(result, Err)
    assert result.error.tool == "gh"
    assert fake.calls == []


def test_gh_preflight_checks_auth(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = _Recorder([Ok("Logged in")])
    monkeypatch.setattr(gh_mod.shutil, "which", lambda _name: "/usr/bin/gh")
    monkeypatch.setattr(gh_mod, "run_process", fake)

    assert gh_mod.gh_preflight(workspace_root=tmp_path) == Ok(None)
    assert fake.calls == [["gh", "auth", "status"]]
