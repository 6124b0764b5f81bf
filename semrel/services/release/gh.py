from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from semrel.core.result import Err, Ok, Result
from semrel.platform.process import ProcessError
from semrel.platform.process import run as run_process
from semrel.services.release.errors import PublishError, ToolUnavailableError
from semrel.services.release.model import Artifact
from semrel.services.release.timeouts import GH_TIMEOUT_SECONDS, GH_UPLOAD_TIMEOUT_SECONDS


def _publish_error(message: str, error: ProcessError, *, asset: Path | None = None) -> PublishError:
    return PublishError(
        message=message,
        hint=error.stderr.strip() or error.stdout.strip() or str(error),
        asset=asset,
    )


def ensure_gh_available() -> Result[None, ToolUnavailableError]:
    if shutil.which("gh") is None:
        return Err(
            ToolUnavailableError(
                tool="gh",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, workspace_root: Path) -> Result[None, ToolUnavailableError]:
    result = run_process(["gh", "auth", "status"], cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ToolUnavailableError(
                tool="gh",
                message="gh auth required",
                hint="Run: gh auth login (or set GH_TOKEN)",
            )
        )
    return Ok(None)


def gh_preflight(*, workspace_root: Path) -> Result[None, ToolUnavailableError]:
    """Check that ``gh`` is installed, then that it is logged in."""
    available = ensure_gh_available()
    if isinstance(available, Err):
        return available
    return ensure_gh_auth(workspace_root=workspace_root)


class GhPublisher:
    """Publishes GitHub releases through the ``gh`` CLI.

    The release id is the tag name, which is what ``gh release upload``
    addresses releases by.
    """

    def __init__(self, *, workspace_root: Path, repository: str | None = None) -> None:
        self._root = workspace_root
        self._repository = repository

    def _repo_args(self) -> list[str]:
        return ["--repo", self._repository] if self._repository else []

    def create_release(
        self,
        *,
        tag: str,
        title: str,
        notes: str,
        target: str | None,
    ) -> Result[tuple[str, str | None], PublishError]:
        fd, notes_path = tempfile.mkstemp(prefix="semrel_notes_", suffix=".md")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(notes)

            cmd = [
                "gh",
                "release",
                "create",
                tag,
                "--title",
                title,
                "--notes-file",
                notes_path,
                *self._repo_args(),
            ]
            if target:
                cmd.extend(["--target", target])

            result = run_process(cmd, cwd=self._root, timeout=GH_TIMEOUT_SECONDS)
        finally:
            Path(notes_path).unlink(missing_ok=True)

        if isinstance(result, Err):
            return Err(_publish_error(f"gh release create failed: {tag}", result.error))

        url = result.value.strip().splitlines()[-1].strip() if result.value.strip() else None
        return Ok((tag, url))

    def upload_asset(
        self,
        *,
        release_id: str,
        artifact: Artifact,
    ) -> Result[None, PublishError]:
        asset_arg = str(artifact.path)
        if artifact.label:
            asset_arg = f"{asset_arg}#{artifact.label}"

        result = run_process(
            ["gh", "release", "upload", release_id, asset_arg, "--clobber", *self._repo_args()],
            cwd=self._root,
            timeout=GH_UPLOAD_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                _publish_error(
                    f"gh release upload failed: {artifact.path.name}",
                    result.error,
                    asset=artifact.path,
                )
            )
        return Ok(None)
