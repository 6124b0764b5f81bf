"""Git repository reader.

Read-only view of a single repository: the current branch, the tags that
are reachable from HEAD, and the commit log since a given tag. All
operations return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.commits_since("v1.2.3"):
        case Ok(commits):
            for c in commits:
                print(c.short_sha, c.subject)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from semrel.core.result import Err, Ok, Result
from semrel.platform.process import ProcessError
from semrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

# Unit separator between fields, record separator between commits.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%H%x1f%cI%x1f%B%x1e"

__all__ = [
    "CommitRecord",
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """A commit read from history."""

    sha: str
    message: str
    timestamp: datetime

    @property
    def short_sha(self) -> str:
        return self.sha[:8]

    @property
    def subject(self) -> str:
        """First line of the message."""
        lines = self.message.strip().splitlines()
        return lines[0].strip() if lines else ""


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a git repository (work tree or worktree file)."""
        return (self.path / ".git").exists()

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def head_sha(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse HEAD", e, "cannot resolve HEAD"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def head_is_unborn(self) -> bool:
        """True when HEAD names a branch that has no commits yet."""
        if isinstance(self._run(["rev-parse", "--verify", "--quiet", "HEAD"]), Ok):
            return False
        return isinstance(self._run(["rev-parse", "--git-dir"]), Ok)

    def merged_tags(self) -> Result[tuple[str, ...], GitError]:
        """List tags reachable from HEAD (none before the first commit)."""
        result = self._run(["tag", "--merged", "HEAD"])
        match result:
            case Err(e):
                if self.head_is_unborn():
                    return Ok(())
                return Err(self._error("tag --merged HEAD", e, "cannot list tags"))
            case Ok(stdout):
                return Ok(tuple(t.strip() for t in stdout.splitlines() if t.strip()))

    def commits_since(self, ref: str | None) -> Result[tuple[CommitRecord, ...], GitError]:
        """Commits after ``ref`` up to HEAD, oldest first.

        With ``ref=None`` the whole history of HEAD is returned.
        """
        revision = f"{ref}..HEAD" if ref else "HEAD"
        result = self._run(["log", "--reverse", f"--format={_LOG_FORMAT}", revision])
        match result:
            case Err(e):
                if ref is None and self.head_is_unborn():
                    return Ok(())
                return Err(self._error(f"log {revision}", e, "git log failed"))
            case Ok(stdout):
                return self._parse_log(stdout)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            timeout=_GIT_TIMEOUT_SECONDS,
        )

    def _error(self, command: str, error: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or fallback,
            returncode=error.returncode,
        )

    def _parse_log(self, output: str) -> Result[tuple[CommitRecord, ...], GitError]:
        """Parse ``%H %cI %B`` records separated by RS/US control characters."""
        commits: list[CommitRecord] = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record.strip():
                continue

            parts = record.split(_FIELD_SEP, 2)
            if len(parts) != 3:
                return Err(GitError(command="log", message=f"unexpected log record: {record!r}"))

            sha, date_text, message = parts
            try:
                timestamp = datetime.fromisoformat(date_text.strip())
            except ValueError:
                return Err(GitError(command="log", message=f"invalid commit date: {date_text!r}"))

            commits.append(
                CommitRecord(sha=sha.strip(), message=message.strip(), timestamp=timestamp)
            )
        return Ok(tuple(commits))
