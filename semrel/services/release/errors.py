"""Error variants of the release pipeline.

Every stage returns one of these inside an ``Err``. None of them is retried
internally: they all end the invocation and are rendered by
``semrel.output.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from semrel.core.config import ConfigError
from semrel.git.repository import GitError


@dataclass(frozen=True, slots=True)
class HookError:
    """A prepare/publish command exited non-zero or could not start."""

    command: str
    returncode: int
    stderr: str = ""


@dataclass(frozen=True, slots=True)
class HookTimeoutError:
    """A prepare/publish command ran past its timeout and was stopped."""

    command: str
    timeout: float


@dataclass(frozen=True, slots=True)
class MissingArtifactError:
    path: Path


@dataclass(frozen=True, slots=True)
class ChecksumMismatchError:
    path: Path
    expected: str
    actual: str


@dataclass(frozen=True, slots=True)
class PublishError:
    """The release API (or its CLI) rejected a request or was unreachable."""

    message: str
    hint: str | None = None
    asset: Path | None = None


@dataclass(frozen=True, slots=True)
class ToolUnavailableError:
    """A tool needed to publish is missing or not authenticated."""

    tool: str
    message: str
    hint: str | None = None


HookFailure = HookError | HookTimeoutError
ArtifactError = MissingArtifactError | ChecksumMismatchError
PublishFailure = ArtifactError | PublishError

PipelineError = (
    ConfigError
    | GitError
    | HookError
    | HookTimeoutError
    | MissingArtifactError
    | ChecksumMismatchError
    | PublishError
    | ToolUnavailableError
)
