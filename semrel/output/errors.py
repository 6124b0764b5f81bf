"""Error presentation utilities.

Centralized rendering and exit code mapping for pipeline errors. Every
message names the error kind and the offending identifier (command, path
or version string).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semrel.core.config import ConfigError
from semrel.core.errors import ErrorCode
from semrel.git.repository import GitError
from semrel.output.console import Style
from semrel.services.release.errors import (
    ChecksumMismatchError,
    HookError,
    HookTimeoutError,
    MissingArtifactError,
    PipelineError,
    PublishError,
    ToolUnavailableError,
)

if TYPE_CHECKING:
    from semrel.output.console import ConsoleProtocol

__all__ = ["describe_pipeline_error", "pipeline_error_exit_code", "print_pipeline_error"]


def describe_pipeline_error(error: PipelineError) -> str:
    """One-line ``kind: detail`` summary of an error."""
    match error:
        case ConfigError(message=message, path=path):
            where = f" ({path})" if path is not None else ""
            return f"ConfigError: {message}{where}"
        case GitError(command=command, message=message):
            return f"GitError: git {command}: {message}"
        case HookError(command=command, returncode=rc):
            if rc < 0:
                return f"HookError: could not run `{command}`"
            return f"HookError: `{command}` exited with status {rc}"
        case HookTimeoutError(command=command, timeout=timeout):
            return f"HookTimeoutError: `{command}` did not finish within {timeout:g}s"
        case MissingArtifactError(path=path):
            return f"MissingArtifactError: {path}"
        case ChecksumMismatchError(path=path, expected=expected, actual=actual):
            return f"ChecksumMismatchError: {path} (expected {expected}, got {actual})"
        case PublishError(message=message, asset=asset):
            suffix = f" [{asset}]" if asset is not None else ""
            return f"PublishError: {message}{suffix}"
        case ToolUnavailableError(message=message):
            return f"ToolUnavailableError: {message}"


def print_pipeline_error(error: PipelineError, console: ConsoleProtocol) -> None:
    console.error(describe_pipeline_error(error))
    match error:
        case HookError(stderr=stderr) if stderr.strip():
            for line in stderr.strip().splitlines()[-20:]:
                console.print(line, Style.DIM)
        case PublishError(hint=hint) | ToolUnavailableError(hint=hint) if hint:
            console.print(f"hint: {hint}", Style.DIM)
        case _:
            pass


def pipeline_error_exit_code(error: PipelineError) -> int:
    match error:
        case ConfigError():
            return int(ErrorCode.USER_ERROR)
        case GitError() | ToolUnavailableError():
            return int(ErrorCode.ENV_ERROR)
        case HookError() | HookTimeoutError():
            return int(ErrorCode.HOOK_ERROR)
        case PublishError():
            return int(ErrorCode.NETWORK_ERROR)
        case MissingArtifactError() | ChecksumMismatchError():
            return int(ErrorCode.IO_ERROR)
