"""Platform abstraction layer."""

from .process import (
    ExitStatus,
    PopenHandle,
    ProcessError,
    ProcessExecutor,
    ShellExecutor,
    SubprocessHandle,
    run,
)

__all__ = [
    "ExitStatus",
    "PopenHandle",
    "ProcessError",
    "ProcessExecutor",
    "ShellExecutor",
    "SubprocessHandle",
    "run",
]
