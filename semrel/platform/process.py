"""Subprocess execution with Result-based error handling.

Two entry points:

- ``run``: run an argv list to completion and capture stdout (git, gh).
- ``ShellExecutor.spawn``: start a shell command string and hand back a
  ``PopenHandle`` to be used as a context manager. Leaving the ``with``
  block always stops and reaps the process, whatever the exit path.

Usage:
    spawned = ShellExecutor().spawn("make dist", cwd=repo_root)
    match spawned:
        case Ok(handle):
            with handle:
                status = handle.wait(timeout=600)
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from semrel.core.result import Err, Ok, Result

__all__ = [
    "ExitStatus",
    "PopenHandle",
    "ProcessError",
    "ProcessExecutor",
    "ShellExecutor",
    "SubprocessHandle",
    "run",
]

_STOP_GRACE_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran or timed out).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
        timed_out: True when the process was stopped after a timeout.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.timed_out:
            return f"{cmd_str} timed out"
        return f"{cmd_str} failed (exit {self.returncode})"


@dataclass(frozen=True, slots=True)
class ExitStatus:
    """Completed process: exit status plus captured output."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class SubprocessHandle(Protocol):
    """A running process owned by a ``with`` block."""

    def wait(self, timeout: float | None = None) -> Result[ExitStatus, ProcessError]:
        """Block until the process exits.

        Returns Ok(ExitStatus) for any exit code, Err(ProcessError) with
        ``timed_out=True`` once ``timeout`` seconds have elapsed.
        """
        ...

    def stop(self) -> None:
        """Terminate (then kill) the process if still running, and reap it."""
        ...

    def __enter__(self) -> SubprocessHandle: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object | None,
    ) -> None: ...


class ProcessExecutor(Protocol):
    """Starts shell command strings."""

    def spawn(
        self,
        command: str,
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
    ) -> Result[SubprocessHandle, ProcessError]: ...


class PopenHandle:
    """Lifecycle wrapper around a ``subprocess.Popen`` shell process.

    On POSIX the shell runs in its own session so that stopping it also
    reaches the commands it started.
    """

    def __init__(self, proc: subprocess.Popen[str], command: str) -> None:
        self._proc = proc
        self._command = command

    @property
    def pid(self) -> int:
        return self._proc.pid

    def wait(self, timeout: float | None = None) -> Result[ExitStatus, ProcessError]:
        try:
            stdout, stderr = self._proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            self.stop()
            return Err(
                ProcessError(
                    command=(self._command,),
                    returncode=-1,
                    stdout="",
                    stderr=f"Command timed out after {timeout}s",
                    timed_out=True,
                )
            )

        return Ok(
            ExitStatus(
                command=self._command,
                returncode=self._proc.returncode,
                stdout=stdout or "",
                stderr=stderr or "",
            )
        )

    def stop(self) -> None:
        p = self._proc
        if p.poll() is None:
            self._signal(signal.SIGTERM)
            try:
                p.wait(timeout=_STOP_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                self._signal(signal.SIGKILL if os.name == "posix" else signal.SIGTERM)
                try:
                    p.wait(timeout=_STOP_GRACE_SECONDS)
                except subprocess.TimeoutExpired:
                    pass

        for stream in (p.stdout, p.stderr):
            if stream is not None and not stream.closed:
                stream.close()

    def _signal(self, sig: signal.Signals) -> None:
        try:
            if os.name == "posix":
                os.killpg(self._proc.pid, sig)
            elif sig == signal.SIGTERM:
                self._proc.terminate()
            else:
                self._proc.kill()
        except (ProcessLookupError, PermissionError):
            return

    def __enter__(self) -> PopenHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object | None,
    ) -> None:
        self.stop()


class ShellExecutor:
    """Production executor: runs command strings through the system shell."""

    def spawn(
        self,
        command: str,
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
    ) -> Result[SubprocessHandle, ProcessError]:
        merged = {**os.environ, **env} if env is not None else None
        try:
            proc = subprocess.Popen(
                command,
                shell=True,
                cwd=str(cwd),
                env=merged,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                start_new_session=os.name == "posix",
            )
        except OSError as e:
            return Err(
                ProcessError(
                    command=(command,),
                    returncode=-1,
                    stdout="",
                    stderr=str(e),
                )
            )
        return Ok(PopenHandle(proc, command))


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
                timed_out=True,
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)
