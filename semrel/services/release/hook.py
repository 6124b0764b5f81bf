"""Shell hooks run around a release (prepare and publish commands).

A hook is a command template such as ``./scripts/build.sh ${version}``. The
version is substituted, the command runs through the executor, and the
subprocess handle is held in a ``with`` block so it is stopped and reaped
on every exit path, including timeouts and interrupts.
"""

from __future__ import annotations

import re
from pathlib import Path

from semrel.core.result import Err, Ok, Result
from semrel.platform.process import ExitStatus, ProcessExecutor
from semrel.services.release.errors import HookError, HookFailure, HookTimeoutError


VERSION_ENV = "SEMREL_VERSION"

_VERSION_PLACEHOLDER_RE = re.compile(r"\$\{\s*(?:version|nextRelease\.version)\s*\}")


def render_command(template: str, version: str) -> str:
    """Substitute the version into a hook template."""
    return _VERSION_PLACEHOLDER_RE.sub(lambda _: version, template)


def run_hook(
    template: str,
    version: str,
    *,
    executor: ProcessExecutor,
    cwd: Path,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> Result[ExitStatus, HookFailure]:
    """Run a hook command and require a zero exit status."""
    command = render_command(template, version)
    hook_env = {**(env or {}), VERSION_ENV: version}

    spawned = executor.spawn(command, cwd=cwd, env=hook_env)
    if isinstance(spawned, Err):
        return Err(HookError(command=command, returncode=-1, stderr=spawned.error.stderr))

    with spawned.value as handle:
        waited = handle.wait(timeout=timeout)

    if isinstance(waited, Err):
        if waited.error.timed_out and timeout is not None:
            return Err(HookTimeoutError(command=command, timeout=timeout))
        return Err(
            HookError(
                command=command,
                returncode=waited.error.returncode,
                stderr=waited.error.stderr,
            )
        )

    status = waited.value
    if not status.success:
        return Err(HookError(command=command, returncode=status.returncode, stderr=status.stderr))
    return Ok(status)


def run_prepare_hook(
    template: str,
    version: str,
    *,
    executor: ProcessExecutor,
    cwd: Path,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> Result[ExitStatus, HookFailure]:
    """Run the prepare command for ``version``; a failure stops the release."""
    return run_hook(template, version, executor=executor, cwd=cwd, timeout=timeout, env=env)

