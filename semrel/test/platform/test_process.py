"""Tests for semrel.platform.process module."""

from __future__ import annotations

import os
import shlex
import sys
import time
from pathlib import Path

import pytest

from semrel.core.result import Err, Ok
from semrel.platform.process import PopenHandle, ProcessError, ShellExecutor, run

PY = sys.executable


def _py(code: str) -> str:
    """Shell command running ``code`` with the current interpreter."""
    if os.name == "nt":
        return f'"{PY}" -c "{code}"'
    return f"{shlex.quote(PY)} -c {shlex.quote(code)}"


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(("git", "log"), 128, "", "fatal: bad revision")
        assert str(error) == "git log failed (exit 128)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("gh", "release", "upload", "v1.0.0", "a.zip"), 1, "", "")
        assert str(error) == "gh release upload ... failed (exit 1)"

    def test_str_timed_out(self) -> None:
        error = ProcessError(("make dist",), -1, "", "", timed_out=True)
        assert str(error) == "make dist timed out"


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert "bad" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.2)
        assert isinstance(result, Err)
        assert result.error.timed_out is True


class TestShellExecutor:
    def test_captures_output_and_exit_status(self, tmp_path: Path) -> None:
        spawned = ShellExecutor().spawn(_py("print('built'); raise SystemExit(4)"), cwd=tmp_path)
        assert isinstance(spawned, Ok)

        with spawned.value as handle:
            waited = handle.wait(timeout=30)

        assert isinstance(waited, Ok)
        assert waited.value.returncode == 4
        assert waited.value.success is False
        assert "built" in waited.value.stdout

    def test_env_is_merged(self, tmp_path: Path) -> None:
        code = "import os; print(os.environ['SEMREL_VERSION'], 'PATH' in os.environ)"
        spawned = ShellExecutor().spawn(_py(code), cwd=tmp_path, env={"SEMREL_VERSION": "1.2.3"})
        assert isinstance(spawned, Ok)

        with spawned.value as handle:
            waited = handle.wait(timeout=30)

        assert isinstance(waited, Ok)
        assert waited.value.stdout.split() == ["1.2.3", "True"]

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("x", encoding="utf-8")
        spawned = ShellExecutor().spawn(_py("import os; print(os.listdir('.'))"), cwd=tmp_path)
        assert isinstance(spawned, Ok)

        with spawned.value as handle:
            waited = handle.wait(timeout=30)

        assert isinstance(waited, Ok)
        assert "marker.txt" in waited.value.stdout

    def test_timeout_stops_and_reaps(self, tmp_path: Path) -> None:
        spawned = ShellExecutor().spawn(_py("import time; time.sleep(60)"), cwd=tmp_path)
        assert isinstance(spawned, Ok)
        handle = spawned.value
        assert isinstance(handle, PopenHandle)

        started = time.monotonic()
        with handle:
            waited = handle.wait(timeout=0.3)

        assert isinstance(waited, Err)
        assert waited.error.timed_out is True
        assert time.monotonic() - started < 30
        assert handle._proc.poll() is not None  # pyright: ignore[reportPrivateUsage]

    def test_exit_from_block_stops_running_process(self, tmp_path: Path) -> None:
        spawned = ShellExecutor().spawn(_py("import time; time.sleep(60)"), cwd=tmp_path)
        assert isinstance(spawned, Ok)
        handle = spawned.value
        assert isinstance(handle, PopenHandle)

        with pytest.raises(KeyboardInterrupt):
            with handle:
                raise KeyboardInterrupt

        assert handle._proc.poll() is not None  # pyright: ignore[reportPrivateUsage]
