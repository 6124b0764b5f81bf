from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from semrel.cli.context import build_context
from semrel.core.errors import ErrorCode
from semrel.core.result import Err
from semrel.output.errors import pipeline_error_exit_code, print_pipeline_error
from semrel.platform.process import ShellExecutor
from semrel.services.release.gh import GhPublisher, gh_preflight
from semrel.services.release.pipeline import ReleaseOrchestrator


def _exit(err: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=int(code))


def release(
    branch: str | None = typer.Argument(
        None,
        help="Branch being released (default: the current branch).",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Compute the next version and notes without running hooks or publishing.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: .releaserc.toml or [tool.semrel] in pyproject.toml).",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository root (default: current directory).",
    ),
    hook_timeout: float | None = typer.Option(
        None,
        "--hook-timeout",
        help="Seconds before prepare/publish commands are stopped.",
    ),
) -> None:
    """Analyze commits since the last release and publish the next version."""
    ctx = build_context(repo=repo, config_path=config)

    if hook_timeout is not None and hook_timeout <= 0:
        _exit("--hook-timeout must be positive", code=ErrorCode.USER_ERROR)

    target_branch = branch or ctx.repository.current_branch()
    if not target_branch:
        _exit(
            "cannot determine the branch (detached HEAD?): pass it explicitly",
            code=ErrorCode.USER_ERROR,
        )

    orchestrator = ReleaseOrchestrator(
        config=ctx.config,
        root=ctx.root,
        source=ctx.repository,
        executor=ShellExecutor(),
        publisher=GhPublisher(workspace_root=ctx.root, repository=ctx.config.repository),
        console=ctx.console,
        hook_timeout=hook_timeout,
        preflight=lambda: gh_preflight(workspace_root=ctx.root),
    )

    result = orchestrator.run(branch=target_branch, dry_run=dry_run)
    if isinstance(result, Err):
        print_pipeline_error(result.error, ctx.console)
        raise typer.Exit(code=pipeline_error_exit_code(result.error))
