from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from semrel.core.config import ReleaseConfig, load_repo_config
from semrel.core.errors import ErrorCode
from semrel.core.result import Err
from semrel.git.repository import Repository
from semrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    repository: Repository
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(*, repo: Path | None = None, config_path: Path | None = None) -> CLIContext:
    try:
        root = (repo or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --repo: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    repository = Repository(root)
    if not root.is_dir() or not repository.exists():
        typer.echo(f"error: not a git repository: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_repo_config(root, config_path)
    if isinstance(config_result, Err):
        err = config_result.error
        where = f" ({err.path})" if err.path is not None else ""
        typer.echo(f"error: ConfigError: {err.message}{where}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        root=root,
        repository=repository,
        config=config_result.value,
        console=RichConsole(),
    )
