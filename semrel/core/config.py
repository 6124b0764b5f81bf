"""Typed release configuration loading.

The configuration is read once per invocation, validated, and handed to the
orchestrator as an immutable ``ReleaseConfig``. It comes from (first match):

1. an explicit ``--config`` path,
2. ``.releaserc.toml`` at the repository root,
3. the ``[tool.semrel]`` table of ``pyproject.toml``.

Without any of these, defaults apply (release from ``main``, no hooks, no
assets).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_list,
    get_number,
    get_str,
    get_table,
)

__all__ = [
    "AssetConfig",
    "ConfigError",
    "DEFAULT_RELEASE_RULES",
    "ReleaseBump",
    "ReleaseConfig",
    "discover_config",
    "load_config",
    "load_repo_config",
    "template_placeholders",
]

ReleaseBump = Literal["major", "minor", "patch"]

RELEASERC_NAME = ".releaserc.toml"
PYPROJECT_NAME = "pyproject.toml"

DEFAULT_BRANCHES: tuple[str, ...] = ("main",)
DEFAULT_TAG_FORMAT = "v${version}"
DEFAULT_INITIAL_VERSION = "1.0.0"
DEFAULT_RELEASE_RULES: dict[str, ReleaseBump] = {
    "feat": "minor",
    "fix": "patch",
    "perf": "patch",
}

# `${nextRelease.version}` keeps configs written for the JS tooling working.
TEMPLATE_VARIABLES = frozenset({"version", "nextRelease.version"})

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]*)\}")
_BUMPS: frozenset[str] = frozenset({"major", "minor", "patch"})


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the configuration (or a version string) is invalid."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class AssetConfig:
    """A build output declared for upload.

    ``path`` and ``checksum_file`` are relative to the repository root
    unless absolute.
    """

    path: str
    checksum_file: str | None = None
    label: str | None = None


def _default_rules() -> dict[str, ReleaseBump]:
    return dict(DEFAULT_RELEASE_RULES)


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Immutable release configuration.

    ``release_rules`` from a config file extend the defaults (feat, fix,
    perf); a listed type overrides the default bump for that type.
    """

    branches: tuple[str, ...] = DEFAULT_BRANCHES
    tag_format: str = DEFAULT_TAG_FORMAT
    initial_version: str = DEFAULT_INITIAL_VERSION
    prepare_cmd: str | None = None
    publish_cmd: str | None = None
    hook_timeout: float | None = None
    repository: str | None = None
    release_rules: dict[str, ReleaseBump] = field(default_factory=_default_rules)
    assets: tuple[AssetConfig, ...] = ()

    @classmethod
    def from_dict(
        cls, data: Mapping[str, object], *, path: Path | None = None
    ) -> Result[ReleaseConfig, ConfigError]:
        """Validate a parsed TOML table and build a ReleaseConfig."""
        branches = _parse_branches(data, path=path)
        if isinstance(branches, Err):
            return branches

        tag_format = get_str(data, "tag_format", "tagFormat") or DEFAULT_TAG_FORMAT
        if tag_format.count("${version}") != 1:
            return Err(
                ConfigError(
                    f"tag_format must contain ${{version}} exactly once: {tag_format!r}",
                    path=path,
                )
            )

        prepare_cmd = get_str(data, "prepare_cmd", "prepareCmd")
        publish_cmd = get_str(data, "publish_cmd", "publishCmd")
        for name, template in (("prepare_cmd", prepare_cmd), ("publish_cmd", publish_cmd)):
            if template is None:
                continue
            unknown = [p for p in template_placeholders(template) if p not in TEMPLATE_VARIABLES]
            if unknown:
                return Err(
                    ConfigError(
                        f"{name} uses unknown placeholder ${{{unknown[0]}}}: {template!r}",
                        path=path,
                    )
                )

        hook_timeout: float | None = None
        if "hook_timeout" in data:
            hook_timeout = get_number(data, "hook_timeout")
            if hook_timeout is None or hook_timeout <= 0:
                return Err(
                    ConfigError("hook_timeout must be a positive number of seconds", path=path)
                )

        rules = _parse_rules(data, path=path)
        if isinstance(rules, Err):
            return rules

        assets = _parse_assets(data, path=path)
        if isinstance(assets, Err):
            return assets

        return Ok(
            cls(
                branches=branches.value,
                tag_format=tag_format,
                initial_version=get_str(data, "initial_version", "initialVersion")
                or DEFAULT_INITIAL_VERSION,
                prepare_cmd=prepare_cmd,
                publish_cmd=publish_cmd,
                hook_timeout=hook_timeout,
                repository=get_str(data, "repository"),
                release_rules=rules.value,
                assets=assets.value,
            )
        )


def template_placeholders(template: str) -> list[str]:
    """Return the ``${...}`` placeholder names used in a command template."""
    return [m.group(1).strip() for m in _PLACEHOLDER_RE.finditer(template)]


def _parse_branches(
    data: Mapping[str, object], *, path: Path | None
) -> Result[tuple[str, ...], ConfigError]:
    if "branches" not in data:
        return Ok(DEFAULT_BRANCHES)

    raw = data["branches"]
    if isinstance(raw, str):
        raw = [raw]
    items = as_obj_list(raw)
    if items is None or not items:
        return Err(ConfigError("branches must be a non-empty list of names", path=path))

    out: list[str] = []
    for item in items:
        if not isinstance(item, str) or not item.strip():
            return Err(ConfigError(f"invalid branch entry: {item!r}", path=path))
        out.append(item.strip())
    return Ok(tuple(out))


def _parse_rules(
    data: Mapping[str, object], *, path: Path | None
) -> Result[dict[str, ReleaseBump], ConfigError]:
    table = get_table(data, "release_rules")
    if table is None:
        if "release_rules" in data:
            return Err(ConfigError("release_rules must be a table", path=path))
        return Ok(_default_rules())

    rules = _default_rules()
    for commit_type, bump in table.items():
        if not isinstance(bump, str) or bump not in _BUMPS:
            return Err(
                ConfigError(
                    f"release_rules.{commit_type} must be major, minor or patch: {bump!r}",
                    path=path,
                )
            )
        rules[commit_type.lower()] = bump  # type: ignore[assignment]
    return Ok(rules)


def _parse_assets(
    data: Mapping[str, object], *, path: Path | None
) -> Result[tuple[AssetConfig, ...], ConfigError]:
    if "assets" not in data:
        return Ok(())

    items = get_list(data, "assets")
    if items is None:
        return Err(ConfigError("assets must be an array of tables", path=path))

    assets: list[AssetConfig] = []
    for index, item in enumerate(items):
        # A bare string is shorthand for {path = "..."}.
        if isinstance(item, str) and item.strip():
            assets.append(AssetConfig(path=item.strip()))
            continue

        table = as_str_dict(item)
        asset_path = get_str(table, "path") if table is not None else None
        if table is None or asset_path is None:
            return Err(ConfigError(f"assets[{index}] must have a path", path=path))

        assets.append(
            AssetConfig(
                path=asset_path,
                checksum_file=get_str(table, "checksum_file", "checksumFile"),
                label=get_str(table, "label"),
            )
        )
    return Ok(tuple(assets))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling I/O and syntax errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def _pyproject_table(data: Mapping[str, object]) -> StrDict | None:
    tool = get_table(data, "tool")
    if tool is None:
        return None
    return get_table(tool, "semrel")


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load configuration from a TOML file.

    For ``pyproject.toml`` the ``[tool.semrel]`` table is used (defaults
    when the table is absent).
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    data: Mapping[str, object] = parsed.value
    if path.name == PYPROJECT_NAME:
        data = _pyproject_table(parsed.value) or {}

    return ReleaseConfig.from_dict(data, path=path)


def discover_config(root: Path) -> Path | None:
    """Find the configuration file for a repository, if any."""
    releaserc = root / RELEASERC_NAME
    if releaserc.is_file():
        return releaserc

    pyproject = root / PYPROJECT_NAME
    if pyproject.is_file():
        parsed = _parse_toml(pyproject)
        if isinstance(parsed, Ok) and _pyproject_table(parsed.value) is not None:
            return pyproject

    return None


def load_repo_config(
    root: Path, explicit: Path | None = None
) -> Result[ReleaseConfig, ConfigError]:
    """Load the explicit config, the discovered one, or defaults."""
    if explicit is not None:
        return load_config(explicit)

    found = discover_config(root)
    if found is None:
        return Ok(ReleaseConfig())
    return load_config(found)
