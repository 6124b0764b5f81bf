from __future__ import annotations

import re
from dataclasses import dataclass

from semrel.core.config import ConfigError, ReleaseBump
from semrel.core.result import Err, Ok, Result


_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")

BUMP_SEVERITY: dict[ReleaseBump, int] = {"patch": 1, "minor": 2, "major": 3}


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self, tag_format: str = "v${version}") -> str:
        return tag_format.replace("${version}", str(self))

    def bump(self, kind: ReleaseBump) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def parse_version(text: str) -> SemVer | None:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def require_version(text: str, *, what: str = "version") -> Result[SemVer, ConfigError]:
    """Parse ``text`` or report it as a malformed version."""
    v = parse_version(text)
    if v is None:
        return Err(ConfigError(f"malformed {what}: {text!r} (expected MAJOR.MINOR.PATCH)"))
    return Ok(v)


def parse_tag(tag: str, tag_format: str = "v${version}") -> SemVer | None:
    """Extract the version from a tag written with ``tag_format``."""
    prefix, _, suffix = tag_format.partition("${version}")
    if not tag.startswith(prefix) or not tag.endswith(suffix):
        return None
    end = len(tag) - len(suffix) if suffix else len(tag)
    if end < len(prefix):
        return None
    return parse_version(tag[len(prefix) : end])


def latest_tag(tags: list[str] | tuple[str, ...], tag_format: str) -> tuple[str, SemVer] | None:
    """Return the highest-versioned tag matching ``tag_format``, if any."""
    best: tuple[str, SemVer] | None = None
    for tag in tags:
        v = parse_tag(tag, tag_format)
        if v is None:
            continue
        if best is None or v > best[1]:
            best = (tag, v)
    return best


def highest_bump(bumps: list[ReleaseBump]) -> ReleaseBump | None:
    if not bumps:
        return None
    return max(bumps, key=lambda b: BUMP_SEVERITY[b])
