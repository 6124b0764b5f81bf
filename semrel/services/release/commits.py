"""Commit analysis: classify messages and plan the next version.

Messages follow the conventional-commit header ``type(scope)!: subject``.
A ``BREAKING CHANGE:`` (or ``BREAKING-CHANGE:``) footer, or ``!`` before the
colon, makes a commit breaking; otherwise the release rules map the type to
a bump. Commits that match nothing do not trigger a release.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from semrel.core.config import DEFAULT_INITIAL_VERSION, DEFAULT_RELEASE_RULES, ConfigError
from semrel.core.result import Err, Ok, Result
from semrel.services.release.model import (
    KIND_FOR_BUMP,
    CommitClassification,
    CommitRecord,
    ReleaseBump,
    ReleasePlan,
)
from semrel.services.release.notes import generate_notes
from semrel.services.release.semver import SemVer, highest_bump, require_version


_HEADER_RE = re.compile(
    r"^(?P<type>[A-Za-z][\w-]*)(?:\((?P<scope>[^()\r\n]*)\))?(?P<bang>!)?:[ \t]+(?P<subject>\S.*)$"
)
_BREAKING_RE = re.compile(r"^BREAKING[ -]CHANGES?:[ \t]*", re.MULTILINE)
# Git trailer line such as ``Signed-off-by: ...`` or ``Refs #12``.
_TRAILER_RE = re.compile(r"^[A-Za-z][\w-]*(?::[ \t]| #)")


def _breaking_note(text: str) -> str | None:
    """Footer text up to the next trailer or paragraph break."""
    first, _, rest = text.partition("\n")
    lines = [first.strip()] if first.strip() else []
    for line in rest.splitlines():
        if _TRAILER_RE.match(line):
            break
        if not line.strip():
            if lines:
                break
            continue
        lines.append(line.rstrip())
    return "\n".join(lines) or None


def classify_commit(
    commit: CommitRecord,
    rules: Mapping[str, ReleaseBump] = DEFAULT_RELEASE_RULES,
) -> CommitClassification | None:
    """Classify one commit, or return None if it does not trigger a release."""
    header = commit.subject
    m = _HEADER_RE.match(header)

    commit_type = ""
    scope: str | None = None
    subject = header
    if m is not None:
        commit_type = m.group("type").lower()
        scope = (m.group("scope") or "").strip() or None
        subject = m.group("subject").strip()

    footer = _BREAKING_RE.search(commit.message)
    breaking_note: str | None = None
    if footer is not None:
        breaking_note = _breaking_note(commit.message[footer.end() :])

    if footer is not None or (m is not None and m.group("bang")):
        return CommitClassification(
            kind="breaking",
            bump="major",
            type=commit_type,
            scope=scope,
            subject=subject,
            breaking_note=breaking_note,
        )

    if m is None:
        return None

    bump = rules.get(commit_type)
    if bump is None:
        return None

    return CommitClassification(
        kind=KIND_FOR_BUMP[bump],
        bump=bump,
        type=commit_type,
        scope=scope,
        subject=subject,
    )


def analyze_commits(
    commits: Sequence[CommitRecord],
    last_version: str | None,
    *,
    rules: Mapping[str, ReleaseBump] = DEFAULT_RELEASE_RULES,
    initial_version: str = DEFAULT_INITIAL_VERSION,
) -> Result[ReleasePlan, ConfigError]:
    """Decide whether to release and compute the next version.

    Args:
        commits: Commits since the last release, oldest first.
        last_version: Version of the last release, None for a first release.
        rules: Commit type to bump mapping for non-breaking commits.
        initial_version: Version used for the first release.

    Returns:
        Ok(ReleasePlan), or Err(ConfigError) if a version string is malformed.
    """
    last: SemVer | None = None
    if last_version is not None:
        parsed = require_version(last_version, what="last version")
        if isinstance(parsed, Err):
            return parsed
        last = parsed.value

    initial = require_version(initial_version, what="initial_version")
    if isinstance(initial, Err):
        return initial

    classifications = [classify_commit(c, rules) for c in commits]
    classified = tuple(
        (commit, cls) for commit, cls in zip(commits, classifications, strict=True) if cls
    )
    bump = highest_bump([cls.bump for _, cls in classified])

    if bump is None:
        return Ok(
            ReleasePlan(
                last_version=last,
                next_version=last,
                bump=None,
                notes="",
                should_release=False,
            )
        )

    next_version = last.bump(bump) if last is not None else initial.value
    if last is not None and next_version <= last:
        raise AssertionError(f"next version {next_version} is not above {last}")

    return Ok(
        ReleasePlan(
            last_version=last,
            next_version=next_version,
            bump=bump,
            notes=generate_notes(commits, classifications, version=str(next_version)),
            should_release=True,
            classified=classified,
        )
    )
