from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC

from semrel.services.release.model import CommitClassification, CommitRecord, ReleaseKind


SECTION_TITLES: tuple[tuple[ReleaseKind, str], ...] = (
    ("breaking", "Breaking Changes"),
    ("feature", "Features"),
    ("fix", "Bug Fixes"),
)


def _entry(commit: CommitRecord, cls: CommitClassification) -> list[str]:
    scope = f"**{cls.scope}:** " if cls.scope else ""
    lines = [f"- {scope}{cls.subject} ({commit.short_sha})"]
    if cls.breaking_note:
        for note_line in cls.breaking_note.splitlines():
            lines.append(f"  {note_line}".rstrip())
    return lines


def generate_notes(
    commits: Sequence[CommitRecord],
    classifications: Sequence[CommitClassification | None],
    *,
    version: str | None = None,
) -> str:
    """Render grouped markdown release notes.

    Sections follow severity (breaking, features, fixes); entries inside a
    section keep commit order. Unclassified commits are left out. The output
    depends only on the arguments.
    """
    if len(commits) != len(classifications):
        raise ValueError("commits and classifications must have the same length")

    lines: list[str] = []
    if version is not None:
        if commits:
            day = commits[-1].timestamp.astimezone(UTC).date().isoformat()
            lines.append(f"## {version} ({day})")
        else:
            lines.append(f"## {version}")

    for kind, title in SECTION_TITLES:
        entries: list[str] = []
        for commit, cls in zip(commits, classifications, strict=True):
            if cls is None or cls.kind != kind:
                continue
            entries.extend(_entry(commit, cls))
        if not entries:
            continue

        if lines:
            lines.append("")
        lines.append(f"### {title}")
        lines.append("")
        lines.extend(entries)

    if not lines:
        return ""
    return "\n".join(lines).rstrip() + "\n"
