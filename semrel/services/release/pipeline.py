"""Release orchestrator: analyze -> prepare -> publish.

The pipeline is a fixed sequence of typed stages driven by a small state
machine::

    IDLE -> ANALYZING -> SKIPPED
                      -> PREPARING -> PUBLISHING -> DONE
    ANALYZING | PREPARING | PUBLISHING -> FAILED

Each orchestrator instance runs once; terminal states are never left and
no state is entered twice.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Protocol, TypeVar

from semrel.core.config import ReleaseConfig
from semrel.core.result import Err, Ok, Result
from semrel.git.repository import CommitRecord, GitError
from semrel.output.console import ConsoleProtocol, Style
from semrel.platform.process import ExitStatus, ProcessExecutor
from semrel.services.release.commits import analyze_commits
from semrel.services.release.errors import PipelineError, ToolUnavailableError
from semrel.services.release.hook import run_hook, run_prepare_hook
from semrel.services.release.model import PublishResult, ReleasePlan
from semrel.services.release.publish import ReleasePublisher, publish
from semrel.services.release.semver import latest_tag

E = TypeVar("E")


class PipelineState(Enum):
    IDLE = auto()
    ANALYZING = auto()
    SKIPPED = auto()
    PREPARING = auto()
    PUBLISHING = auto()
    DONE = auto()
    FAILED = auto()

    def __str__(self) -> str:
        return self.name.lower()


_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.ANALYZING}),
    PipelineState.ANALYZING: frozenset(
        {PipelineState.SKIPPED, PipelineState.PREPARING, PipelineState.FAILED}
    ),
    PipelineState.PREPARING: frozenset({PipelineState.PUBLISHING, PipelineState.FAILED}),
    PipelineState.PUBLISHING: frozenset({PipelineState.DONE, PipelineState.FAILED}),
    PipelineState.SKIPPED: frozenset(),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}


class CommitSource(Protocol):
    """Version-control log reader."""

    def merged_tags(self) -> Result[tuple[str, ...], GitError]: ...

    def commits_since(self, ref: str | None) -> Result[tuple[CommitRecord, ...], GitError]: ...

    def head_sha(self) -> Result[str, GitError]: ...


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    state: PipelineState
    history: tuple[PipelineState, ...]
    plan: ReleasePlan | None = None
    tag: str | None = None
    published: PublishResult | None = None
    reason: str | None = None


Preflight = Callable[[], Result[None, ToolUnavailableError]]


def branch_allowed(branch: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatchcase(branch, p) for p in patterns)


class ReleaseOrchestrator:
    """Runs one release invocation against a repository.

    ``preflight`` checks the publishing tools. It runs only once a release is
    due, right after entering PREPARING, so no-op runs never depend on it.
    """

    def __init__(
        self,
        *,
        config: ReleaseConfig,
        root: Path,
        source: CommitSource,
        executor: ProcessExecutor,
        publisher: ReleasePublisher,
        console: ConsoleProtocol,
        hook_timeout: float | None = None,
        preflight: Preflight | None = None,
    ) -> None:
        self._config = config
        self._root = root
        self._source = source
        self._executor = executor
        self._publisher = publisher
        self._console = console
        self._hook_timeout = hook_timeout if hook_timeout is not None else config.hook_timeout
        self._preflight = preflight
        self._history: list[PipelineState] = [PipelineState.IDLE]

    @property
    def state(self) -> PipelineState:
        return self._history[-1]

    @property
    def history(self) -> tuple[PipelineState, ...]:
        return tuple(self._history)

    def _advance(self, to: PipelineState) -> None:
        if to not in _TRANSITIONS[self.state] or to in self._history:
            raise AssertionError(f"illegal pipeline transition: {self.state} -> {to}")
        self._history.append(to)

    def _finish(
        self,
        state: PipelineState,
        *,
        plan: ReleasePlan | None = None,
        tag: str | None = None,
        published: PublishResult | None = None,
        reason: str | None = None,
    ) -> Ok[PipelineOutcome]:
        self._advance(state)
        return Ok(
            PipelineOutcome(
                state=state,
                history=self.history,
                plan=plan,
                tag=tag,
                published=published,
                reason=reason,
            )
        )

    def _fail(self, error: Err[E]) -> Err[E]:
        self._advance(PipelineState.FAILED)
        return error

    def run(self, *, branch: str, dry_run: bool = False) -> Result[PipelineOutcome, PipelineError]:
        self._advance(PipelineState.ANALYZING)
        console = self._console
        config = self._config

        if not branch_allowed(branch, config.branches):
            reason = (
                f"branch '{branch}' is not a release branch "
                f"(configured: {', '.join(config.branches)})"
            )
            console.info(reason)
            return self._finish(PipelineState.SKIPPED, reason=reason)

        analyzed = self._analyze()
        if isinstance(analyzed, Err):
            return self._fail(analyzed)
        plan = analyzed.value

        if not plan.should_release or plan.next_version is None:
            reason = "no release-triggering commits since the last release"
            console.info(reason)
            return self._finish(PipelineState.SKIPPED, plan=plan, reason=reason)

        version = str(plan.next_version)
        tag = plan.next_version.to_tag(config.tag_format)
        console.success(f"next release: {tag} ({plan.bump})")

        if dry_run:
            console.header("Release notes")
            console.print(plan.notes.rstrip())
            console.warning("dry run: skipping prepare and publish")
            return self._finish(PipelineState.SKIPPED, plan=plan, tag=tag, reason="dry run")

        self._advance(PipelineState.PREPARING)
        if self._preflight is not None:
            ready = self._preflight()
            if isinstance(ready, Err):
                return self._fail(ready)
        if config.prepare_cmd is not None:
            console.header("Prepare")
            prepared = run_prepare_hook(
                config.prepare_cmd,
                version,
                executor=self._executor,
                cwd=self._root,
                timeout=self._hook_timeout,
            )
            if isinstance(prepared, Err):
                return self._fail(prepared)
            self._echo(prepared.value)

        self._advance(PipelineState.PUBLISHING)
        if config.publish_cmd is not None:
            console.header("Publish command")
            hooked = run_hook(
                config.publish_cmd,
                version,
                executor=self._executor,
                cwd=self._root,
                timeout=self._hook_timeout,
            )
            if isinstance(hooked, Err):
                return self._fail(hooked)
            self._echo(hooked.value)

        head = self._source.head_sha()
        if isinstance(head, Err):
            return self._fail(head)

        console.header(f"Publish {tag}")
        published = publish(
            plan,
            config.assets,
            self._publisher,
            root=self._root,
            tag=tag,
            target=head.value,
        )
        if isinstance(published, Err):
            return self._fail(published)

        for path in published.value.uploaded:
            console.print(f"uploaded {path.name}", Style.DIM)
        url = published.value.url or published.value.release_id
        console.success(f"published {tag}: {url}")
        return self._finish(PipelineState.DONE, plan=plan, tag=tag, published=published.value)

    def _analyze(self) -> Result[ReleasePlan, PipelineError]:
        console = self._console
        config = self._config

        tags = self._source.merged_tags()
        if isinstance(tags, Err):
            return tags

        last = latest_tag(tags.value, config.tag_format)
        if last is None:
            console.info("no previous release found")
        else:
            console.info(f"last release: {last[0]}")

        commits = self._source.commits_since(last[0] if last else None)
        if isinstance(commits, Err):
            return commits
        console.print(f"{len(commits.value)} commit(s) since last release", Style.DIM)

        return analyze_commits(
            commits.value,
            str(last[1]) if last else None,
            rules=config.release_rules,
            initial_version=config.initial_version,
        )

    def _echo(self, status: ExitStatus) -> None:
        for line in status.stdout.splitlines():
            self._console.print(line, Style.DIM)
