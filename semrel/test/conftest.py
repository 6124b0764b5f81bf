from __future__ import annotations

from collections.abc import Callable

import pytest

from semrel.git.repository import CommitRecord
from semrel.test.fakes import FakeExecutor, FakePublisher, commit_factory


@pytest.fixture
def make_commit() -> Callable[..., CommitRecord]:
    return commit_factory()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()
