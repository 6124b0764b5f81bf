"""Git operations.

Usage:
    from semrel.git import Repository

    repo = Repository(path)
    tags = repo.merged_tags()
"""

from .repository import CommitRecord, GitError, Repository

__all__ = [
    "CommitRecord",
    "GitError",
    "Repository",
]
