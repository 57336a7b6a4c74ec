"""Git operations used to publish to the registry.

Usage:
    from aurup.git import Repository

    repo = Repository(Path("/tmp/clone"))
    if repo.has_staged_changes().unwrap_or(False):
        repo.commit("update: 1.2.3")
"""

from aurup.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "Repository",
]
