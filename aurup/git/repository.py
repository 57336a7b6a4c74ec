"""Git repository abstraction.

Covers the handful of git operations a registry publish needs: clone,
identity, stage, staged-diff check, commit, push. All operations return
Result types; an ``env`` mapping is passed through to every git process so
callers can supply GIT_SSH_COMMAND without touching os.environ.

Usage:
    match Repository.clone(url, dest, env=ssh_env):
        case Ok(repo):
            repo.add(["PKGBUILD", ".SRCINFO"])
        case Err(e):
            print(f"clone failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from aurup.core.result import Err, Ok, Result
from aurup.platform.process import ProcessError
from aurup.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"clone", "fetch", "pull", "push"})

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


def _timeout_for(command: str) -> float:
    if command in _NETWORK_COMMANDS:
        return _GIT_NETWORK_TIMEOUT_SECONDS
    return _GIT_TIMEOUT_SECONDS


class Repository:
    """A local git working tree.

    Attributes:
        path: Path to the repository root
        env: Environment for git processes (None inherits the current one)
    """

    def __init__(self, path: Path, env: dict[str, str] | None = None) -> None:
        self.path = path
        self.env = env

    @classmethod
    def clone(
        cls,
        url: str,
        dest: Path,
        env: dict[str, str] | None = None,
    ) -> Result[Repository, GitError]:
        """Clone url into dest (which must be empty or absent)."""
        result = run_process(
            ["git", "clone", url, str(dest)],
            cwd=dest.parent,
            env=env,
            timeout=_timeout_for("clone"),
        )
        if isinstance(result, Err):
            return Err(_git_error("clone", result.error, "clone failed"))
        return Ok(cls(dest, env=env))

    def set_identity(self, name: str, email: str) -> Result[None, GitError]:
        """Set user.name / user.email in the repository's local config."""
        for key, value in (("user.name", name), ("user.email", email)):
            result = self._run(["config", key, value])
            if isinstance(result, Err):
                return Err(_git_error("config", result.error, f"cannot set {key}"))
        return Ok(None)

    def add(self, paths: list[str]) -> Result[None, GitError]:
        result = self._run(["add", "--", *paths])
        if isinstance(result, Err):
            return Err(_git_error("add", result.error, "add failed"))
        return Ok(None)

    def has_staged_changes(self) -> Result[bool, GitError]:
        """Check whether the index differs from HEAD.

        ``git diff --staged --quiet`` exits 1 when there is a diff and 0 when
        there is none; any other status is an error.
        """
        result = self._run(["diff", "--staged", "--quiet"])
        match result:
            case Ok(_):
                return Ok(False)
            case Err(e) if e.returncode == 1:
                return Ok(True)
            case Err(e):
                return Err(_git_error("diff --staged", e, "diff failed"))

    def commit(self, message: str) -> Result[None, GitError]:
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            return Err(_git_error("commit", result.error, "commit failed"))
        return Ok(None)

    def push(self, remote: str, branch: str) -> Result[None, GitError]:
        result = self._run(["push", remote, branch])
        if isinstance(result, Err):
            return Err(_git_error("push", result.error, "push failed"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            env=self.env,
            timeout=_timeout_for(command),
        )
