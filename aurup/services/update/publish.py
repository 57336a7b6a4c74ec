"""Publish updated metadata to the package's registry repository.

Flow, inside a scoped SSH key and a temporary clone directory that are both
removed on exit:

    clone -> copy files -> stage -> (no diff: NO_CHANGES)
          -> commit "update: <version>" -> (dry run: COMMITTED)
          -> push origin <branch> -> PUBLISHED

Without CI=true and an SSH key the publisher does nothing and prints the
manual steps instead (SKIPPED); that is a normal local run, not an error.
"""

from __future__ import annotations

import shutil
import tempfile
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from aurup.core.config import RunEnvironment
from aurup.core.manifest import MANIFEST_NAME, SRCINFO_NAME, PackageManifest
from aurup.core.result import Err, Ok, Result
from aurup.git.repository import GitError, Repository
from aurup.output.console import ConsoleProtocol, Style
from aurup.services.update.credentials import git_ssh_env, ssh_key_file
from aurup.services.update.errors import UpdateError, UpdateErrorKind
from aurup.services.update.model import PublishOutcome, RunOptions

__all__ = [
    "GitTransport",
    "MockTransport",
    "Publisher",
    "RegistryTransport",
    "commit_message",
    "publish_files",
]


def commit_message(version: str) -> str:
    return f"update: {version}"


class RegistryTransport(Protocol):
    """Version-control operations against a registry clone."""

    def clone(self, url: str, dest: Path) -> Result[None, GitError]: ...

    def set_identity(self, repo: Path, name: str, email: str) -> Result[None, GitError]: ...

    def stage(self, repo: Path, paths: list[str]) -> Result[None, GitError]: ...

    def has_staged_changes(self, repo: Path) -> Result[bool, GitError]: ...

    def commit(self, repo: Path, message: str) -> Result[None, GitError]: ...

    def push(self, repo: Path, branch: str) -> Result[None, GitError]: ...


class GitTransport:
    """RegistryTransport backed by the git CLI."""

    def __init__(self, env: dict[str, str] | None = None) -> None:
        self._env = env

    def _repo(self, path: Path) -> Repository:
        return Repository(path, env=self._env)

    def clone(self, url: str, dest: Path) -> Result[None, GitError]:
        return Repository.clone(url, dest, env=self._env).map(lambda _repo: None)

    def set_identity(self, repo: Path, name: str, email: str) -> Result[None, GitError]:
        return self._repo(repo).set_identity(name, email)

    def stage(self, repo: Path, paths: list[str]) -> Result[None, GitError]:
        return self._repo(repo).add(paths)

    def has_staged_changes(self, repo: Path) -> Result[bool, GitError]:
        return self._repo(repo).has_staged_changes()

    def commit(self, repo: Path, message: str) -> Result[None, GitError]:
        return self._repo(repo).commit(message)

    def push(self, repo: Path, branch: str) -> Result[None, GitError]:
        return self._repo(repo).push("origin", branch)


def _no_calls() -> list[tuple[str, ...]]:
    return []


def _no_failures() -> dict[str, GitError]:
    return {}


def _no_paths() -> list[str]:
    return []


@dataclass
class MockTransport:
    """Recording transport for tests.

    Usage:
        transport = MockTransport(changes=True)
        ...
        assert transport.count("push") == 0
    """

    changes: bool = True
    failures: dict[str, GitError] = field(default_factory=_no_failures)
    calls: list[tuple[str, ...]] = field(default_factory=_no_calls)
    staged: list[str] = field(default_factory=_no_paths)

    def _record(self, *call: str) -> Result[None, GitError]:
        self.calls.append(call)
        failure = self.failures.get(call[0])
        if failure is not None:
            return Err(failure)
        return Ok(None)

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)

    def clone(self, url: str, dest: Path) -> Result[None, GitError]:
        result = self._record("clone", url)
        if isinstance(result, Ok):
            dest.mkdir(parents=True, exist_ok=True)
        return result

    def set_identity(self, repo: Path, name: str, email: str) -> Result[None, GitError]:
        return self._record("set_identity", name, email)

    def stage(self, repo: Path, paths: list[str]) -> Result[None, GitError]:
        result = self._record("stage", *paths)
        if isinstance(result, Ok):
            self.staged.extend(paths)
        return result

    def has_staged_changes(self, repo: Path) -> Result[bool, GitError]:
        result = self._record("has_staged_changes")
        if isinstance(result, Err):
            return result
        return Ok(self.changes)

    def commit(self, repo: Path, message: str) -> Result[None, GitError]:
        return self._record("commit", message)

    def push(self, repo: Path, branch: str) -> Result[None, GitError]:
        return self._record("push", branch)


def _git_failure(kind: UpdateErrorKind, message: str, error: GitError) -> UpdateError:
    return UpdateError(kind=kind, message=message, hint=error.message or None)


def publish_files(
    manifest: PackageManifest,
    extra_patterns: tuple[str, ...] = (),
) -> Result[list[str], UpdateError]:
    """Relative paths (within the package dir) of every file to publish."""
    pkg_dir = manifest.directory
    files = [MANIFEST_NAME, SRCINFO_NAME, *manifest.aux_files]

    for pattern in extra_patterns:
        if pattern.startswith("/") or ".." in pattern:
            return Err(
                UpdateError(
                    kind="config_invalid",
                    message=f"publish.extra_files pattern escapes the package: {pattern!r}",
                )
            )
        for match in sorted(pkg_dir.glob(pattern)):
            if not match.is_file():
                continue
            rel = match.relative_to(pkg_dir).as_posix()
            if rel not in files:
                files.append(rel)

    return Ok(files)


class Publisher:
    """Syncs a package directory into its registry repository.

    Attributes:
        env: Run environment (CI flag, key material, identity, registry URL)
        console: Output sink
        transport: Registry operations; defaults to git over the scoped key
    """

    def __init__(
        self,
        *,
        env: RunEnvironment,
        console: ConsoleProtocol,
        transport: RegistryTransport | None = None,
    ) -> None:
        self._env = env
        self._console = console
        self._transport = transport

    def publish(
        self,
        manifest: PackageManifest,
        version: str,
        options: RunOptions,
        *,
        extra_patterns: tuple[str, ...] = (),
    ) -> Result[PublishOutcome, UpdateError]:
        repo_url = self._env.repo_url(manifest.name)

        if not self._env.can_publish or self._env.ssh_private_key is None:
            self._print_manual_steps(repo_url)
            return Ok(PublishOutcome.SKIPPED)

        files = publish_files(manifest, extra_patterns)
        if isinstance(files, Err):
            return files

        self._console.info("Setting up SSH...")
        with ExitStack() as stack:
            try:
                key_path = stack.enter_context(ssh_key_file(self._env.ssh_private_key))
            except OSError as e:
                return Err(
                    UpdateError(
                        kind="credentials_failed",
                        message="cannot write SSH key file",
                        hint=str(e),
                    )
                )
            tmp = stack.enter_context(
                tempfile.TemporaryDirectory(prefix=f"aurup-{manifest.name}-")
            )
            transport = self._transport or GitTransport(env=git_ssh_env(key_path))
            clone_dir = Path(tmp) / manifest.name
            return self._sync(
                transport,
                manifest=manifest,
                version=version,
                options=options,
                repo_url=repo_url,
                clone_dir=clone_dir,
                files=files.value,
            )

    def _sync(
        self,
        transport: RegistryTransport,
        *,
        manifest: PackageManifest,
        version: str,
        options: RunOptions,
        repo_url: str,
        clone_dir: Path,
        files: list[str],
    ) -> Result[PublishOutcome, UpdateError]:
        self._console.info(f"Cloning AUR repository ({repo_url})...")
        cloned = transport.clone(repo_url, clone_dir)
        if isinstance(cloned, Err):
            return Err(_git_failure("clone_failed", f"failed to clone {repo_url}", cloned.error))

        self._console.info("Syncing files...")
        copied = self._copy(manifest.directory, clone_dir, files)
        if isinstance(copied, Err):
            return copied

        identity = transport.set_identity(clone_dir, self._env.commit_name, self._env.commit_email)
        if isinstance(identity, Err):
            return Err(_git_failure("commit_failed", "failed to set git identity", identity.error))

        staged = transport.stage(clone_dir, files)
        if isinstance(staged, Err):
            return Err(_git_failure("commit_failed", "git add failed", staged.error))

        diff = transport.has_staged_changes(clone_dir)
        if isinstance(diff, Err):
            return Err(_git_failure("commit_failed", "git diff --staged failed", diff.error))
        if not diff.value:
            self._console.info("No changes to commit.")
            return Ok(PublishOutcome.NO_CHANGES)

        message = commit_message(version)
        committed = transport.commit(clone_dir, message)
        if isinstance(committed, Err):
            return Err(_git_failure("commit_failed", "git commit failed", committed.error))
        self._console.info(f"Committed: {message}")

        if options.dry_run:
            self._console.warning(f"[DRY RUN] push to {self._env.branch} skipped")
            return Ok(PublishOutcome.COMMITTED)

        self._console.info("Pushing to AUR...")
        pushed = transport.push(clone_dir, self._env.branch)
        if isinstance(pushed, Err):
            return Err(_git_failure("push_failed", "git push failed", pushed.error))

        self._console.success(f"Published {manifest.name} {version}")
        return Ok(PublishOutcome.PUBLISHED)

    def _copy(self, src_dir: Path, dest_dir: Path, files: list[str]) -> Result[None, UpdateError]:
        for rel in files:
            src = src_dir / rel
            dest = dest_dir / rel
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, dest)
            except OSError as e:
                return Err(UpdateError(kind="copy_failed", message=f"cannot copy {rel}", hint=str(e)))
            self._console.print(f"  {rel}", Style.DIM)
        return Ok(None)

    def _print_manual_steps(self, repo_url: str) -> None:
        self._console.info("Skipping publish (local run or missing SSH key).")
        self._console.info("Manual steps to publish:")
        self._console.print(f"  1. git clone {repo_url}")
        self._console.print(f"  2. cp {MANIFEST_NAME} {SRCINFO_NAME} <repo_dir>/")
        self._console.print("  3. git commit & push")
