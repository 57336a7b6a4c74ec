"""Tests for aurup.services.update.credentials."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from aurup.services.update.credentials import git_ssh_env, ssh_key_file

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")


@posix_only
def test_key_file_is_private() -> None:
    with ssh_key_file("-----BEGIN KEY-----\nabc\n-----END KEY-----") as key:
        assert stat.S_IMODE(key.stat().st_mode) == 0o600
        assert stat.S_IMODE(key.parent.stat().st_mode) == 0o700


def test_key_content_gets_trailing_newline() -> None:
    with ssh_key_file("secret") as key:
        assert key.read_text(encoding="utf-8") == "secret\n"


def test_key_content_kept_when_newline_present() -> None:
    with ssh_key_file("secret\n") as key:
        assert key.read_text(encoding="utf-8") == "secret\n"


def test_removed_on_exit() -> None:
    with ssh_key_file("secret") as key:
        path = key
    assert not path.exists()
    assert not path.parent.exists()


def test_removed_on_exception() -> None:
    captured: list[Path] = []
    with pytest.raises(RuntimeError):
        with ssh_key_file("secret") as key:
            captured.append(key)
            raise RuntimeError("push exploded")

    assert not captured[0].exists()
    assert not captured[0].parent.exists()


def test_two_handles_are_independent() -> None:
    with ssh_key_file("a") as first, ssh_key_file("b") as second:
        assert first != second
        assert first.read_text(encoding="utf-8") == "a\n"
        assert second.read_text(encoding="utf-8") == "b\n"


def test_git_ssh_env() -> None:
    env = git_ssh_env(Path("/tmp/x y/id_aur"), base={"PATH": "/usr/bin"})

    assert env["PATH"] == "/usr/bin"
    assert env["GIT_SSH_COMMAND"] == (
        "ssh -i '/tmp/x y/id_aur' -o IdentitiesOnly=yes -o StrictHostKeyChecking=no"
    )


def test_git_ssh_env_defaults_to_process_env() -> None:
    env = git_ssh_env(Path("/k"))

    assert env.get("PATH") == os.environ.get("PATH")
    assert "GIT_SSH_COMMAND" in env
