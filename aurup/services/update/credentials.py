"""Scoped SSH key material for registry access.

The key from AUR_SSH_PRIVATE_KEY is written to a fresh 0700 directory as a
0600 file for the duration of a ``with`` block and removed when the block
exits, whichever way it exits. Nothing is registered globally: the handle
owns the file.

Usage:
    with ssh_key_file(env.ssh_private_key) as key:
        git_env = git_ssh_env(key)
        ...
"""

from __future__ import annotations

import os
import shlex
import shutil
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from aurup.platform.files import write_private_text

__all__ = ["git_ssh_env", "ssh_key_file"]


@contextmanager
def ssh_key_file(material: str) -> Iterator[Path]:
    """Materialize key text as a private file, deleted on exit."""
    key_dir = Path(tempfile.mkdtemp(prefix="aurup-ssh-"))
    try:
        os.chmod(key_dir, 0o700)
        key_path = key_dir / "id_aur"
        # ssh rejects keys without a trailing newline ("invalid format")
        text = material if material.endswith("\n") else material + "\n"
        write_private_text(key_path, text)
        yield key_path
    finally:
        shutil.rmtree(key_dir, ignore_errors=True)


def git_ssh_env(key_path: Path, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment for git processes that authenticate with key_path only."""
    env = dict(os.environ if base is None else base)
    env["GIT_SSH_COMMAND"] = " ".join(
        [
            "ssh",
            "-i",
            shlex.quote(str(key_path)),
            "-o",
            "IdentitiesOnly=yes",
            "-o",
            "StrictHostKeyChecking=no",
        ]
    )
    return env
