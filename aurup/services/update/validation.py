"""Whitelist checks for values that cross process and user boundaries.

Versions, package names and directory paths end up interpolated into sed-like
rewrites, git commit messages and, outside this tool, ``su -c`` command
strings. They are checked against a fixed character set and rejected (never
cleaned up) when they fail.
"""

from __future__ import annotations

import re
from pathlib import Path

from aurup.core.result import Err, Ok, Result
from aurup.services.update.errors import UpdateError
from aurup.services.update.model import ResolvedRelease

__all__ = [
    "normalize_tag",
    "validate_identifier",
    "validate_package_dir",
]

_VERSION_RE = re.compile(r"[0-9a-zA-Z._+-]+")
_IDENTIFIER_RE = re.compile(r"[0-9a-zA-Z._+-]+")
_PATH_RE = re.compile(r"[a-zA-Z0-9._/-]+")
_V_PREFIX_RE = re.compile(r"^v[0-9]")


def normalize_tag(tag: str) -> Result[ResolvedRelease, UpdateError]:
    """Strip one leading ``v`` from tag and validate the remainder.

    The ``v`` is only a prefix when a digit follows it ("v1.2" -> "1.2");
    tags like "vv1" or "version-2" are kept whole. This makes the function
    idempotent: its output never starts with a strippable prefix.
    """
    raw = tag.strip()
    version = raw[1:] if _V_PREFIX_RE.match(raw) else raw
    if not _VERSION_RE.fullmatch(version):
        return Err(
            UpdateError(
                kind="invalid_version",
                message=f"upstream tag contains invalid characters: {tag!r}",
                hint="allowed characters: 0-9 a-z A-Z . _ + -",
            )
        )
    return Ok(ResolvedRelease(raw_tag=tag, normalized_version=version))


def validate_identifier(value: str, what: str) -> Result[str, UpdateError]:
    """Check a package name or upstream owner/repo against the whitelist."""
    if not _IDENTIFIER_RE.fullmatch(value) or value in {".", ".."}:
        return Err(
            UpdateError(
                kind="invalid_identifier",
                message=f"invalid {what}: {value!r}",
                hint="allowed characters: 0-9 a-z A-Z . _ + -",
            )
        )
    return Ok(value)


def validate_package_dir(raw: str) -> Result[Path, UpdateError]:
    """Check a package directory argument.

    Only ``pkgname``, ``./pkgname`` style relative or absolute paths built
    from ``[a-zA-Z0-9._/-]`` are accepted, and ``..`` is refused anywhere.
    """
    if not _PATH_RE.fullmatch(raw) or ".." in raw:
        return Err(
            UpdateError(
                kind="invalid_identifier",
                message=f"invalid package directory name: {raw!r}",
                hint="use a plain directory name such as ./my-package",
            )
        )
    path = Path(raw)
    if not path.is_dir():
        return Err(
            UpdateError(
                kind="directory_missing",
                message=f"directory '{raw}' does not exist",
            )
        )
    return Ok(path)
