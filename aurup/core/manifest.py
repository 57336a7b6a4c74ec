"""PKGBUILD reading and in-place field rewriting.

A PKGBUILD is a bash script, not a data format. This module does not evaluate
it: a field is read from the first line of the form ``name=value`` and two
literal syntaxes are understood:

    pkgver=1.2.3          -> "1.2.3"
    pkgdesc="A tool"      -> "A tool"   (text between the first pair of quotes)

Anything else (arrays, expansions, functions) is treated as absent and the
caller applies its own fallback.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "MANIFEST_NAME",
    "SRCINFO_NAME",
    "ManifestError",
    "PackageManifest",
    "get_var",
    "has_var",
    "load_manifest",
    "set_var",
]

MANIFEST_NAME = "PKGBUILD"
SRCINFO_NAME = ".SRCINFO"


@dataclass(frozen=True, slots=True)
class ManifestError:
    """Error when a PKGBUILD cannot be read."""

    message: str
    path: Path


@dataclass(frozen=True, slots=True)
class PackageManifest:
    """Fields of one PKGBUILD relevant to an update.

    Attributes:
        path: Path to the PKGBUILD
        name: pkgname, or the directory name when it cannot be parsed
        version: pkgver ("" when absent)
        revision: pkgrel when it is a plain integer
        upstream_owner: _repouser (GitHub owner)
        upstream_repo: _reponame (GitHub repository)
        install_file: install hook file present in the package directory
        local_files: local entries of the source array present on disk
        name_from_directory: True when pkgname could not be parsed
    """

    path: Path
    name: str
    version: str
    revision: int | None = None
    upstream_owner: str | None = None
    upstream_repo: str | None = None
    install_file: str | None = None
    local_files: tuple[str, ...] = ()
    name_from_directory: bool = False

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def has_upstream(self) -> bool:
        return bool(self.upstream_owner and self.upstream_repo)

    @property
    def aux_files(self) -> tuple[str, ...]:
        """Auxiliary files published alongside PKGBUILD and .SRCINFO."""
        files: list[str] = []
        if self.install_file:
            files.append(self.install_file)
        files.extend(f for f in self.local_files if f not in files)
        return tuple(files)


def get_var(text: str, name: str) -> str | None:
    """Return the value of the first ``name=`` line, or None.

    Empty values are reported as None, same as a missing line.
    """
    prefix = f"{name}="
    for line in text.splitlines():
        if not line.startswith(prefix):
            continue
        if '"' in line:
            value = line.split('"')[1]
        else:
            value = line.split("=")[1]
        value = value.strip()
        return value or None
    return None


def has_var(text: str, name: str) -> bool:
    """True when some line starts with ``name=``, even with an empty value."""
    prefix = f"{name}="
    return any(line.startswith(prefix) for line in text.splitlines())


def set_var(text: str, name: str, value: str) -> str:
    """Rewrite every ``name=...`` line to ``name=value``.

    Lines for other fields are untouched; if the field has no line, the text
    is returned unchanged.
    """
    pattern = re.compile(rf"^{re.escape(name)}=.*$", re.MULTILINE)
    return pattern.sub(lambda _m: f"{name}={value}", text)


def _source_entries(text: str) -> list[str]:
    """Collect the raw entries of the source=( ... ) array."""
    lines = text.splitlines()
    body: list[str] = []
    for i, line in enumerate(lines):
        if not line.startswith("source=("):
            continue
        rest = line[len("source=(") :]
        for part in [rest, *lines[i + 1 :]]:
            if ")" in part:
                body.append(part.split(")", 1)[0])
                break
            body.append(part)
        break

    entries: list[str] = []
    for chunk in body:
        for token in chunk.split():
            if token.startswith("#"):
                break
            entries.append(token.strip("'\""))
    return entries


def _local_files(text: str, pkg_dir: Path) -> tuple[str, ...]:
    files: list[str] = []
    for entry in _source_entries(text):
        # "name::url" renames a download; only the url part matters here
        target = entry.split("::", 1)[-1]
        if "://" in target or "$" in target or "/" in target or not target:
            continue
        if (pkg_dir / target).is_file() and target not in files:
            files.append(target)
    return tuple(files)


def _install_file(text: str, pkg_dir: Path, name: str) -> str | None:
    declared = get_var(text, "install")
    if declared and "$" not in declared and "/" not in declared:
        if (pkg_dir / declared).is_file():
            return declared
    conventional = f"{name}.install"
    if (pkg_dir / conventional).is_file():
        return conventional
    return None


def _revision(raw: str | None) -> int | None:
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


def load_manifest(pkg_dir: Path) -> Result[PackageManifest, ManifestError]:
    """Read the PKGBUILD in pkg_dir.

    Args:
        pkg_dir: Package directory containing the PKGBUILD

    Returns:
        Ok(PackageManifest), or Err(ManifestError) if the file is missing or
        unreadable
    """
    path = pkg_dir / MANIFEST_NAME
    if not path.is_file():
        return Err(ManifestError(f"{MANIFEST_NAME} not found in {pkg_dir}", path=path))

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(ManifestError(f"cannot read {path}: {e}", path=path))

    parsed_name = get_var(text, "pkgname")
    name = parsed_name or pkg_dir.resolve().name

    return Ok(
        PackageManifest(
            path=path,
            name=name,
            version=get_var(text, "pkgver") or "",
            revision=_revision(get_var(text, "pkgrel")),
            upstream_owner=get_var(text, "_repouser"),
            upstream_repo=get_var(text, "_reponame"),
            install_file=_install_file(text, pkg_dir, name),
            local_files=_local_files(text, pkg_dir),
            name_from_directory=parsed_name is None,
        )
    )
