"""PKGBUILD rewrite, checksum and .SRCINFO regeneration.

The version/revision rewrite happens first and is not undone if a later step
fails: the PKGBUILD is then left with the new pkgver and stale checksums.
Callers discard that state through version control (``git checkout --
PKGBUILD``); the error hint says so.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from aurup.core.manifest import SRCINFO_NAME, PackageManifest, has_var, set_var
from aurup.core.result import Err, Ok, Result
from aurup.output.console import ConsoleProtocol, Style
from aurup.platform.files import atomic_write_text
from aurup.platform.process import run, run_silent
from aurup.services.update.errors import UpdateError
from aurup.services.update.model import UpdateDecision
from aurup.services.update.timeouts import CHECKSUM_TIMEOUT_SECONDS, SRCINFO_TIMEOUT_SECONDS

__all__ = [
    "regenerate_checksums",
    "regenerate_srcinfo",
    "rewrite_version",
    "update_metadata",
]

_PARTIAL_HINT = "PKGBUILD already has the new pkgver; discard it with: git checkout -- PKGBUILD"


def _require_tool(name: str, package: str) -> Result[None, UpdateError]:
    if shutil.which(name) is None:
        return Err(
            UpdateError(
                kind="tool_missing",
                message=f"{name}: missing",
                hint=f"install {package}",
            )
        )
    return Ok(None)


def _tool_hint(stderr: str) -> str:
    stderr = stderr.strip()
    return f"{stderr}\n{_PARTIAL_HINT}" if stderr else _PARTIAL_HINT


def rewrite_version(
    manifest: PackageManifest,
    version: str,
    *,
    reset_revision: bool,
    console: ConsoleProtocol,
) -> Result[None, UpdateError]:
    """Set pkgver, and pkgrel=1 when reset_revision, in the PKGBUILD on disk.

    A PKGBUILD without a ``pkgver=`` line is refused; there is nothing to
    rewrite and publishing it unchanged would push stale metadata.
    """
    try:
        text = manifest.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            UpdateError(
                kind="manifest_write_failed",
                message=f"cannot rewrite {manifest.path}",
                hint=str(e),
            )
        )

    if not has_var(text, "pkgver"):
        return Err(
            UpdateError(
                kind="manifest_write_failed",
                message=f"no pkgver= line in {manifest.path}",
                hint="add a pkgver=<version> line to the PKGBUILD",
            )
        )
    text = set_var(text, "pkgver", version)
    reset = reset_revision and has_var(text, "pkgrel")
    if reset:
        text = set_var(text, "pkgrel", "1")

    try:
        atomic_write_text(manifest.path, text)
    except OSError as e:
        return Err(
            UpdateError(
                kind="manifest_write_failed",
                message=f"cannot rewrite {manifest.path}",
                hint=str(e),
            )
        )

    console.info(f"pkgver={version}")
    if reset:
        console.info("Reset pkgrel to 1")
    elif reset_revision:
        console.warning("no pkgrel= line, revision left unset")
    return Ok(None)


def regenerate_checksums(pkg_dir: Path, console: ConsoleProtocol) -> Result[None, UpdateError]:
    """Run updpkgsums, which rewrites the checksum arrays in place."""
    tool = _require_tool("updpkgsums", "pacman-contrib")
    if isinstance(tool, Err):
        return tool

    console.info("Running updpkgsums...")
    result = run_silent(["updpkgsums"], cwd=pkg_dir, timeout=CHECKSUM_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            UpdateError(
                kind="checksum_failed",
                message=f"updpkgsums failed (exit {result.error.returncode})",
                hint=_tool_hint(result.error.stderr),
            )
        )
    return Ok(None)


def regenerate_srcinfo(pkg_dir: Path, console: ConsoleProtocol) -> Result[Path, UpdateError]:
    """Write ``makepkg --printsrcinfo`` output to .SRCINFO."""
    tool = _require_tool("makepkg", "pacman")
    if isinstance(tool, Err):
        return tool

    console.info(f"Generating {SRCINFO_NAME}...")
    result = run(["makepkg", "--printsrcinfo"], cwd=pkg_dir, timeout=SRCINFO_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            UpdateError(
                kind="srcinfo_failed",
                message=f"makepkg --printsrcinfo failed (exit {result.error.returncode})",
                hint=_tool_hint(result.error.stderr),
            )
        )

    path = pkg_dir / SRCINFO_NAME
    try:
        atomic_write_text(path, result.value)
    except OSError as e:
        return Err(UpdateError(kind="srcinfo_failed", message=f"cannot write {path}", hint=str(e)))
    return Ok(path)


def update_metadata(
    manifest: PackageManifest,
    version: str,
    decision: UpdateDecision,
    console: ConsoleProtocol,
) -> Result[None, UpdateError]:
    """Apply an adopted update to the package directory."""
    rewrite = rewrite_version(
        manifest,
        version,
        reset_revision=decision.resets_revision,
        console=console,
    )
    if isinstance(rewrite, Err):
        return rewrite

    checksums = regenerate_checksums(manifest.directory, console)
    if isinstance(checksums, Err):
        return checksums

    srcinfo = regenerate_srcinfo(manifest.directory, console)
    if isinstance(srcinfo, Err):
        return srcinfo

    console.print(f"wrote {srcinfo.value}", Style.DIM)
    return Ok(None)
