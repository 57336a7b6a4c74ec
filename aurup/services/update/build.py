from __future__ import annotations

from pathlib import Path

from aurup.core.result import Err, Ok, Result
from aurup.output.console import ConsoleProtocol, Style
from aurup.platform.process import run_silent
from aurup.services.update.errors import UpdateError
from aurup.services.update.timeouts import BUILD_TIMEOUT_SECONDS


def makepkg_command(*, unattended: bool) -> list[str]:
    cmd = ["makepkg", "-sf"]
    if unattended:
        cmd.append("--noconfirm")
    return cmd


def verify_build(
    pkg_dir: Path,
    *,
    skip: bool,
    unattended: bool,
    console: ConsoleProtocol,
    timeout: float | None = None,
) -> Result[bool, UpdateError]:
    """Build the package with makepkg as a gate before publishing.

    Returns:
        Ok(True) when built, Ok(False) when skipped, Err on build failure
    """
    if skip:
        console.info("Skipping build (--skip-build)")
        return Ok(False)

    cmd = makepkg_command(unattended=unattended)
    console.info("Running makepkg...")
    console.print(" ".join(cmd), Style.DIM)

    result = run_silent(cmd, cwd=pkg_dir, timeout=timeout or BUILD_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        return Err(
            UpdateError(
                kind="build_failed",
                message=f"Build failed (exit {e.returncode})",
                hint=e.stderr.strip() or None,
            )
        )

    console.success("Build successful.")
    return Ok(True)
