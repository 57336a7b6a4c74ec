"""Package-specific upstream query hook.

A package whose releases are not on GitHub (or need special handling) sets
``[upstream] command = [...]`` in its update_config.toml. The command runs in
the package directory and prints the latest tag on stdout; it is held to the
same contract as the GitHub query: a tag or a failure.
"""

from __future__ import annotations

from pathlib import Path

from aurup.core.result import Err, Ok, Result
from aurup.platform.process import ProcessError, run

__all__ = ["HOOK_TIMEOUT_SECONDS", "run_tag_command"]

HOOK_TIMEOUT_SECONDS = 2 * 60.0


def run_tag_command(command: tuple[str, ...], pkg_dir: Path) -> Result[str, ProcessError]:
    """Run the hook and return the last non-empty line of its output.

    An exit status of zero with no output counts as a failure.
    """
    result = run(list(command), cwd=pkg_dir, timeout=HOOK_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return result

    lines = [ln.strip() for ln in result.value.splitlines() if ln.strip()]
    if not lines:
        return Err(
            ProcessError(
                command=command,
                returncode=0,
                stdout=result.value,
                stderr="command printed no tag",
            )
        )
    return Ok(lines[-1])
