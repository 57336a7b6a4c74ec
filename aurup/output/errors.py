"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from aurup.core.errors import ErrorCode
from aurup.output.console import Style
from aurup.services.update.errors import UpdateError, UpdateErrorKind

if TYPE_CHECKING:
    from aurup.output.console import ConsoleProtocol

__all__ = ["print_update_error", "update_error_exit_code"]

_EXIT_CODES: dict[UpdateErrorKind, ErrorCode] = {
    "directory_missing": ErrorCode.USAGE_ERROR,
    "manifest_missing": ErrorCode.USAGE_ERROR,
    "config_invalid": ErrorCode.USAGE_ERROR,
    "missing_upstream": ErrorCode.RESOLUTION_ERROR,
    "upstream_failed": ErrorCode.RESOLUTION_ERROR,
    "hook_failed": ErrorCode.RESOLUTION_ERROR,
    "invalid_version": ErrorCode.VALIDATION_ERROR,
    "invalid_identifier": ErrorCode.VALIDATION_ERROR,
    "tool_missing": ErrorCode.MUTATION_ERROR,
    "manifest_write_failed": ErrorCode.MUTATION_ERROR,
    "checksum_failed": ErrorCode.MUTATION_ERROR,
    "srcinfo_failed": ErrorCode.MUTATION_ERROR,
    "build_failed": ErrorCode.BUILD_ERROR,
    "credentials_failed": ErrorCode.PUBLISH_ERROR,
    "clone_failed": ErrorCode.PUBLISH_ERROR,
    "copy_failed": ErrorCode.PUBLISH_ERROR,
    "commit_failed": ErrorCode.PUBLISH_ERROR,
    "push_failed": ErrorCode.PUBLISH_ERROR,
}


def print_update_error(error: UpdateError, console: ConsoleProtocol) -> None:
    """Print an update error, flagging whitelist violations as security alerts."""
    if error.is_security:
        console.error(f"Security Alert: {error.message}")
    else:
        console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def update_error_exit_code(error: UpdateError) -> int:
    return int(_EXIT_CODES[error.kind])
