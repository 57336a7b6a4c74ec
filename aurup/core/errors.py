"""Error codes for CLI exit status.

Every failure of a package run maps to exactly one of these codes so an
external scheduler can tell the failure class apart without parsing text.
"Up to date" and "nothing to publish" are successes and exit with OK.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for a package update run.

    These values are used as process exit codes and should remain stable:
    - 0: Success (updated, up to date, or nothing to publish)
    - 1: Usage error (bad arguments, missing directory or PKGBUILD)
    - 2: Resolution error (upstream unreachable, malformed response)
    - 3: Validation error (value outside the allowed character set)
    - 4: Mutation error (checksum or .SRCINFO regeneration failed)
    - 5: Build error (makepkg failed)
    - 6: Publish error (clone, commit or push failed)
    """

    OK = 0
    USAGE_ERROR = 1
    RESOLUTION_ERROR = 2
    VALIDATION_ERROR = 3
    MUTATION_ERROR = 4
    BUILD_ERROR = 5
    PUBLISH_ERROR = 6

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
