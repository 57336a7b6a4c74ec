from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

UpdateErrorKind = Literal[
    # usage
    "directory_missing",
    "manifest_missing",
    "config_invalid",
    # resolution
    "missing_upstream",
    "upstream_failed",
    "hook_failed",
    # validation
    "invalid_version",
    "invalid_identifier",
    # mutation
    "tool_missing",
    "manifest_write_failed",
    "checksum_failed",
    "srcinfo_failed",
    # build
    "build_failed",
    # publish
    "credentials_failed",
    "clone_failed",
    "copy_failed",
    "commit_failed",
    "push_failed",
]

_SECURITY_KINDS: frozenset[str] = frozenset({"invalid_version", "invalid_identifier"})


@dataclass(frozen=True, slots=True)
class UpdateError:
    """Failure of one package run.

    ``kind`` selects the exit code (see aurup.output.errors); ``hint`` carries
    the underlying tool or transport error when there is one.
    """

    kind: UpdateErrorKind
    message: str
    hint: str | None = None

    @property
    def is_security(self) -> bool:
        """True for whitelist violations, which are reported as security alerts."""
        return self.kind in _SECURITY_KINDS

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
