"""Per-package update pipeline."""

from .errors import UpdateError
from .model import (
    PublishOutcome,
    ResolvedRelease,
    RunOptions,
    UpdateDecision,
    UpdateReport,
    decide,
)
from .publish import GitTransport, MockTransport, Publisher, RegistryTransport
from .service import UpdateService
from .validation import normalize_tag, validate_identifier, validate_package_dir

__all__ = [
    "GitTransport",
    "MockTransport",
    "Publisher",
    "PublishOutcome",
    "RegistryTransport",
    "ResolvedRelease",
    "RunOptions",
    "UpdateDecision",
    "UpdateError",
    "UpdateReport",
    "UpdateService",
    "decide",
    "normalize_tag",
    "validate_identifier",
    "validate_package_dir",
]
