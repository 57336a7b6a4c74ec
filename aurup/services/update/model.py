from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class UpdateDecision(StrEnum):
    UP_TO_DATE = "up_to_date"
    FORCED_UPDATE = "forced_update"
    VERSION_CHANGED = "version_changed"

    @property
    def proceeds(self) -> bool:
        """True when metadata, build and publish steps run."""
        return self is not UpdateDecision.UP_TO_DATE

    @property
    def resets_revision(self) -> bool:
        return self is UpdateDecision.VERSION_CHANGED


class PublishOutcome(StrEnum):
    NO_CHANGES = "no_changes"
    COMMITTED = "committed"  # dry run: commit made, push skipped
    PUBLISHED = "published"
    SKIPPED = "skipped"  # local run: no CI flag or no key


@dataclass(frozen=True, slots=True)
class RunOptions:
    force: bool = False
    dry_run: bool = False
    skip_build: bool = False


@dataclass(frozen=True, slots=True)
class ResolvedRelease:
    raw_tag: str
    normalized_version: str


@dataclass(frozen=True, slots=True)
class UpdateReport:
    package: str
    current_version: str
    new_version: str
    decision: UpdateDecision
    publish: PublishOutcome | None = None
    built: bool = False


def decide(current_version: str, release: ResolvedRelease, options: RunOptions) -> UpdateDecision:
    if release.normalized_version != current_version:
        return UpdateDecision.VERSION_CHANGED
    if options.force:
        return UpdateDecision.FORCED_UPDATE
    return UpdateDecision.UP_TO_DATE
