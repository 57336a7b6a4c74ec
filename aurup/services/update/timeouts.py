from __future__ import annotations

# Checksum regeneration downloads every source artifact
CHECKSUM_TIMEOUT_SECONDS = 30 * 60.0

# makepkg --printsrcinfo only evaluates the PKGBUILD
SRCINFO_TIMEOUT_SECONDS = 60.0

# Full package build; overridable with AURUP_BUILD_TIMEOUT
BUILD_TIMEOUT_SECONDS = 2 * 60 * 60.0
