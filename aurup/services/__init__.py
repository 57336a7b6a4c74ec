"""Service layer - orchestrates core functionality."""

from .update import UpdateService

__all__ = ["UpdateService"]
