"""Automated upstream version tracking and AUR republishing."""

__version__ = "0.1.0"
