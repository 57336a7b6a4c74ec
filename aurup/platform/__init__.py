"""Platform abstraction layer."""

from .files import atomic_write_text, write_private_text
from .process import (
    ProcessError,
    run,
    run_silent,
)

__all__ = [
    # files
    "atomic_write_text",
    "write_private_text",
    # process
    "ProcessError",
    "run",
    "run_silent",
]
