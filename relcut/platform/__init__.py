"""Platform abstraction layer."""

from .files import atomic_write_text
from .process import (
    ProcessError,
    run,
    run_silent,
    shell_command,
)

__all__ = [
    # files
    "atomic_write_text",
    # process
    "ProcessError",
    "run",
    "run_silent",
    "shell_command",
]
