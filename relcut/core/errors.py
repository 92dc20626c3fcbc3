"""Process exit codes.

A release run that completes or is aborted exits 0. A failed run exits 1
after printing a single `ERROR:` line.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the CLI. Values are stable."""

    OK = 0
    RELEASE_FAILED = 1
