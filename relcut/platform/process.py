"""Subprocess execution with Result-based error handling.

Git commands and hook commands both go through here, so a failing process
comes back as a `ProcessError` value instead of an exception.

Usage:
    match run(["git", "remote", "get-url", "origin"], cwd=Path(".")):
        case Ok(stdout):
            print(stdout.strip())
        case Err(error):
            print(f"exit {error.returncode}: {error.stderr}")
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from relcut.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent", "shell_command"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A process that could not start or exited non-zero.

    `returncode` is -1 when the process never ran (missing binary, timeout).
    `stdout`/`stderr` are empty for streamed runs.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


def _failed(cmd: list[str], returncode: int, *, stdout: str = "", stderr: str = "") -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout=stdout, stderr=stderr))


def shell_command(command: str) -> list[str]:
    """Wrap a command line so it runs through the platform shell."""
    if os.name == "nt":
        return ["cmd", "/c", command]
    return ["sh", "-c", command]


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run `cmd` with output captured; Ok(stdout) on exit code 0."""
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _failed(cmd, -1, stdout=partial, stderr=f"Command timed out after {timeout}s")
    except OSError as e:
        return _failed(cmd, -1, stderr=str(e))

    if proc.returncode != 0:
        return _failed(cmd, proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Run `cmd` with its output streaming to the terminal.

    Nothing is captured, so a failure only carries the exit code.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return _failed(cmd, -1, stderr=str(e))

    if proc.returncode != 0:
        return _failed(cmd, proc.returncode)
    return Ok(None)
