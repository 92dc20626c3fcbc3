"""Templated hook commands.

Hook commands may reference context values as `${dotted.key}`, for example
`git tag -a ${release.new_tag} -m "${release.name}"`. Expansion is a single
pass: text produced by a substitution is never expanded again, and unknown
placeholders are left as written.

Substituted values are inserted verbatim, not shell-quoted. A value that
contains shell metacharacters reaches the shell as such.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from pathlib import Path

from relcut.core.config import HookSettings
from relcut.core.result import Err, Ok, Result
from relcut.platform.process import ProcessError, run, run_silent, shell_command
from relcut.release.errors import ReleaseError

_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z0-9_.-]+)\}")

HookRunner = Callable[[str, Path, bool], Result[object, ProcessError]]


def expand_placeholders(template: str, values: Mapping[str, str]) -> str:
    def substitute(m: re.Match[str]) -> str:
        return values.get(m.group(1), m.group(0))

    return _PLACEHOLDER_RE.sub(substitute, template)


def run_shell_hook(command: str, cwd: Path, silent: bool) -> Result[object, ProcessError]:
    """Run `command` through the shell; silent hooks have their output captured."""
    argv = shell_command(command)
    if silent:
        return run(argv, cwd=cwd)
    return run_silent(argv, cwd=cwd)


def execute_hook(
    name: str,
    hook: HookSettings,
    *,
    values: Mapping[str, str],
    cwd: Path,
    runner: HookRunner = run_shell_hook,
) -> Result[None, ReleaseError]:
    label = name.replace("_", "-")
    command = expand_placeholders(hook.command, values)
    result = runner(command, cwd, hook.silent)
    if isinstance(result, Err):
        detail = result.error.stderr.strip() if hook.silent else ""
        return Err(
            ReleaseError(
                kind="hook_failed",
                message=(
                    f"Non-zero status returned by {label} hook command! "
                    f"(exit {result.error.returncode})"
                ),
                hint=detail or None,
            )
        )
    return Ok(None)
