from __future__ import annotations

import typer

from relcut.output.console import ConsoleProtocol
from relcut.release.planner import ReleaseType

_TYPES: tuple[tuple[ReleaseType, str], ...] = (
    ("patch", "patch"),
    ("minor", "minor"),
    ("major", "major"),
    ("custom", "specific version"),
)


class TerminalPrompter:
    """Prompter backed by typer prompts on the controlling terminal."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def select_release_type(self, *, project: str, current: str) -> ReleaseType | None:
        self._console.header(f"Release {project} (current: {current})")
        for idx, (_, label) in enumerate(_TYPES, start=1):
            self._console.print(f"[{idx}] {label}")
        self._console.print("[0] cancel")

        while True:
            raw = typer.prompt("Which type of release will this be?", default="1")
            try:
                choice = int(raw.strip())
            except ValueError:
                self._console.warning("enter a number")
                continue
            if choice == 0:
                return None
            if 1 <= choice <= len(_TYPES):
                return _TYPES[choice - 1][0]
            self._console.warning(f"pick 0-{len(_TYPES)}")

    def ask_version(self) -> str:
        return typer.prompt("Enter the new version").strip()

    def ask_secret(self, message: str) -> str:
        return typer.prompt(message, hide_input=True, default="", show_default=False)

    def confirm(self, message: str) -> bool:
        return typer.confirm(message, default=False)
