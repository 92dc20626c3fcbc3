from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from relcut.cli.prompts import TerminalPrompter
from relcut.git.repository import Repository
from relcut.hosting.github import GitHubApi
from relcut.hosting.http import UrllibHttpClient
from relcut.output.console import ConsoleProtocol, RichConsole
from relcut.release.context import ReleaseContext
from relcut.release.contracts import Prompter
from relcut.release.pipeline import PipelineDeps


@dataclass(frozen=True, slots=True)
class CLIContext:
    workdir: Path
    console: ConsoleProtocol
    prompter: Prompter
    env: dict[str, str]


def build_context() -> CLIContext:
    console = RichConsole()
    return CLIContext(
        workdir=Path.cwd(),
        console=console,
        prompter=TerminalPrompter(console),
        env=dict(os.environ),
    )


def build_deps(cli: CLIContext, release: ReleaseContext) -> PipelineDeps:
    """Wire real git and GitHub collaborators for a resolved release."""
    hosting = GitHubApi(
        UrllibHttpClient(),
        api_url=release.repository.api_url,
        user=release.credentials.user,
        secret=release.credentials.secret,
    )
    return PipelineDeps(
        vcs=Repository(release.workdir),
        hosting=hosting,
        console=cli.console,
        prompter=cli.prompter,
    )
