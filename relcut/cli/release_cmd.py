from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from relcut.cli.context import CLIContext, build_context, build_deps
from relcut.core.config import DEFAULT_CONFIG_FILE, ReleaseSettings, load_settings, load_settings_or_default
from relcut.core.errors import ErrorCode
from relcut.core.result import Err
from relcut.output.console import Style
from relcut.release.context import dump_context, resolve_context
from relcut.release.errors import ReleaseError
from relcut.release.pipeline import run_pipeline


def exit_release(error: ReleaseError) -> NoReturn:
    """Render a release error and exit.

    Aborts (declined prompt, freshly created changelog) are informational and
    exit 0; everything else prints a single `ERROR:` line and exits 1.
    """
    if error.is_abort:
        typer.echo(error.message)
        raise typer.Exit(code=int(ErrorCode.OK))
    typer.echo(f"ERROR: {error.pretty()}", err=True)
    raise typer.Exit(code=int(ErrorCode.RELEASE_FAILED))


def _load_settings(cli: CLIContext, config: Path | None) -> ReleaseSettings:
    if config is None:
        loaded = load_settings_or_default(cli.workdir / DEFAULT_CONFIG_FILE)
    else:
        loaded = load_settings(config if config.is_absolute() else cli.workdir / config)
    if isinstance(loaded, Err):
        exit_release(
            ReleaseError(
                kind="configuration_invalid",
                message=loaded.error.message,
                hint=str(loaded.error.path) if loaded.error.path else None,
            )
        )
    return loaded.value


def release(
    config: Path | None = typer.Option(
        None, "--config", "-c", help=f"Release config file (default: ./{DEFAULT_CONFIG_FILE})"
    ),
    remote: str | None = typer.Option(None, "--remote", help="Remote URL of the GitHub repository"),
    branch: str | None = typer.Option(None, "--branch", help="Branch releases are cut from"),
    no_strict_branch: bool = typer.Option(
        False, "--no-strict-branch", help="Allow releasing from another local branch"
    ),
    user: str | None = typer.Option(None, "--user", help="GitHub user (default: repo owner)"),
    token_ref: str | None = typer.Option(
        None, "--token-ref", help="Environment variable holding the GitHub token"
    ),
    changelog: str | None = typer.Option(None, "--changelog", help="Changelog path"),
    version_file: str | None = typer.Option(None, "--version-file", help="Version file path"),
    asset: list[str] = typer.Option([], "--asset", help="Asset glob to upload (repeatable)"),
    no_release: bool = typer.Option(
        False, "--no-release", help="Commit and push without creating a GitHub release"
    ),
    release_type: str | None = typer.Option(
        None, "--release-type", help="patch, minor or major (skips the prompt)"
    ),
    new_version: str | None = typer.Option(
        None, "--new-version", help="Explicit new version (skips the prompt)"
    ),
    dump_config: Path | None = typer.Option(
        None, "--dump-config", help="Write the resolved config as JSON and stop"
    ),
) -> None:
    """Cut a release from the changelog and publish it on GitHub."""
    cli = build_context()

    if release_type is not None and release_type not in {"patch", "minor", "major"}:
        exit_release(
            ReleaseError(
                kind="configuration_invalid",
                message=f"invalid --release-type: {release_type} (expected patch, minor or major)",
            )
        )

    settings = _load_settings(cli, config).with_overrides(
        remote=remote,
        branch=branch,
        strict_branch=False if no_strict_branch else None,
        user=user,
        token_ref=token_ref,
        changelog_path=changelog,
        version_file=version_file,
        assets=tuple(asset),
        publish_release=False if no_release else None,
        release_type=release_type,
        new_version=new_version,
    )

    ctx = resolve_context(
        settings,
        workdir=cli.workdir,
        prompter=cli.prompter,
        console=cli.console,
        env=cli.env,
    )
    if isinstance(ctx, Err):
        exit_release(ctx.error)

    if dump_config is not None:
        target = dump_config if dump_config.is_absolute() else cli.workdir / dump_config
        dumped = dump_context(ctx.value, target)
        if isinstance(dumped, Err):
            exit_release(dumped.error)
        cli.console.print(f"config written: {dumped.value}", Style.DIM)
        return

    result = run_pipeline(ctx.value, build_deps(cli, ctx.value))
    if isinstance(result, Err):
        exit_release(result.error)

    done = result.value
    cli.console.success(f"Released {done.project_name} {done.new_tag}")
    if done.uploaded_assets:
        cli.console.print(f"assets: {done.uploaded_assets}", Style.DIM)
