"""Release context resolution.

`resolve_context` turns `ReleaseSettings` (file + flags) into a frozen
`ReleaseContext`: it parses the remote once, reads the current version,
plans the new one and collects credentials. Stages never mutate the context;
they hand back a copy made with `dataclasses.replace`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote

from relcut.core.config import HookSettings, ReleaseSettings
from relcut.core.result import Err, Ok, Result
from relcut.hosting.github import default_api_url, parse_remote
from relcut.output.console import ConsoleProtocol, Style
from relcut.platform.files import atomic_write_text
from relcut.release.contracts import Prompter
from relcut.release.errors import ReleaseError, aborted
from relcut.release.planner import ReleaseType, plan_version
from relcut.release.semver import SemVer, parse_version
from relcut.release.version_file import read_version_file

__all__ = [
    "STAGE_NAMES",
    "Credentials",
    "ReleaseContext",
    "RepositoryInfo",
    "dump_context",
    "resolve_context",
]

# Stage names that may be listed under [prompts].confirm.
STAGE_NAMES = (
    "precheck",
    "changelog",
    "version_file",
    "pre_release",
    "pre_commit",
    "commit",
    "push",
    "publish",
    "assets",
    "post_release",
)


@dataclass(frozen=True, slots=True)
class RepositoryInfo:
    owner: str
    name: str
    host: str
    branch: str
    remote_url: str
    web_link: str
    api_url: str
    is_https: bool

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class Credentials:
    user: str
    secret: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    project_name: str
    old_version: SemVer
    new_version: SemVer
    release_type: ReleaseType
    repository: RepositoryInfo
    credentials: Credentials
    workdir: Path
    changelog_path: Path
    version_file_path: Path | None
    tag_prefix: str = "v"
    asset_globs: tuple[str, ...] = ()
    publish_release: bool = True
    update_changelog: bool = True
    release_notes_enabled: bool = True
    update_version_file: bool = True
    strict_branch: bool = True
    hooks: Mapping[str, HookSettings] = field(default_factory=dict)
    confirm_stages: frozenset[str] = frozenset()

    # Filled in by stages.
    release_notes: str | None = None
    changed_files: tuple[Path, ...] = ()
    assets: tuple[Path, ...] = ()
    upload_url: str | None = None
    uploaded_assets: int = 0

    @property
    def old_tag(self) -> str:
        return self.old_version.to_tag(self.tag_prefix)

    @property
    def new_tag(self) -> str:
        return self.new_version.to_tag(self.tag_prefix)

    def redactions(self) -> tuple[str, ...]:
        """The secret as it may appear in git output: raw and URL-quoted."""
        secret = self.credentials.secret
        return tuple(dict.fromkeys((secret, quote(secret, safe=""))))

    def push_url(self) -> str:
        """Remote URL to push to, with credentials embedded for https remotes."""
        repo = self.repository
        if not repo.is_https:
            return repo.remote_url
        user = quote(self.credentials.user, safe="")
        secret = quote(self.credentials.secret, safe="")
        return f"https://{user}:{secret}@{repo.host}/{repo.owner}/{repo.name}.git"

    def as_public_dict(self) -> dict[str, object]:
        """Nested view of the context without the secret."""
        return {
            "release": {
                "name": self.project_name,
                "old_version": str(self.old_version),
                "new_version": str(self.new_version),
                "old_tag": self.old_tag,
                "new_tag": self.new_tag,
                "type": self.release_type,
            },
            "github": {
                "owner": self.repository.owner,
                "repo": self.repository.name,
                "host": self.repository.host,
                "branch": self.repository.branch,
                "remote": self.repository.remote_url,
                "link": self.repository.web_link,
                "api": self.repository.api_url,
                "user": self.credentials.user,
                "strict_branch": self.strict_branch,
                "release": self.publish_release,
                "assets": list(self.asset_globs),
            },
            "changelog": {
                "path": str(self.changelog_path),
                "update": self.update_changelog,
                "release_notes": self.release_notes_enabled,
            },
            "version_file": {
                "path": str(self.version_file_path) if self.version_file_path else "",
                "update": self.update_version_file,
            },
            "hooks": {
                name: {"command": hook.command, "silent": hook.silent}
                for name, hook in self.hooks.items()
            },
            "prompts": {"confirm": sorted(self.confirm_stages)},
        }

    def placeholders(self) -> dict[str, str]:
        """Flattened dotted keys for hook templates, e.g. `release.new_version`."""
        out: dict[str, str] = {}
        _flatten(self.as_public_dict(), "", out)
        return out


def _flatten(value: object, prefix: str, out: dict[str, str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():  # pyright: ignore[reportUnknownVariableType]
            _flatten(item, f"{prefix}.{key}" if prefix else str(key), out)
    elif isinstance(value, list):
        out[prefix] = " ".join(str(v) for v in value)  # pyright: ignore[reportUnknownVariableType]
    elif isinstance(value, bool):
        out[prefix] = "true" if value else "false"
    else:
        out[prefix] = str(value)


def _config_error(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="configuration_invalid", message=message, hint=hint))


def _resolve_repository(settings: ReleaseSettings) -> Result[RepositoryInfo, ReleaseError]:
    if not settings.remote:
        return _config_error("Missing required option: --remote (remote URL to GitHub repository)")

    ref = parse_remote(settings.remote)
    if ref is None:
        return _config_error(f"Invalid github remote url: {settings.remote}")

    return Ok(
        RepositoryInfo(
            owner=ref.owner,
            name=ref.repo,
            host=ref.host,
            branch=settings.branch,
            remote_url=settings.remote,
            web_link=ref.web_link,
            api_url=settings.api_url or default_api_url(ref.host),
            is_https=ref.is_https,
        )
    )


def _resolve_new_version(
    settings: ReleaseSettings,
    *,
    project: str,
    old: SemVer,
    prompter: Prompter,
) -> Result[tuple[SemVer, ReleaseType], ReleaseError]:
    choice = settings.new_version or settings.release_type
    if choice is None:
        picked = prompter.select_release_type(project=project, current=str(old))
        if picked is None:
            return Err(aborted())
        choice = prompter.ask_version() if picked == "custom" else picked

    planned = plan_version(old, choice)
    if isinstance(planned, Err):
        return planned
    return Ok((planned.value.version, planned.value.release_type))


def _resolve_credentials(
    settings: ReleaseSettings,
    *,
    owner: str,
    prompter: Prompter,
    env: Mapping[str, str],
) -> Result[Credentials, ReleaseError]:
    user = settings.user or owner
    if settings.token_ref:
        secret = env.get(settings.token_ref)
        if not secret:
            return _config_error(
                f"Environment variable {settings.token_ref} (token_ref) is not set",
            )
        return Ok(Credentials(user=user, secret=secret))

    secret = prompter.ask_secret("What is your GitHub password?")
    if not secret:
        return _config_error("No GitHub password or token given")
    return Ok(Credentials(user=user, secret=secret))


def resolve_context(
    settings: ReleaseSettings,
    *,
    workdir: Path,
    prompter: Prompter,
    console: ConsoleProtocol,
    env: Mapping[str, str],
) -> Result[ReleaseContext, ReleaseError]:
    """Build the release context; prompts for anything settings leave open."""
    unknown = sorted(set(settings.confirm) - set(STAGE_NAMES))
    if unknown:
        return _config_error(
            f"Unknown stages in prompts.confirm: {', '.join(unknown)}",
            hint=", ".join(STAGE_NAMES),
        )

    repo_r = _resolve_repository(settings)
    if isinstance(repo_r, Err):
        return repo_r
    repo = repo_r.value

    version_file_path = workdir / settings.version_file if settings.version_file else None
    name = settings.name
    old_raw = settings.old_version
    if version_file_path is not None:
        info = read_version_file(version_file_path)
        if isinstance(info, Err):
            # Only fatal when the file is needed: as the version source or a target.
            if old_raw is None or settings.update_version_file:
                return info
        else:
            old_raw = old_raw or info.value.version
            name = name or info.value.name
    if old_raw is None:
        return _config_error("No current version: set old_version or a version file")
    name = name or repo.name

    old = parse_version(old_raw)
    if old is None:
        return Err(
            ReleaseError(
                kind="version_invalid",
                message=f"Invalid current version! version: {old_raw}",
            )
        )
    console.print(f"Releasing '{name}'. Existing version: {old}")

    new_r = _resolve_new_version(settings, project=name, old=old, prompter=prompter)
    if isinstance(new_r, Err):
        return new_r
    new, release_type = new_r.value
    console.print(f"New version will be: {new}")

    creds = _resolve_credentials(settings, owner=repo.owner, prompter=prompter, env=env)
    if isinstance(creds, Err):
        return creds
    console.print(f"Using GitHub user: {creds.value.user}", Style.DIM)

    return Ok(
        ReleaseContext(
            project_name=name,
            old_version=old,
            new_version=new,
            release_type=release_type,
            repository=repo,
            credentials=creds.value,
            workdir=workdir,
            changelog_path=workdir / settings.changelog_path,
            version_file_path=version_file_path,
            tag_prefix=settings.tag_prefix,
            asset_globs=settings.assets,
            publish_release=settings.publish_release,
            update_changelog=settings.update_changelog,
            release_notes_enabled=settings.release_notes,
            update_version_file=settings.update_version_file and version_file_path is not None,
            strict_branch=settings.strict_branch,
            hooks=dict(settings.hooks),
            confirm_stages=frozenset(settings.confirm),
        )
    )


def dump_context(ctx: ReleaseContext, path: Path) -> Result[Path, ReleaseError]:
    """Write the resolved context (secret excluded) as JSON."""
    target = path.expanduser().resolve()
    try:
        atomic_write_text(target, json.dumps(ctx.as_public_dict(), indent=2) + "\n")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"Unable to dump configs: {e}",
                hint=str(target),
            )
        )
    return Ok(target)
