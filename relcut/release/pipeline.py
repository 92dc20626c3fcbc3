"""Release pipeline.

Stages run strictly in order against an explicit ReleaseContext:

    validate -> precheck -> changelog -> version_file -> pre_release
    -> pre_commit -> commit -> push -> publish -> assets -> post_release

Each stage returns either a (possibly updated) copy of the context or a
ReleaseError. The first error stops the run. Nothing is rolled back: a
changelog already written stays written if a later push fails, and the
operator reconciles by hand. All remote checks happen in `precheck`, before
the first local mutation.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import date

from relcut.core.result import Err, Ok, Result
from relcut.git.repository import GitError, VcsGateway
from relcut.hosting.github import HostingGateway
from relcut.output.console import ConsoleProtocol
from relcut.platform.files import atomic_write_text
from relcut.release.assets import resolve_assets
from relcut.release.changelog import DEFAULT_TEMPLATE, apply_release
from relcut.release.context import ReleaseContext
from relcut.release.contracts import Prompter
from relcut.release.errors import KEEP_A_CHANGELOG_URL, ReleaseError, aborted
from relcut.release.hooks import HookRunner, execute_hook, run_shell_hook
from relcut.release.planner import validate_increase
from relcut.release.version_file import replace_version

__all__ = [
    "PipelineDeps",
    "STAGES",
    "Stage",
    "run_pipeline",
]

WRITE_PERMISSIONS = frozenset({"admin", "maintain", "write"})
MAX_UPLOAD_WORKERS = 8


def _today() -> str:
    return date.today().isoformat()


@dataclass(frozen=True, slots=True)
class PipelineDeps:
    """Collaborators the stages talk to."""

    vcs: VcsGateway
    hosting: HostingGateway
    console: ConsoleProtocol
    prompter: Prompter
    hook_runner: HookRunner = run_shell_hook
    today: Callable[[], str] = _today


StageResult: TypeAlias = Result[ReleaseContext, ReleaseError]
Stage: TypeAlias = Callable[[ReleaseContext, PipelineDeps], StageResult]


def _remote_mismatch(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="remote_mismatch", message=message, hint=hint))


def _git_failure(message: str, error: GitError) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="remote_mismatch", message=message, hint=error.message or None))


# -----------------------------------------------------------------------------
# Checks
# -----------------------------------------------------------------------------


def validate(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    ok = validate_increase(ctx.old_version, ctx.new_version)
    if isinstance(ok, Err):
        return ok
    return Ok(ctx)


def precheck(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    repo = ctx.repository
    deps.console.step("Checking git status")

    perm = deps.hosting.permission(repo.owner, repo.name, ctx.credentials.user)
    if isinstance(perm, Err):
        return perm
    if perm.value.lower() not in WRITE_PERMISSIONS:
        return Err(
            ReleaseError(
                kind="permission_denied",
                message="You must have at least write privileges to the repository.",
                hint=f"{ctx.credentials.user} has '{perm.value}' on {repo.slug}",
            )
        )

    origin = deps.vcs.remote_url("origin")
    if isinstance(origin, Err):
        return _git_failure("Unable to read the origin remote!", origin.error)
    if origin.value != repo.remote_url:
        return _remote_mismatch(
            f"Git remote origin's push and fetch urls ({origin.value}) "
            f"must be set to {repo.remote_url}!"
        )

    fetched = deps.vcs.fetch("origin")
    if isinstance(fetched, Err):
        return _git_failure("Unable to fetch from origin!", fetched.error)

    branch = deps.vcs.current_branch()
    if branch != repo.branch:
        if ctx.strict_branch:
            return _remote_mismatch(f"Releases must be done on the '{repo.branch}' branch!")
        deps.console.warning(
            f"releasing from '{branch or 'detached HEAD'}', release will target '{repo.branch}'"
        )

    dirty = deps.vcs.differs_from(f"origin/{repo.branch}")
    if isinstance(dirty, Err):
        return _git_failure(f"Unable to compare with origin/{repo.branch}!", dirty.error)
    if dirty.value:
        return _remote_mismatch("There are uncommitted and/or unpushed local changes!")

    deps.console.success("Git status OK")
    return Ok(ctx)


# -----------------------------------------------------------------------------
# Local mutations
# -----------------------------------------------------------------------------


def update_changelog(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    if not ctx.update_changelog:
        return Ok(ctx)

    path = ctx.changelog_path
    if not path.exists():
        try:
            atomic_write_text(path, DEFAULT_TEMPLATE)
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"Unable to create Changelog! {e}",
                    hint=str(path),
                )
            )
        staged = deps.vcs.add([path])
        if isinstance(staged, Err):
            deps.console.warning(f"Unable to stage {path.name}: {staged.error.message}")
        return Err(
            ReleaseError(
                kind="changelog_missing",
                message=(
                    "Changelog file was not found! A default one following the convention of "
                    f"{KEEP_A_CHANGELOG_URL} has been automatically generated. Document your "
                    "changes under the 'Unreleased' section, and commit & push before running "
                    "this again."
                ),
            )
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"Unable to read Changelog! {e}",
                hint=str(path),
            )
        )

    update = apply_release(
        text,
        new_tag=ctx.new_tag,
        old_tag=ctx.old_tag,
        repo_link=ctx.repository.web_link,
        iso_date=deps.today(),
    )
    if isinstance(update, Err):
        return update

    try:
        atomic_write_text(path, update.value.new_text)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"Unable to update Changelog! {e}",
                hint=str(path),
            )
        )
    deps.console.success("Updated Changelog")

    notes = update.value.release_notes if ctx.release_notes_enabled else None
    return Ok(replace(ctx, release_notes=notes, changed_files=(*ctx.changed_files, path)))


def update_version_file(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    path = ctx.version_file_path
    if not ctx.update_version_file or path is None:
        return Ok(ctx)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"Unable to read {path.name}! {e}",
                hint=str(path),
            )
        )

    new_text = replace_version(text, str(ctx.new_version))
    if new_text is None:
        return Err(
            ReleaseError(
                kind="configuration_invalid",
                message=f'No "version" field in {path.name}!',
                hint=str(path),
            )
        )

    try:
        atomic_write_text(path, new_text)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"Unable to update {path.name}! {e}",
                hint=str(path),
            )
        )
    deps.console.success(f"Updated {path.name}")
    return Ok(replace(ctx, changed_files=(*ctx.changed_files, path)))


def _hook_stage(name: str) -> Stage:
    def stage(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
        hook = ctx.hooks.get(name)
        if hook is None:
            return Ok(ctx)
        deps.console.step(f"Executing {name.replace('_', '-')} hook")
        ran = execute_hook(
            name,
            hook,
            values=ctx.placeholders(),
            cwd=ctx.workdir,
            runner=deps.hook_runner,
        )
        if isinstance(ran, Err):
            return ran
        return Ok(ctx)

    stage.__name__ = f"{name}_hook"
    return stage


pre_commit_hook = _hook_stage("pre_commit")
post_release_hook = _hook_stage("post_release")


def pre_release(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    """Run the pre-release hook, then resolve assets (the hook may build them).

    Skipped entirely when no GitHub release is published.
    """
    if not ctx.publish_release:
        return Ok(ctx)

    hooked = _hook_stage("pre_release")(ctx, deps)
    if isinstance(hooked, Err):
        return hooked

    if not ctx.asset_globs:
        return Ok(ctx)
    assets = resolve_assets(ctx.asset_globs, root=ctx.workdir)
    if isinstance(assets, Err):
        return assets
    return Ok(replace(ctx, assets=assets.value))


# -----------------------------------------------------------------------------
# Git publication
# -----------------------------------------------------------------------------


def commit(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    if not ctx.changed_files:
        deps.console.info("nothing to commit")
        return Ok(ctx)

    added = deps.vcs.add(list(ctx.changed_files))
    if isinstance(added, Err):
        names = " and ".join(p.name for p in ctx.changed_files)
        return _git_failure(f"Unable to stage {names}!", added.error)

    deps.console.step("Committing changes")
    committed = deps.vcs.commit(ctx.new_tag)
    if isinstance(committed, Err):
        return _git_failure("Unable to commit changes!", committed.error)
    deps.console.success("Changes committed")
    return Ok(ctx)


def push(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    deps.console.step("Pushing changes")
    pushed = deps.vcs.push(
        ctx.push_url(),
        f"HEAD:{ctx.repository.branch}",
        redact=ctx.redactions(),
    )
    if isinstance(pushed, Err):
        return _git_failure("Unable to push changes!", pushed.error)
    deps.console.success("Changes pushed")
    return Ok(ctx)


# -----------------------------------------------------------------------------
# Hosting publication
# -----------------------------------------------------------------------------


def publish(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    if not ctx.publish_release:
        deps.console.info("GitHub release disabled, skipping publication")
        return Ok(ctx)

    deps.console.step("Creating release on GitHub")
    upload_url = deps.hosting.create_release(
        ctx.repository.owner,
        ctx.repository.name,
        tag=ctx.new_tag,
        target=ctx.repository.branch,
        title=f"Release {ctx.new_tag}",
        body=ctx.release_notes or "",
    )
    if isinstance(upload_url, Err):
        return upload_url
    deps.console.success(f"Created release {ctx.new_tag}")
    return Ok(replace(ctx, upload_url=upload_url.value))


def upload_assets(ctx: ReleaseContext, deps: PipelineDeps) -> StageResult:
    """Upload all assets concurrently; any single failure fails the stage.

    Assets already transferred when another one fails stay on the release.
    """
    if not ctx.publish_release or not ctx.assets:
        return Ok(ctx)
    if ctx.upload_url is None:
        return Err(ReleaseError(kind="transport_failed", message="No upload URL for release assets"))

    upload_url = ctx.upload_url
    deps.console.step(f"Uploading {len(ctx.assets)} asset(s)")
    workers = min(len(ctx.assets), MAX_UPLOAD_WORKERS)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(deps.hosting.upload_asset, upload_url, p) for p in ctx.assets]
        results = [f.result() for f in futures]

    failures = [r.error for r in results if isinstance(r, Err)]
    if failures:
        first = failures[0]
        return Err(
            ReleaseError(
                kind=first.kind,
                message=f"{len(failures)} of {len(results)} asset upload(s) failed. {first.message}",
                hint=first.hint,
            )
        )

    deps.console.success(
        f"Finished uploading assets: {', '.join(p.name for p in ctx.assets)}"
    )
    return Ok(replace(ctx, uploaded_assets=len(results)))


STAGES: tuple[tuple[str, Stage], ...] = (
    ("validate", validate),
    ("precheck", precheck),
    ("changelog", update_changelog),
    ("version_file", update_version_file),
    ("pre_release", pre_release),
    ("pre_commit", pre_commit_hook),
    ("commit", commit),
    ("push", push),
    ("publish", publish),
    ("assets", upload_assets),
    ("post_release", post_release_hook),
)


def run_pipeline(
    ctx: ReleaseContext,
    deps: PipelineDeps,
    *,
    stages: tuple[tuple[str, Stage], ...] = STAGES,
) -> StageResult:
    """Run `stages` in order, stopping at the first error."""
    for name, stage in stages:
        if name in ctx.confirm_stages:
            if not deps.prompter.confirm(f"Continue with '{name}' for {ctx.new_tag}?"):
                return Err(aborted())

        result = stage(ctx, deps)
        if isinstance(result, Err):
            return result
        ctx = result.value

    return Ok(ctx)
