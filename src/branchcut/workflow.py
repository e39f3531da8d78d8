"""The `cut` and `tag` release workflows.

Both follow the same states::

    START -> RESOLVING_CREDENTIALS -> [STAGING] -> PLANNING -> REVIEWING
          -> ABORTED | PUBLISHING -> DONE

`cut` stages the bump commit in a throwaway clone and reviews it before
pushing. `tag` reviews the current checkout first and only then runs the
bump tool in place. Nothing here retries; re-running a half-applied release
is the operator's call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from git import GitCommandError

from branchcut.bump import DEFAULT_BUMP_COMMAND, build_bump_command, run_bump_tool
from branchcut.credentials import GitCredentialStore, resolve_credentials
from branchcut.errors import BumpToolError, CloneError, ReleaseBranchMismatchError
from branchcut.git_repo import (
    checkout,
    get_remote_url,
    git_error_reason,
    head_commit,
    open_repo,
    tag_commit,
    tag_exists,
)
from branchcut.manifest import read_manifest_version
from branchcut.planner import BumpLevel, CutLevel, VersionPlan, parse_version, plan
from branchcut.publish import cut_push_set, publish, pull_rebase, tag_push_set
from branchcut.review import review_commits
from branchcut.staging import staging_clone

if TYPE_CHECKING:
    from pathlib import Path

    from git import Repo

    from branchcut.credentials import CredentialStore
    from branchcut.output import Reporter

DONE_MESSAGE = 'Done!'
CUT_ABORTED_MESSAGE = 'Aborted branch cut! Nothing was pushed.'
TAG_ABORTED_MESSAGE = 'Aborted push! Local changes not reverted, you must now resolve them manually.'


class WorkflowState(StrEnum):
    start = 'START'
    resolving_credentials = 'RESOLVING_CREDENTIALS'
    staging = 'STAGING'
    planning = 'PLANNING'
    reviewing = 'REVIEWING'
    aborted = 'ABORTED'
    publishing = 'PUBLISHING'
    done = 'DONE'


@dataclass(frozen=True)
class CutReleaseInput:
    """Inputs for `cut`.

    Attributes:
        level: Bump level for the new release line.
        upstream: Remote to clone from and push to.
        trunk_branch: Branch the release is cut from.
        manifest_path: Manifest holding the version, relative to the repo root.
        bump_command: Bump tool argv with a `{level}` placeholder.
        repo_root: Directory of the caller's repository (default: cwd).
    """

    level: CutLevel = CutLevel.minor
    upstream: str = 'origin'
    trunk_branch: str = 'master'
    manifest_path: str = 'package.json'
    bump_command: list[str] = field(default_factory=lambda: list(DEFAULT_BUMP_COMMAND))
    repo_root: Path | None = None


@dataclass(frozen=True)
class TagReleaseInput:
    """Inputs for `tag`; see `CutReleaseInput`."""

    upstream: str = 'origin'
    manifest_path: str = 'package.json'
    bump_command: list[str] = field(default_factory=lambda: list(DEFAULT_BUMP_COMMAND))
    repo_root: Path | None = None


@dataclass(frozen=True)
class WorkflowResult:
    """Terminal state of a workflow run.

    Attributes:
        state: `DONE` or `ABORTED`.
        message: One-line status for the operator.
        plan: The planned release.
        pushed: Refspecs that were pushed, in order.
        synced: For `tag`, whether the post-publish rebase-pull succeeded.
    """

    state: WorkflowState
    message: str
    plan: VersionPlan
    pushed: tuple[str, ...] = ()
    synced: bool | None = None

    @property
    def aborted(self) -> bool:
        return self.state is WorkflowState.aborted


def _enter(reporter: Reporter, state: WorkflowState) -> None:
    reporter.debug(f'-> {state}')


def _ensure_bumped(
    repo: Repo,
    *,
    level: BumpLevel,
    command: list[str],
    release_plan: VersionPlan,
    previous_head: str,
    root: Path,
    manifest_path: str,
) -> None:
    """Check that the bump tool committed the planned version and tagged that commit."""
    cmd = build_bump_command(command, level)
    tag_name = release_plan.tag_name
    if not tag_exists(repo, tag_name):
        raise BumpToolError(cmd, reason=f'expected tag {tag_name} was not created')
    head = head_commit(repo)
    if head == previous_head:
        raise BumpToolError(cmd, reason='no version bump commit was created')
    if tag_commit(repo, tag_name) != head:
        raise BumpToolError(cmd, reason=f'tag {tag_name} does not point at the version bump commit')
    bumped_version = read_manifest_version(root, manifest_path)
    if parse_version(bumped_version) != parse_version(release_plan.version):
        raise BumpToolError(
            cmd,
            reason=f'manifest reads {bumped_version}, expected {release_plan.version}',
        )


def cut_release_branch(
    args: CutReleaseInput,
    *,
    reporter: Reporter,
    store: CredentialStore | None = None,
) -> WorkflowResult:
    """Cut `release-vX.Y` from the upstream trunk.

    Clones the upstream, bumps the version on trunk inside the clone, shows
    the commits since the last tag, and on approval pushes trunk, the new
    release branch and the new tag.
    """
    _enter(reporter, WorkflowState.start)
    repo_context = open_repo(args.repo_root)
    remote_url = get_remote_url(repo_context.repo, args.upstream)

    _enter(reporter, WorkflowState.resolving_credentials)
    credentials = resolve_credentials(remote_url, store or GitCredentialStore())

    _enter(reporter, WorkflowState.staging)
    with staging_clone(remote_url, credentials=credentials, reporter=reporter) as workspace:
        try:
            checkout(workspace.repo, args.trunk_branch)
        except GitCommandError as exc:
            raise CloneError(remote_url, reason=git_error_reason(exc)) from exc

        _enter(reporter, WorkflowState.planning)
        level = BumpLevel(args.level)
        current_version = read_manifest_version(workspace.path, args.manifest_path)
        release_plan = plan(current_version, level)
        reporter.info(f'Cutting branch {release_plan.release_branch_name}')
        previous_head = head_commit(workspace.repo)
        run_bump_tool(level=level, cwd=workspace.path, command=args.bump_command)
        _ensure_bumped(
            workspace.repo,
            level=level,
            command=args.bump_command,
            release_plan=release_plan,
            previous_head=previous_head,
            root=workspace.path,
            manifest_path=args.manifest_path,
        )

        _enter(reporter, WorkflowState.reviewing)
        decision = review_commits(
            workspace.repo,
            from_version=current_version,
            to_ref=args.trunk_branch,
            reporter=reporter,
        )
        if not decision.is_approved:
            _enter(reporter, WorkflowState.aborted)
            return WorkflowResult(
                state=WorkflowState.aborted,
                message=CUT_ABORTED_MESSAGE,
                plan=release_plan,
            )

        _enter(reporter, WorkflowState.publishing)
        reporter.info(f'Pushing branch {release_plan.release_branch_name} & tag {release_plan.tag_name}')
        pushed = publish(
            workspace.repo,
            cut_push_set(trunk=args.trunk_branch, plan=release_plan),
            remote_url=remote_url,
            credentials=credentials,
            reporter=reporter,
        )

    _enter(reporter, WorkflowState.done)
    return WorkflowResult(
        state=WorkflowState.done,
        message=DONE_MESSAGE,
        plan=release_plan,
        pushed=tuple(pushed),
    )


def tag_patch_release(
    args: TagReleaseInput,
    *,
    reporter: Reporter,
    store: CredentialStore | None = None,
) -> WorkflowResult:
    """Tag the next patch release on the current release-branch checkout.

    Shows the commits since the last tag, and on approval runs the bump tool
    in the working tree, pushes the release branch and the new tag, then
    rebase-pulls from the upstream.

    Raises:
        ReleaseBranchMismatchError: If the checkout is not on the planned release branch.
    """
    _enter(reporter, WorkflowState.start)
    repo_context = open_repo(args.repo_root)
    repo = repo_context.repo
    info = repo_context.info
    remote_url = get_remote_url(repo, args.upstream)

    _enter(reporter, WorkflowState.resolving_credentials)
    credentials = resolve_credentials(remote_url, store or GitCredentialStore())

    _enter(reporter, WorkflowState.planning)
    current_version = read_manifest_version(info.root, args.manifest_path)
    release_plan = plan(current_version, BumpLevel.patch)
    if info.active_branch != release_plan.release_branch_name:
        raise ReleaseBranchMismatchError(
            active_branch=info.active_branch,
            expected=release_plan.release_branch_name,
        )
    reporter.info(f'Tagging version {release_plan.version}')

    _enter(reporter, WorkflowState.reviewing)
    decision = review_commits(
        repo,
        from_version=current_version,
        to_ref='HEAD',
        reporter=reporter,
    )
    if not decision.is_approved:
        _enter(reporter, WorkflowState.aborted)
        return WorkflowResult(
            state=WorkflowState.aborted,
            message=TAG_ABORTED_MESSAGE,
            plan=release_plan,
        )

    previous_head = head_commit(repo)
    run_bump_tool(level=BumpLevel.patch, cwd=info.root, command=args.bump_command)
    _ensure_bumped(
        repo,
        level=BumpLevel.patch,
        command=args.bump_command,
        release_plan=release_plan,
        previous_head=previous_head,
        root=info.root,
        manifest_path=args.manifest_path,
    )

    _enter(reporter, WorkflowState.publishing)
    reporter.info(f'Pushing tagged version {release_plan.version}')
    pushed = publish(
        repo,
        tag_push_set(plan=release_plan),
        remote_url=remote_url,
        credentials=credentials,
        reporter=reporter,
    )
    synced = pull_rebase(
        repo,
        upstream=args.upstream,
        branch=release_plan.release_branch_name,
        reporter=reporter,
    )

    _enter(reporter, WorkflowState.done)
    return WorkflowResult(
        state=WorkflowState.done,
        message=DONE_MESSAGE,
        plan=release_plan,
        pushed=tuple(pushed),
        synced=synced,
    )
