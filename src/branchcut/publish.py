"""Publishing release refs to the upstream remote.

git offers no multi-ref transaction across branches and tags, so refs are
pushed one at a time in order. Nothing is rolled back: a rejection after some
refs were accepted is reported as a partial publish naming what made it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from git import GitCommandError

from branchcut.credentials import git_auth_env
from branchcut.errors import PartialPublishError, PushError
from branchcut.git_repo import git_error_reason, pull, push_refspec

if TYPE_CHECKING:
    from collections.abc import Sequence

    from git import Repo

    from branchcut.credentials import Credentials
    from branchcut.output import Reporter
    from branchcut.planner import VersionPlan


@dataclass(frozen=True)
class RefSpec:
    """A `local:remote` ref pair to push."""

    local: str
    remote: str

    def __str__(self) -> str:
        return f'{self.local}:{self.remote}'


RefPushSet = tuple[RefSpec, ...]


def _branch(name: str) -> str:
    return f'refs/heads/{name}'


def _tag(name: str) -> str:
    return f'refs/tags/{name}'


def cut_push_set(*, trunk: str, plan: VersionPlan) -> RefPushSet:
    """Trunk, the new release branch cut from trunk, and the new tag."""
    return (
        RefSpec(_branch(trunk), _branch(trunk)),
        RefSpec(_branch(trunk), _branch(plan.release_branch_name)),
        RefSpec(_tag(plan.tag_name), _tag(plan.tag_name)),
    )


def tag_push_set(*, plan: VersionPlan) -> RefPushSet:
    """The updated release branch and the new tag."""
    return (
        RefSpec(_branch(plan.release_branch_name), _branch(plan.release_branch_name)),
        RefSpec(_tag(plan.tag_name), _tag(plan.tag_name)),
    )


def publish(
    repo: Repo,
    push_set: Sequence[RefSpec],
    *,
    remote_url: str,
    credentials: Credentials,
    reporter: Reporter,
) -> list[str]:
    """Push every refspec in order.

    Returns:
        The refspecs that were pushed.

    Raises:
        PushError: If the first push is rejected (nothing was published).
        PartialPublishError: If a later push is rejected.
    """
    env = git_auth_env(credentials)
    refspecs = [str(spec) for spec in push_set]
    pushed: list[str] = []
    for index, refspec in enumerate(refspecs):
        reporter.debug(f'Pushing {refspec} to {remote_url}')
        try:
            push_refspec(repo, remote=remote_url, refspec=refspec, env=env)
        except GitCommandError as exc:
            reason = git_error_reason(exc)
            if not pushed:
                raise PushError(refspec, reason=reason) from exc
            raise PartialPublishError(
                pushed=pushed,
                failed=refspec,
                remaining=refspecs[index + 1 :],
                reason=reason,
            ) from exc
        pushed.append(refspec)
    return pushed


def pull_rebase(
    repo: Repo,
    *,
    upstream: str,
    branch: str,
    reporter: Reporter,
) -> bool:
    """Rebase-pull the caller's branch after a publish.

    Failures are reported and swallowed; the push already happened.

    Returns:
        True if the pull succeeded.
    """
    try:
        pull(repo, remote=upstream, branch=branch, rebase=True)
    except GitCommandError as exc:
        reporter.warning(
            f'Pushed, but `git pull --rebase {upstream} {branch}` failed: {git_error_reason(exc)}',
        )
        return False
    return True
