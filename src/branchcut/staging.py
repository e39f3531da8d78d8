"""Disposable clones for staging version-bump commits.

The bump tool rewrites the manifest and commits. Running it in a fresh clone
keeps the operator's working tree untouched and makes a retry start from a
clean state.
"""

from __future__ import annotations

import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from git import GitCommandError

from branchcut.credentials import Credentials, NoCredentials, git_auth_env
from branchcut.errors import CloneError
from branchcut.git_repo import clone_repo, git_error_reason

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from git import Repo

    from branchcut.output import Reporter

T = TypeVar('T')

STAGING_PREFIX = 'branchcut-'


@dataclass(frozen=True)
class StagingWorkspace:
    """A full clone living in a temporary directory.

    Attributes:
        path: Root of the clone.
        repo: Repository handle for the clone.
    """

    path: Path
    repo: Repo


def _remove_tree(path: Path, reporter: Reporter | None) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        # Never raised: it would replace whatever error is propagating.
        if reporter is not None:
            reporter.warning(f'Failed to remove staging clone {path}: {exc}')


@contextmanager
def staging_clone(
    remote_url: str,
    *,
    credentials: Credentials | None = None,
    reporter: Reporter | None = None,
) -> Iterator[StagingWorkspace]:
    """Clone `remote_url` into a fresh temporary directory.

    The directory is removed when the block exits, whether it returns, raises
    or is interrupted.

    Raises:
        CloneError: If the clone fails (unreachable remote, auth rejected).
    """
    creds = credentials or NoCredentials()
    path = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX))
    try:
        if reporter is not None:
            reporter.debug(f'Cloning {remote_url} into {path}')
        try:
            repo = clone_repo(remote_url, path, env=git_auth_env(creds))
        except GitCommandError as exc:
            raise CloneError(remote_url, reason=git_error_reason(exc)) from exc
        yield StagingWorkspace(path=path, repo=repo)
    finally:
        _remove_tree(path, reporter)


def with_staging_clone(
    remote_url: str,
    body: Callable[[StagingWorkspace], T],
    *,
    credentials: Credentials | None = None,
    reporter: Reporter | None = None,
) -> T:
    """Run `body` against a staging clone and return its result."""
    with staging_clone(remote_url, credentials=credentials, reporter=reporter) as workspace:
        return body(workspace)
