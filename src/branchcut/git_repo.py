from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from branchcut.errors import BranchcutError, CommitLogError, RemoteNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence


class NotAGitRepositoryError(BranchcutError):
    """Raised when the working directory is not inside a git repository."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f'Not a git repository: {path}')


@dataclass(frozen=True)
class RepoInfo:
    """Facts about the repository the command runs in.

    Attributes:
        root: Working tree root.
        active_branch: Current branch name (None if detached).
    """

    root: Path
    active_branch: str | None


@dataclass(frozen=True)
class RepoContext:
    repo: Repo
    info: RepoInfo


@dataclass(frozen=True)
class CommitEntry:
    """One commit as shown in the review log."""

    date: str
    author_name: str
    subject: str


def _active_branch(repo: Repo) -> str | None:
    if repo.head.is_detached:
        return None
    return repo.active_branch.name


def open_repo(path: Path | None = None) -> RepoContext:
    """Open the repository containing `path` (default: the current directory).

    Raises:
        NotAGitRepositoryError: If no repository is found.
    """
    start = path or Path.cwd()
    try:
        repo = Repo(start, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise NotAGitRepositoryError(start) from exc
    root = Path(repo.working_tree_dir or start)
    return RepoContext(
        repo=repo,
        info=RepoInfo(root=root, active_branch=_active_branch(repo)),
    )


def get_remote_url(repo: Repo, remote_name: str) -> str:
    """Return the fetch URL of a named remote.

    Raises:
        RemoteNotFoundError: If the remote is not configured.
    """
    try:
        remote = repo.remote(remote_name)
    except ValueError as exc:
        raise RemoteNotFoundError(remote_name) from exc
    return next(iter(remote.urls))


def clone_repo(url: str, dest: Path, *, env: dict[str, str] | None = None) -> Repo:
    """Full clone of `url` into `dest`, with `env` added to git's environment.

    GitCommandError propagates so callers can wrap it with their own context.
    """
    return Repo.clone_from(url, str(dest), env=env or None)


def commit_log(repo: Repo, revision_range: str) -> list[CommitEntry]:
    """Return commits in `revision_range` in git's log order (newest first).

    Raises:
        CommitLogError: If git cannot resolve the range.
    """
    try:
        commits = list(repo.iter_commits(revision_range))
    except GitCommandError as exc:
        raise CommitLogError(revision_range, reason=git_error_reason(exc)) from exc
    return [
        CommitEntry(
            date=commit.committed_datetime.isoformat(),
            author_name=commit.author.name or '',
            subject=commit.summary if isinstance(commit.summary, str) else commit.summary.decode(),
        )
        for commit in commits
    ]


def push_refspec(repo: Repo, *, remote: str, refspec: str, env: dict[str, str] | None = None) -> None:
    """Push a single refspec to `remote` (a remote name or URL).

    GitCommandError propagates; the publisher decides how to report it.
    """
    repo.git.push(remote, refspec, env=env or None)


def pull(repo: Repo, *, remote: str, branch: str | None, rebase: bool = True) -> None:
    """`git pull [--rebase] <remote> [<branch>]` on the repository's working tree."""
    args: Sequence[str] = [remote, branch] if branch else [remote]
    if rebase:
        args = ['--rebase', *args]
    repo.git.pull(*args)


def git_error_reason(exc: GitCommandError) -> str:
    """Return git's own error text for an operator-facing message."""
    stderr = exc.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode(errors='replace')
    text = (stderr or '').strip()
    # GitPython prefixes captured stderr with "stderr: '...'".
    if text.startswith("stderr: '") and text.endswith("'"):
        text = text[len("stderr: '") : -1].strip()
    return text or str(exc)


def checkout(repo: Repo, branch: str) -> None:
    """Check out `branch`, creating it from the matching remote-tracking branch if needed."""
    repo.git.checkout(branch)


def tag_exists(repo: Repo, tag_name: str) -> bool:
    return any(tag.name == tag_name for tag in repo.tags)


def head_commit(repo: Repo) -> str:
    return repo.head.commit.hexsha


def tag_commit(repo: Repo, tag_name: str) -> str | None:
    """The commit a tag points at (peeling annotated tags), or None if it doesn't exist."""
    for tag in repo.tags:
        if tag.name == tag_name:
            return tag.commit.hexsha
    return None
