from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import typer

from branchcut.git_repo import CommitEntry, commit_log

if TYPE_CHECKING:
    from collections.abc import Sequence

    from git import Repo

    from branchcut.output import Reporter

REVIEW_PROMPT = 'Does the commit log look good?'


class ReviewDecision(StrEnum):
    approved = 'approved'
    rejected = 'rejected'

    @property
    def is_approved(self) -> bool:
        return self is ReviewDecision.approved


def review_range(from_version: str, to_ref: str) -> str:
    """The commit range between the last release tag and the candidate."""
    return f'v{from_version.removeprefix("v")}..{to_ref}'


def format_commit_log(revision_range: str, commits: Sequence[CommitEntry]) -> str:
    """Render the commit range as one block bounded by start/end markers."""
    return '\n'.join(
        [
            f'--- START COMMIT LOG {revision_range} ---',
            *[f'[{c.date}] ({c.author_name}) {c.subject}' for c in commits],
            f'--- END COMMIT LOG {revision_range} ---',
        ],
    )


def confirm_release(message: str = REVIEW_PROMPT) -> bool:
    """Ask a yes/no question that defaults to no.

    A closed or empty stdin counts as "no".
    """
    try:
        return typer.confirm(message, default=False)
    except typer.Abort:
        return False


def review_commits(
    repo: Repo,
    *,
    from_version: str,
    to_ref: str,
    reporter: Reporter,
) -> ReviewDecision:
    """Show the commits about to be released and ask the operator to approve them.

    An empty range is still shown and still prompted for, so the operator can
    notice a missing or misplaced tag.

    Args:
        repo: Repository to read the log from.
        from_version: The last released version (its `v` tag starts the range).
        to_ref: End of the range, a branch name or `HEAD`.
        reporter: Where the log block is printed.

    Returns:
        `approved` only on an explicit yes.
    """
    revision_range = review_range(from_version, to_ref)
    commits = commit_log(repo, revision_range)
    reporter.echo(format_commit_log(revision_range, commits))
    if confirm_release():
        return ReviewDecision.approved
    return ReviewDecision.rejected
