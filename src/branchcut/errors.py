from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


class BranchcutError(Exception):
    """Base error for branchcut."""


class InvalidVersionError(BranchcutError):
    """Raised when a version string is not a valid semantic version."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f'Invalid semantic version: {version!r}')


class ManifestNotFoundError(BranchcutError):
    """Raised when the version manifest does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f'Version manifest not found: {path}')


class ManifestOutsideRepoError(BranchcutError):
    """Raised when the manifest path points outside the repository being released."""

    def __init__(self, path: Path, *, repo_root: Path) -> None:
        self.path = path
        self.repo_root = repo_root
        super().__init__(f'Version manifest {path} is outside the repository at {repo_root}')


class ManifestVersionMissingError(BranchcutError):
    """Raised when the manifest has no readable version field."""

    def __init__(self, path: Path, *, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f'Could not read a version from {path}: {reason}')


class RemoteNotFoundError(BranchcutError):
    """Raised when the named git remote is not configured."""

    def __init__(self, remote_name: str) -> None:
        self.remote_name = remote_name
        super().__init__(f'Git remote {remote_name!r} is not configured.')


class CredentialStoreUnavailableError(BranchcutError):
    """Raised when an HTTPS remote is used but no git credential helper is configured."""

    def __init__(self, remote_url: str) -> None:
        self.remote_url = remote_url
        super().__init__(
            f'Using https remote {remote_url} but the git credential helper is not available! '
            'Configure `credential.helper` or switch the remote to ssh.',
        )


class ExternalCommandError(BranchcutError):
    """Raised when an external command exits non-zero."""

    def __init__(
        self,
        cmd: Sequence[str],
        *,
        returncode: int,
        stderr: str = '',
    ) -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        message = f'Command failed ({returncode}): {" ".join(self.cmd)}'
        if stderr.strip():
            message = f'{message}\n{stderr.strip()}'
        super().__init__(message)


class MissingCliError(BranchcutError):
    """Raised when a required executable is not on PATH."""

    def __init__(self, cli_name: str) -> None:
        self.cli_name = cli_name
        super().__init__(f'Required executable {cli_name!r} was not found on PATH.')


class BumpToolError(BranchcutError):
    """Raised when the version bump tool fails."""

    def __init__(self, cmd: Sequence[str], *, reason: str) -> None:
        self.cmd = list(cmd)
        self.reason = reason
        super().__init__(f'Version bump failed ({" ".join(self.cmd)}): {reason}')


class CloneError(BranchcutError):
    """Raised when the staging clone cannot be created."""

    def __init__(self, remote_url: str, *, reason: str) -> None:
        self.remote_url = remote_url
        self.reason = reason
        super().__init__(f'Failed to clone {remote_url}: {reason}')


class CommitLogError(BranchcutError):
    """Raised when the commit range for review cannot be read."""

    def __init__(self, revision_range: str, *, reason: str) -> None:
        self.revision_range = revision_range
        self.reason = reason
        super().__init__(f'Failed to read commit log {revision_range}: {reason}')


class PushError(BranchcutError):
    """Raised when a push is rejected before any ref was published."""

    def __init__(self, refspec: str, *, reason: str) -> None:
        self.refspec = refspec
        self.reason = reason
        super().__init__(f'Push of {refspec} failed: {reason}')


class PartialPublishError(BranchcutError):
    """Raised when some refs were pushed and a later one was rejected.

    Nothing is rolled back; the operator must push the remaining refs or
    remove the pushed ones by hand.
    """

    def __init__(
        self,
        *,
        pushed: Sequence[str],
        failed: str,
        remaining: Sequence[str],
        reason: str,
    ) -> None:
        self.pushed = list(pushed)
        self.failed = failed
        self.remaining = list(remaining)
        self.reason = reason
        lines = [
            f'Partial publish: push of {failed} failed: {reason}',
            'Already pushed (not rolled back):',
            *[f'  - {ref}' for ref in self.pushed],
            'Not pushed:',
            *[f'  - {ref}' for ref in [failed, *self.remaining]],
        ]
        super().__init__('\n'.join(lines))


class ReleaseBranchMismatchError(BranchcutError):
    """Raised when `tag` runs on a branch other than the planned release branch."""

    def __init__(self, *, active_branch: str | None, expected: str) -> None:
        self.active_branch = active_branch
        self.expected = expected
        super().__init__(
            f'Current branch {active_branch or "<detached>"!r} is not the release branch {expected!r}.',
        )
