"""Remote authentication policy.

SSH remotes authenticate through the local SSH agent at push time and never
touch stored credentials. HTTPS remotes need git's credential helper; if it is
not configured the command fails up front instead of attempting an anonymous
push that the remote would reject with a confusing error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from branchcut.errors import CredentialStoreUnavailableError, ExternalCommandError
from branchcut.process import run_checked


@dataclass(frozen=True)
class AgentAuth:
    """Defer authentication to the local SSH agent."""


@dataclass(frozen=True)
class UserPassword:
    """Username/password pair fetched from the credential store."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f'UserPassword(username={self.username!r}, password=***)'


@dataclass(frozen=True)
class NoCredentials:
    """No credentials are known for the remote; git runs without an auth layer."""


Credentials = AgentAuth | UserPassword | NoCredentials


class CredentialStore(Protocol):
    """A local store of HTTPS credentials."""

    def is_available(self, url: str) -> bool: ...

    def fetch(self, url: str) -> UserPassword | None: ...


_SSH_SCHEME_RE = re.compile(r'^(?:ssh|git\+ssh|ssh\+git|git)://', re.IGNORECASE)
# scp-like syntax: `[user@]host:path` (no scheme). A one-letter host is a drive letter.
_SCP_LIKE_RE = re.compile(r'^(?:[\w.~-]+@)?[\w.-]{2,}:(?!//)')
_HTTP_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)


def is_ssh_url(remote_url: str) -> bool:
    """Return True if the remote URL is served over SSH (or the git protocol)."""
    url = remote_url.strip()
    return bool(_SSH_SCHEME_RE.match(url) or _SCP_LIKE_RE.match(url))


def is_http_url(remote_url: str) -> bool:
    """Return True for `http://` and `https://` remotes."""
    return bool(_HTTP_SCHEME_RE.match(remote_url.strip()))


class GitCredentialStore:
    """Credential store backed by `git credential`."""

    def __init__(self, git_executable: str = 'git') -> None:
        self._git = git_executable

    def is_available(self, url: str) -> bool:
        """Return True if a credential helper is configured for the URL."""
        try:
            helper = run_checked(
                [self._git, 'config', '--get-urlmatch', 'credential.helper', url],
            )
        except ExternalCommandError:
            # `git config` exits 1 when the key is unset.
            return False
        return bool(helper.strip())

    def fetch(self, url: str) -> UserPassword | None:
        """Fetch stored credentials for the URL without prompting.

        Returns:
            The stored credentials, or None if the helper has none.
        """
        try:
            output = run_checked(
                [self._git, 'credential', 'fill'],
                input_text=f'url={url}\n\n',
                env={'GIT_TERMINAL_PROMPT': '0'},
            )
        except ExternalCommandError:
            return None

        fields: dict[str, str] = {}
        for line in output.splitlines():
            key, sep, value = line.partition('=')
            if sep:
                fields[key] = value
        username = fields.get('username')
        password = fields.get('password')
        if not username or not password:
            return None
        return UserPassword(username=username, password=password)


def resolve_credentials(remote_url: str, store: CredentialStore) -> Credentials:
    """Decide how to authenticate against a remote.

    Args:
        remote_url: URL of the upstream remote.
        store: The local credential store, only consulted for HTTPS remotes.

    Returns:
        `AgentAuth` for SSH remotes, the stored `UserPassword` for HTTPS
        remotes, or `NoCredentials` when nothing is stored (or the remote is a
        local path that needs no auth).

    Raises:
        CredentialStoreUnavailableError: HTTPS remote without a credential helper.
    """
    if is_ssh_url(remote_url):
        return AgentAuth()
    if not is_http_url(remote_url):
        return NoCredentials()
    if not store.is_available(remote_url):
        raise CredentialStoreUnavailableError(remote_url)
    stored = store.fetch(remote_url)
    if stored is None:
        return NoCredentials()
    return stored


# Reads the pair from the environment so it never shows up in an argv or a URL.
_ENV_HELPER = (
    '!f() { test "$1" = get && '
    'printf "username=%s\\npassword=%s\\n" "$BRANCHCUT_GIT_USERNAME" "$BRANCHCUT_GIT_PASSWORD"; }; f'
)


def git_auth_env(credentials: Credentials) -> dict[str, str]:
    """Environment for a single clone or push authenticating with `credentials`.

    Only `UserPassword` needs anything: git is given a one-off credential
    helper (via `GIT_CONFIG_*`, git 2.31+) that answers from environment
    variables, after an empty helper entry that clears the configured ones.
    """
    if not isinstance(credentials, UserPassword):
        return {}
    return {
        'GIT_TERMINAL_PROMPT': '0',
        'GIT_CONFIG_COUNT': '2',
        'GIT_CONFIG_KEY_0': 'credential.helper',
        'GIT_CONFIG_VALUE_0': '',
        'GIT_CONFIG_KEY_1': 'credential.helper',
        'GIT_CONFIG_VALUE_1': _ENV_HELPER,
        'BRANCHCUT_GIT_USERNAME': credentials.username,
        'BRANCHCUT_GIT_PASSWORD': credentials.password,
    }
