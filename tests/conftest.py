from __future__ import annotations

import json
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

import pytest
from git import Repo

# Allow `import branchcut` when running tests from the repo root without installing the package.
SRC_ROOT = Path(__file__).resolve().parents[1] / 'src'
sys.path.insert(0, str(SRC_ROOT))

FAKE_BUMP = Path(__file__).resolve().parent / 'fixtures' / 'fake_bump.py'


@dataclass(frozen=True)
class Sandbox:
    """A bare upstream and a working clone of it.

    Attributes:
        upstream: Path of the bare repository acting as the remote.
        work: Working clone with `origin` pointing at `upstream`.
        tmp: Directory used as the temp root for staging clones.
    """

    upstream: Path
    work: Path
    tmp: Path

    @property
    def upstream_repo(self) -> Repo:
        return Repo(self.upstream)

    @property
    def work_repo(self) -> Repo:
        return Repo(self.work)

    def staging_dirs(self) -> list[Path]:
        return sorted(self.tmp.glob('branchcut-*'))


@pytest.fixture(autouse=True)
def git_identity(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Give git a committer and keep the user's config out of the tests."""
    global_config = tmp_path / 'gitconfig'
    global_config.write_text('[user]\n\tname = Release Bot\n\temail = bot@example.com\n', encoding='utf-8')
    monkeypatch.setenv('GIT_CONFIG_GLOBAL', str(global_config))
    monkeypatch.setenv('GIT_CONFIG_NOSYSTEM', '1')
    for var in ('GIT_AUTHOR_NAME', 'GIT_COMMITTER_NAME'):
        monkeypatch.setenv(var, 'Release Bot')
    for var in ('GIT_AUTHOR_EMAIL', 'GIT_COMMITTER_EMAIL'):
        monkeypatch.setenv(var, 'bot@example.com')


def _write_manifest(root: Path, version: str) -> None:
    (root / 'package.json').write_text(
        json.dumps({'name': 'demo', 'version': version}, indent=2) + '\n',
        encoding='utf-8',
    )


def _commit(repo: Repo, message: str) -> None:
    repo.git.add(A=True)
    repo.git.commit('-q', '--allow-empty', '-m', message)


@pytest.fixture
def make_sandbox(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):  # noqa: ANN201
    """Factory building an upstream whose trunk is released at `version`.

    After the release commit and its `v<version>` tag, `extra_commits` more
    commits land on trunk. With `release_branch`, the release commit is also
    on that branch and the working clone checks it out (extra commits then go
    to the release branch instead).
    """

    def _make(
        version: str = '1.4.2',
        *,
        extra_commits: tuple[str, ...] = ('Add widget', 'Fix widget'),
        release_branch: str | None = None,
    ) -> Sandbox:
        staging_tmp = tmp_path / 'tmp'
        staging_tmp.mkdir()
        monkeypatch.setattr(tempfile, 'tempdir', str(staging_tmp))

        seed_path = tmp_path / 'seed'
        seed = Repo.init(seed_path, initial_branch='master')
        _write_manifest(seed_path, version)
        _commit(seed, f'Release v{version}')
        seed.create_tag(f'v{version}')
        if release_branch is not None:
            seed.git.checkout('-q', '-b', release_branch)
        for message in extra_commits:
            _commit(seed, message)

        upstream_path = tmp_path / 'upstream.git'
        Repo.init(upstream_path, bare=True, initial_branch='master')
        seed.create_remote('origin', str(upstream_path))
        seed.git.push('origin', '--all')
        seed.git.push('origin', '--tags')

        work_path = tmp_path / 'work'
        work = Repo.clone_from(str(upstream_path), str(work_path))
        if release_branch is not None:
            work.git.checkout('-q', release_branch)

        return Sandbox(upstream=upstream_path, work=work_path, tmp=staging_tmp)

    return _make


@pytest.fixture
def fake_bump_command() -> list[str]:
    return [sys.executable, str(FAKE_BUMP), '{level}']
