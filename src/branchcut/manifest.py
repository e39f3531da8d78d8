from __future__ import annotations

import json
import tomllib
from typing import TYPE_CHECKING

from branchcut.errors import ManifestNotFoundError, ManifestOutsideRepoError, ManifestVersionMissingError

if TYPE_CHECKING:
    from pathlib import Path


def resolve_manifest_path(manifest_path: str, repo_root: Path) -> Path:
    """Resolve the manifest path relative to the repo root.

    An absolute path must still lie inside `repo_root`, so the version is never
    read from a different checkout than the one being bumped.

    Args:
        manifest_path: Path to the manifest file (absolute or relative).
        repo_root: Root directory of the git repository.

    Returns:
        The resolved absolute path to the manifest.

    Raises:
        ManifestOutsideRepoError: If the path resolves outside `repo_root`.
        ManifestNotFoundError: If the manifest file doesn't exist.
    """
    manifest = repo_root / manifest_path
    if not manifest.resolve().is_relative_to(repo_root.resolve()):
        raise ManifestOutsideRepoError(manifest, repo_root=repo_root)
    if not manifest.is_file():
        raise ManifestNotFoundError(manifest)
    return manifest


def _pyproject_version(data: dict[str, object]) -> object:
    project = data.get('project')
    if isinstance(project, dict) and 'version' in project:
        return project['version']
    tool = data.get('tool')
    if isinstance(tool, dict):
        poetry = tool.get('poetry')
        if isinstance(poetry, dict):
            return poetry.get('version')
    return None


def _load(manifest: Path) -> dict[str, object]:
    text = manifest.read_text(encoding='utf-8')
    try:
        if manifest.suffix == '.toml':
            return tomllib.loads(text)
        data = json.loads(text)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ManifestVersionMissingError(manifest, reason=f'unparseable file ({exc})') from exc
    if not isinstance(data, dict):
        raise ManifestVersionMissingError(manifest, reason='top level is not an object')
    return data


def read_manifest_version(repo_root: Path, manifest_path: str = 'package.json') -> str:
    """Read the committed version string from the project manifest.

    `package.json` and other JSON manifests use the top-level `version` key;
    `pyproject.toml` uses `[project].version`, falling back to
    `[tool.poetry].version`.

    Raises:
        ManifestNotFoundError: If the manifest does not exist.
        ManifestVersionMissingError: If no version field can be read.
    """
    manifest = resolve_manifest_path(manifest_path, repo_root)
    data = _load(manifest)
    version = _pyproject_version(data) if manifest.suffix == '.toml' else data.get('version')
    if not isinstance(version, str) or not version.strip():
        raise ManifestVersionMissingError(manifest, reason='no version field')
    return version.strip()
