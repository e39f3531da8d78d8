from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from semver import VersionInfo

from branchcut.errors import InvalidVersionError


class BumpLevel(StrEnum):
    """Which semantic-version field to increment."""

    major = 'major'
    minor = 'minor'
    patch = 'patch'


class CutLevel(StrEnum):
    """Bump levels accepted by `cut`; patches are released with `tag`."""

    major = 'major'
    minor = 'minor'


@dataclass(frozen=True)
class VersionPlan:
    """Names derived from the next release version.

    Attributes:
        version: The next version (`x.y.z`).
        minor_ver: The `major.minor` line of the next version.
        release_branch_name: The release branch for that line (`release-vX.Y`).
    """

    version: str
    minor_ver: str
    release_branch_name: str

    @property
    def tag_name(self) -> str:
        """The tag the bump tool creates for this version."""
        return f'v{self.version}'


def parse_version(version: str) -> VersionInfo:
    """Parse a manifest version, tolerating a leading `v`.

    Raises:
        InvalidVersionError: If the string is not a semantic version.
    """
    normalized = version.strip().removeprefix('v')
    try:
        return VersionInfo.parse(normalized)
    except (TypeError, ValueError) as exc:
        raise InvalidVersionError(version) from exc


def _increment(current: VersionInfo, level: BumpLevel) -> VersionInfo:
    # A prerelease of the target version is released by dropping the
    # prerelease, the same way the bump tool increments it.
    if current.prerelease:
        if level == BumpLevel.patch:
            return current.finalize_version()
        if level == BumpLevel.minor and current.patch == 0:
            return current.finalize_version()
        if level == BumpLevel.major and current.minor == 0 and current.patch == 0:
            return current.finalize_version()

    if level == BumpLevel.major:
        return current.bump_major()
    if level == BumpLevel.minor:
        return current.bump_minor()
    return current.bump_patch()


def plan(current_version: str, level: BumpLevel) -> VersionPlan:
    """Compute the next version and the release names derived from it.

    Args:
        current_version: The version currently committed in the manifest.
        level: Which field to increment.

    Returns:
        The plan for the next release. `minor_ver` and the branch name are
        derived from the resulting version, not the input.

    Raises:
        InvalidVersionError: If `current_version` is not a semantic version.
    """
    next_version = _increment(parse_version(current_version), BumpLevel(level))
    minor_ver = f'{next_version.major}.{next_version.minor}'
    return VersionPlan(
        version=str(next_version),
        minor_ver=minor_ver,
        release_branch_name=f'release-v{minor_ver}',
    )
