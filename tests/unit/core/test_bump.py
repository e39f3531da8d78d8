from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from branchcut.bump import build_bump_command, run_bump_tool
from branchcut.errors import BumpToolError, ExternalCommandError, MissingCliError
from branchcut.planner import BumpLevel

if TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


def test_build_bump_command_substitutes_level() -> None:
    assert build_bump_command(['npm', 'version', '{level}', '-m', 'Release v%s'], BumpLevel.minor) == [
        'npm',
        'version',
        'minor',
        '-m',
        'Release v%s',
    ]


def test_run_bump_tool_defaults_to_npm(mocker: MockerFixture, tmp_path: Path) -> None:
    run_checked = mocker.patch('branchcut.bump.run_checked')

    run_bump_tool(level=BumpLevel.patch, cwd=tmp_path)

    run_checked.assert_called_once_with(['npm', 'version', 'patch', '-m', 'Release v%s'], cwd=tmp_path)


def test_run_bump_tool_wraps_failures(mocker: MockerFixture, tmp_path: Path) -> None:
    mocker.patch(
        'branchcut.bump.run_checked',
        side_effect=ExternalCommandError(['npm'], returncode=1, stderr='Git working directory not clean.'),
    )

    with pytest.raises(BumpToolError, match='Git working directory not clean'):
        run_bump_tool(level=BumpLevel.minor, cwd=tmp_path)


def test_run_bump_tool_missing_executable(mocker: MockerFixture, tmp_path: Path) -> None:
    mocker.patch('branchcut.bump.run_checked', side_effect=MissingCliError('npm'))

    with pytest.raises(BumpToolError, match="'npm' was not found"):
        run_bump_tool(level=BumpLevel.minor, cwd=tmp_path, command=['npm', 'version', '{level}'])
