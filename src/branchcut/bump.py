from __future__ import annotations

from typing import TYPE_CHECKING

from branchcut.errors import BumpToolError, ExternalCommandError, MissingCliError
from branchcut.process import run_checked

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from branchcut.planner import BumpLevel

DEFAULT_BUMP_COMMAND = ['npm', 'version', '{level}', '-m', 'Release v%s']


def build_bump_command(command: Sequence[str], level: BumpLevel) -> list[str]:
    """Substitute the `{level}` placeholder in the bump command argv."""
    return [arg.replace('{level}', str(level)) for arg in command]


def run_bump_tool(
    *,
    level: BumpLevel,
    cwd: Path,
    command: Sequence[str] | None = None,
) -> None:
    """Run the external bump tool.

    The tool rewrites the manifest version, commits it and creates the
    matching `v<version>` tag in one call.

    Raises:
        BumpToolError: If the tool is missing or fails.
    """
    cmd = build_bump_command(command or DEFAULT_BUMP_COMMAND, level)
    try:
        run_checked(cmd, cwd=cwd)
    except ExternalCommandError as exc:
        raise BumpToolError(cmd, reason=exc.stderr.strip() or f'exit status {exc.returncode}') from exc
    except MissingCliError as exc:
        raise BumpToolError(cmd, reason=str(exc)) from exc
