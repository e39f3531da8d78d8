from __future__ import annotations

import os
import subprocess
from typing import TYPE_CHECKING

from branchcut.errors import ExternalCommandError, MissingCliError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path


def run_checked(
    cmd: Sequence[str],
    *,
    cwd: Path | None = None,
    capture_stdout: bool = True,
    input_text: str | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Run a command and fail loudly on a non-zero exit.

    Args:
        cmd: Command argv.
        cwd: Working directory for the command.
        capture_stdout: If false, stdout is inherited from the parent process.
        input_text: Text written to the command's stdin.
        env: Extra environment variables layered over the current environment.

    Returns:
        The captured stdout (empty when not captured).

    Raises:
        MissingCliError: If the executable is not found.
        ExternalCommandError: If the command exits non-zero.
    """
    merged_env = {**os.environ, **env} if env else None
    try:
        completed = subprocess.run(  # noqa: S603
            list(cmd),
            cwd=cwd,
            input=input_text,
            stdout=subprocess.PIPE if capture_stdout else None,
            stderr=subprocess.PIPE,
            text=True,
            env=merged_env,
            check=False,
        )
    except FileNotFoundError as exc:
        raise MissingCliError(cmd[0]) from exc

    if completed.returncode != 0:
        raise ExternalCommandError(
            cmd,
            returncode=completed.returncode,
            stderr=completed.stderr or '',
        )
    return completed.stdout or ''
