"""Operator-facing output.

A `Reporter` is created by the CLI and passed to the workflows explicitly.
Diagnostics go to stderr; the commit log and final status go to stdout.
"""

from __future__ import annotations

import typer


class Reporter:
    """Styled terminal output built on `typer.secho`."""

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose

    def echo(self, message: str) -> None:
        """Print plain text to stdout."""
        typer.echo(message)

    def info(self, message: str) -> None:
        typer.secho(message, err=True, fg=typer.colors.CYAN)

    def success(self, message: str) -> None:
        typer.secho(message, fg=typer.colors.GREEN)

    def warning(self, message: str) -> None:
        typer.secho(message, err=True, fg=typer.colors.YELLOW)

    def error(self, message: str) -> None:
        typer.secho(message, err=True, fg=typer.colors.RED)

    def debug(self, message: str) -> None:
        """Print a dimmed message, only in verbose mode."""
        if self.verbose:
            typer.secho(message, err=True, dim=True)
