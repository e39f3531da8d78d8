from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, cast

import typer

from branchcut import __version__
from branchcut.errors import BranchcutError
from branchcut.output import Reporter
from branchcut.planner import CutLevel
from branchcut.settings import BranchcutSettings
from branchcut.workflow import (
    CutReleaseInput,
    TagReleaseInput,
    WorkflowResult,
    cut_release_branch,
    tag_patch_release,
)

FAILURE_EXIT_CODE = 1
# 2 is taken by click for usage errors.
ABORTED_EXIT_CODE = 3

app = typer.Typer(
    help='Cut release branches and tag patch releases.',
    no_args_is_help=True,
)


@dataclass(frozen=True)
class _CliState:
    settings: BranchcutSettings
    reporter: Reporter


def _version_callback(value: bool) -> None:  # noqa: FBT001
    if value:
        typer.echo(f'branchcut {__version__}')
        raise typer.Exit


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    verbose: Annotated[
        bool,
        typer.Option(
            '--verbose',
            '-v',
            help='Show workflow states and git commands.',
        ),
    ] = False,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option(
            '--version',
            help='Show the version and exit.',
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    settings = BranchcutSettings()
    ctx.obj = _CliState(settings=settings, reporter=Reporter(verbose=verbose))

    default_map: dict[str, object] = {
        'cut': {
            'upstream': settings.upstream,
            'trunk': settings.trunk_branch,
            'manifest': settings.manifest_path,
        },
        'tag': {
            'upstream': settings.upstream,
            'manifest': settings.manifest_path,
        },
    }

    if ctx.default_map is None:
        ctx.default_map = default_map
    else:
        ctx.default_map = {
            **ctx.default_map,
            **default_map,
        }


def _finish(result: WorkflowResult, reporter: Reporter) -> None:
    if result.aborted:
        reporter.warning(result.message)
        raise typer.Exit(code=ABORTED_EXIT_CODE)
    reporter.success(result.message)


@app.command('cut')
def cut(
    ctx: typer.Context,
    level: Annotated[
        CutLevel,
        typer.Argument(
            help='Level of the release.',
            case_sensitive=False,
        ),
    ] = CutLevel.minor,
    *,
    upstream: Annotated[
        str,
        typer.Option(
            '--upstream',
            help='Upstream remote name.',
            show_default=True,
        ),
    ] = 'origin',
    trunk: Annotated[
        str,
        typer.Option(
            '--trunk',
            help='Branch the release is cut from.',
            show_default=True,
        ),
    ] = 'master',
    manifest: Annotated[
        str,
        typer.Option(
            '--manifest',
            help='Manifest file holding the project version.',
            show_default=True,
        ),
    ] = 'package.json',
) -> None:
    """Cut a release branch from the upstream's trunk.

    Bumps the version in a fresh clone of the upstream, shows the commits
    since the last release tag, and on approval pushes the trunk, a new
    `release-vX.Y` branch and the new `vX.Y.Z` tag.
    """
    state = cast('_CliState', ctx.obj)
    reporter = state.reporter
    try:
        result = cut_release_branch(
            CutReleaseInput(
                level=level,
                upstream=upstream,
                trunk_branch=trunk,
                manifest_path=manifest,
                bump_command=state.settings.hooks.bump_version,
            ),
            reporter=reporter,
        )
    except BranchcutError as exc:
        reporter.error(str(exc))
        raise typer.Exit(code=FAILURE_EXIT_CODE) from exc
    except Exception as exc:  # pragma: no cover
        reporter.error(f'Unexpected error: {exc}')
        raise typer.Exit(code=FAILURE_EXIT_CODE) from exc

    _finish(result, reporter)


@app.command('tag')
def tag(
    ctx: typer.Context,
    *,
    upstream: Annotated[
        str,
        typer.Option(
            '--upstream',
            help='Upstream remote name.',
            show_default=True,
        ),
    ] = 'origin',
    manifest: Annotated[
        str,
        typer.Option(
            '--manifest',
            help='Manifest file holding the project version.',
            show_default=True,
        ),
    ] = 'package.json',
) -> None:
    """Tag a patch release on the current release branch."""
    state = cast('_CliState', ctx.obj)
    reporter = state.reporter
    try:
        result = tag_patch_release(
            TagReleaseInput(
                upstream=upstream,
                manifest_path=manifest,
                bump_command=state.settings.hooks.bump_version,
            ),
            reporter=reporter,
        )
    except BranchcutError as exc:
        reporter.error(str(exc))
        raise typer.Exit(code=FAILURE_EXIT_CODE) from exc
    except Exception as exc:  # pragma: no cover
        reporter.error(f'Unexpected error: {exc}')
        raise typer.Exit(code=FAILURE_EXIT_CODE) from exc

    _finish(result, reporter)


def main() -> None:
    """Main entry point for the CLI."""
    app()
