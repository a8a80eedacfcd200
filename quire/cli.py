"""Command-line interface for Quire.

Commands:
- build: Set up a project and compile its pages into a destination folder.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from . import __version__
from .errors import ConfigurationError, QuireError, SetupError
from .render import BuildResult


@click.group()
@click.version_option(version=__version__, prog_name="quire")
def cli():
    """Quire static site assembler."""


@cli.command()
@click.argument(
    "input_dir", type=click.Path(file_okay=False, path_type=Path), default="."
)
@click.option(
    "--dest",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output folder (overrides output_dir in quire.yaml)",
)
@click.option("--engine", help="Templating engine (jinja or markdown)")
@click.option("--layout", "default_layout", help="Default layout name")
@click.option(
    "--builtins/--no-builtins", default=None, help="Inject builtin template helpers"
)
@click.option("--quiet", is_flag=True, default=None, help="Hide progress output")
def build(
    input_dir: Path,
    dest: Path | None,
    engine: str | None,
    default_layout: str | None,
    builtins: bool | None,
    quiet: bool | None,
):
    """Build the pages in INPUT_DIR into the output folder."""
    from .site import Site

    options = {
        "engine": engine,
        "default_layout": default_layout,
        "builtins": builtins,
        "quiet": quiet,
    }
    try:
        site = Site(input_dir, options)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from None

    output_dir = dest or Path(input_dir) / str(site.options["output_dir"])
    try:
        result = asyncio.run(_build(site, output_dir))
    except SetupError as exc:
        raise click.ClickException(f"Setup failed: {exc}") from None
    except QuireError as exc:
        raise click.ClickException(str(exc)) from None
    _report_errors(result)
    click.echo(f"Built {result.page_count} pages into {output_dir}")


async def _build(site, output_dir: Path) -> BuildResult:
    await site.setup()
    return await site.compile(output_dir)


def _report_errors(result: BuildResult) -> None:
    for error in result.errors:
        click.echo(click.style(f"  File: {error.source_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {error.message}", fg="white"), err=True)


def main():
    """Entry point for the CLI application."""
    cli()
