"""Console progress reporting for Quire builds.

ProgressReporter subscribes to a Site's lifecycle events and prints status
lines. Render errors are not printed here; they are written into the pages
themselves.
"""

from __future__ import annotations

import click

from .events import EventEmitter


class ProgressReporter:
    """Prints build progress for a Site.

    Attributes:
        site: The event emitter being reported on.
    """

    def __init__(self, site: EventEmitter):
        self.site = site
        site.on("refreshing", self.on_refreshing)
        site.on("parsing", self.on_parsing)
        site.on("building", self.on_building)
        site.on("built", self.on_built)
        site.on("error", self.on_error)

    def on_refreshing(self) -> None:
        click.echo("Setting the table...")

    def on_parsing(self) -> None:
        click.echo("Parsing pages...")

    def on_building(self) -> None:
        click.echo("Building pages...")

    def on_built(self, page_count: int, error_count: int) -> None:
        click.echo(click.style(built_message(page_count, error_count), fg="green"))

    def on_error(self, err: Exception) -> None:
        click.echo(
            click.style("There was an error while parsing pages.", fg="red", bold=True),
            err=True,
        )
        click.echo(f"  {err}", err=True)


def built_message(page_count: int, error_count: int) -> str:
    """Summarise a build pass.

    Examples:
        >>> built_message(3, 1)
        '3 pages built, but 1 had errors.'
    """
    plural = "" if page_count == 1 else "s"
    error_text = f", but {error_count} had errors." if error_count else "."
    return f"{page_count} page{plural} built{error_text}"
