"""Entry point for the kiosksync CLI.

``python -m kiosksync.interfaces.cli`` (or the ``kiosksync`` console script)
invokes this group.
"""

import logging

import click

from kiosksync.infrastructure.observability import configure_logging

from .sync import sync, watch


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Keep an auction kiosk's listing in sync."""
    configure_logging(level=logging.DEBUG if verbose else logging.INFO)


cli.add_command(sync)
cli.add_command(watch)


if __name__ == "__main__":
    cli()
