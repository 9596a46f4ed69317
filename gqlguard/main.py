"""CLI entry point for gqlguard."""

from __future__ import annotations

import logging

import click
from dotenv import load_dotenv

from gqlguard.commands.analyze.cmd import cost, depth
from gqlguard.commands.check.cmd import check

load_dotenv()


@click.group()
@click.version_option(version="0.1.0", prog_name="gqlguard")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Static depth and cost limits for GraphQL operations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


cli.add_command(depth)
cli.add_command(cost)
cli.add_command(check)


if __name__ == "__main__":
    cli()
