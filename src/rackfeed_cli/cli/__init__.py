import logging

import click
from rackfeed_cli.tools.tools import tools
from rackfeed_core.codebase.debug import configure_logging


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    configure_logging({0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG))


# add cli groups here

cli.add_command(tools)
