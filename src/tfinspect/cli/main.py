"""Main CLI entry point for tfinspect."""

import click
from .commands.inspect import inspect
from .commands.report import report
from .commands.version import version as version_command
from .. import __version__
from ..utils.logging import get_logger

logger = get_logger("cli.main")


@click.group()
@click.version_option(version=__version__, prog_name="tfinspect", message="%(prog)s version %(version)s")
def cli():
    """tfinspect - Static inspection of Terraform modules."""
    pass


cli.add_command(inspect)
cli.add_command(report)
cli.add_command(version_command)
