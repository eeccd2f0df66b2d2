"""Version command - show tfinspect version."""

import click
from ... import __version__


@click.command()
def version():
    """Show tfinspect version."""
    click.echo(f"tfinspect version {__version__}")
