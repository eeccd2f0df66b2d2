"""Report command - write markdown and JSON artifacts for a module."""

import sys
from pathlib import Path
import click
from ...report import generate_artifacts, generate_markdown
from ...utils.errors import TfInspectError
from ...utils.logging import get_logger
from ..utils import format_error, load_cli_config, resolve_module_dir, run_inspection

logger = get_logger("cli.report")


@click.command()
@click.argument('module_dir', type=click.Path(exists=False), default=".")
@click.option('--output', '-o', 'output_dir', required=True, type=click.Path(),
              help='Output directory for the report and artifacts')
@click.option('--strict', is_flag=True, help='Fail on the first unreadable or unparsable file')
@click.option('--config', 'config_path', type=click.Path(), help='Additional config file, applied last')
def report(module_dir, output_dir, strict, config_path):
    """Write report.md, module.json, summary.json and diagnostics.json for a module."""
    try:
        try:
            module_path = resolve_module_dir(module_dir)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(1)

        config = load_cli_config(config_path)
        module = run_inspection(str(module_path), config, strict=strict)

        target = Path(output_dir)
        generate_markdown(module, target / "report.md")
        generate_artifacts(module, target)

        click.echo(f"Generated report in: {target}", err=True)

    except TfInspectError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Failed to generate report: {e}"), err=True)
        sys.exit(1)
