"""Inspect command - extract a module directory and print its summary."""

import sys
from pathlib import Path
import click
from ...report import render_json, render_markdown
from ...utils.errors import TfInspectError
from ...utils.logging import get_logger
from ..utils import format_error, load_cli_config, resolve_module_dir, run_inspection

logger = get_logger("cli.inspect")


@click.command()
@click.argument('module_dir', type=click.Path(exists=False), default=".")
@click.option('--json', 'as_json', is_flag=True, help='Output structured JSON instead of markdown')
@click.option('--output', '-o', type=click.Path(), help='Save output to file')
@click.option('--strict', is_flag=True, help='Fail on the first unreadable or unparsable file')
@click.option('--config', 'config_path', type=click.Path(), help='Additional config file, applied last')
@click.option('--fail-on-error', is_flag=True, help='Exit with status 1 when the module has errors')
@click.option('--quiet', is_flag=True, help='Suppress progress messages')
def inspect(module_dir, as_json, output, strict, config_path, fail_on_error, quiet):
    """
    Extract a Terraform module directory and summarize it.

    Prints markdown by default. Problems found in the configuration are
    listed in the output; they only change the exit status when
    --fail-on-error is given.
    """
    try:
        try:
            module_path = resolve_module_dir(module_dir)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(1)

        config = load_cli_config(config_path, quiet=quiet)

        if not quiet:
            click.echo(f"Inspecting module: {module_path}", err=True)

        module = run_inspection(str(module_path), config, strict=strict)

        if not quiet:
            click.echo(
                f"Found {len(module.errors())} errors and {len(module.warnings())} warnings",
                err=True,
            )

        output_text = render_json(module) if as_json else render_markdown(module)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(output_text)
            if not quiet:
                click.echo(f"Output saved to: {output_path}", err=True)
        else:
            click.echo(output_text)

        if fail_on_error and module.has_errors():
            sys.exit(1)

    except TfInspectError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(format_error(f"Could not write output: {e}"), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Inspection failed: {e}"), err=True)
        sys.exit(1)
