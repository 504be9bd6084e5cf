#!/usr/bin/env python3
"""
FairPrice CLI - Main Entry Point

Usage:
    fairprice [OPTIONS] COMMAND [ARGS]...

Examples:
    fairprice value 005930
    fairprice checklist 005930 --json
    fairprice screen list
    fairprice screen run howard --limit 20
"""

import sys

import click

from fairprice import __version__

from .groups import checklist, screen, value
from .utils import load_config, setup_logging

CONTEXT_SETTINGS = dict(
    help_option_names=["-h", "--help"],
    max_content_width=120,
)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config", "-c",
    default="config.yaml",
    envvar="FAIRPRICE_CONFIG",
    help="Configuration file path"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    envvar="FAIRPRICE_LOG_LEVEL",
    help="Logging level"
)
@click.option(
    "--log-file",
    type=click.Path(),
    envvar="FAIRPRICE_LOG_FILE",
    help="Log file path"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (same as --log-level DEBUG)"
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress non-essential output"
)
@click.version_option(
    version=__version__,
    prog_name="fairprice"
)
@click.pass_context
def cli(ctx, config, log_level, log_file, verbose, quiet):
    """FairPrice - Korean stock fair-value engine

    \b
    COMMANDS:
      value      Fair-value range, outliers and price signal for one stock
      checklist  Investment checklist score and grade for one stock
      screen     Strategy screens (Graham, Lynch, S-RIM, quality, DCF, dividend)

    Run 'fairprice COMMAND --help' for more information on a command.
    """
    effective_level = "DEBUG" if verbose else log_level
    if quiet:
        effective_level = "WARNING"

    setup_logging(effective_level, log_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


cli.add_command(value)
cli.add_command(checklist)
cli.add_command(screen)


def main():
    """Main entry point for the CLI"""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        click.echo("\nInterrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
