"""CLI entry point for prtidy.

Commands:
  minimize — hide older, fully resolved reviews on a pull request
  inspect  — show every review on a pull request and what would happen to it
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from prtidy_cli.commands.inspect import inspect_cmd
from prtidy_cli.commands.minimize import minimize_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("prtidy"),
    prog_name="prtidy",
)
@click.option(
    "--config",
    "config_path",
    default=".prtidy.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRTIDY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Minimize stale, fully resolved pull request reviews."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(minimize_cmd)
main.add_command(inspect_cmd)
