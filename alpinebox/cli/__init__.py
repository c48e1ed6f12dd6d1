# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""alpinebox CLI package."""

from pathlib import Path

import click

from alpinebox import __version__
from alpinebox.utils.logging import configure_logging, log_startup_info


@click.group()
@click.version_option(version=__version__, prog_name="alpinebox")
@click.option("--debug", is_flag=True, help="Verbose output (also ALPINEBOX_DEBUG=1).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: /etc/alpinebox/config.yml or $ALPINEBOX_CONFIG).",
)
@click.pass_context
def cli(ctx, debug, config_path):
    """alpinebox - Provision and upgrade an Alpine Linux container VM."""
    configure_logging(debug=debug)
    log_startup_info()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main():
    """Main entry point."""
    cli(obj={})


from alpinebox.cli.commands import provision  # noqa: E402,F401
from alpinebox.cli.commands import status  # noqa: E402,F401
