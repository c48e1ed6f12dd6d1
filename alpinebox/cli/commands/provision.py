# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""The provisioning hook run on every VM start and re-provision."""

from pathlib import Path

import click

from alpinebox import __version__
from alpinebox.cli import cli
from alpinebox.cli.helpers import handle_errors, print_banner
from alpinebox.guest_config import get_config
from alpinebox.provision.engine import ProvisionEngine
from alpinebox.utils.logging import configure_logging


@cli.command()
@click.option(
    "--no-reboot",
    is_flag=True,
    help="Leave a pending reboot for later instead of restarting now.",
)
@click.option("--debug", is_flag=True, help="Verbose output (also ALPINEBOX_DEBUG=1).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file, overriding the one given before the command.",
)
@click.pass_context
@handle_errors
def provision(ctx, no_reboot, debug, config_path):
    """Upgrade Alpine, set up Docker on first run and sync docker-compose."""
    if debug:
        configure_logging(debug=True)
    config = get_config(config_path or ctx.obj.get("config_path"))
    engine = ProvisionEngine.from_config(
        config, reboot_enabled=False if no_reboot else None
    )

    print_banner(
        "Alpine Linux Provisioning Script",
        [f"Version {__version__}"],
    )
    report = engine.run()

    print_banner(
        "PROVISIONING COMPLETED",
        [
            f"Alpine Linux Version: {report.final_version}",
            f"Provisioning Script: v{__version__}",
            "Status: SUCCESS ✓",
        ],
        style="green",
    )
