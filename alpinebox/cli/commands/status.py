# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Read-only commands: provisioning status and available updates."""

import click
from rich.table import Table

from alpinebox.cli import cli
from alpinebox.cli.helpers import handle_errors
from alpinebox.errors import NetworkError, ParseError
from alpinebox.guest_config import get_config
from alpinebox.provision.engine import ProvisionEngine
from alpinebox.provision.version import UNKNOWN_VERSION, same_major_minor
from alpinebox.utils.logging import console


@cli.command()
@click.pass_context
@handle_errors
def status(ctx):
    """Show release, provisioning history and pending reboot."""
    config = get_config(ctx.obj.get("config_path"))
    engine = ProvisionEngine.from_config(config)

    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Alpine release", engine.inspector.current_version())
    table.add_row("Provisioned", "no" if engine.state.is_first_run() else "yes")
    table.add_row("Initial setup", engine.state.last_setup() or "-")
    table.add_row("Runs recorded", str(len(engine.state.run_entries())))
    table.add_row("Reboot pending", "yes" if engine.reboot.is_pending() else "no")
    table.add_row("Interrupted switch", "yes" if engine.switcher.has_backup() else "no")
    table.add_row("Repositories", "\n".join(engine.switcher.read()) or "-")
    console.print(table)


@cli.command()
@click.pass_context
@handle_errors
def check(ctx):
    """Report available Alpine and docker-compose updates without applying them."""
    config = get_config(ctx.obj.get("config_path"))
    engine = ProvisionEngine.from_config(config)

    current = engine.inspector.current_version()
    latest = engine.inspector.latest_version()

    table = Table(title="Available updates")
    table.add_column("Component")
    table.add_column("Installed")
    table.add_column("Latest")
    table.add_column("Action")

    if latest is None:
        action = "[yellow]unknown[/yellow]"
    elif current == UNKNOWN_VERSION:
        action = "[yellow]skip (release unknown)[/yellow]"
    elif same_major_minor(current, latest):
        action = "[green]current[/green]"
    else:
        action = f"[cyan]upgrade to v{latest.major_minor}[/cyan]"
    table.add_row("Alpine Linux", current, str(latest) if latest else "-", action)

    if engine.compose_sync is not None:
        installed = engine.compose_sync.fetch_installed_version()
        try:
            tag = engine.compose_sync.fetch_latest_tag()
        except (NetworkError, ParseError):
            tag = None
        if tag is None:
            action = "[yellow]unknown[/yellow]"
        elif installed is None:
            action = "[cyan]install[/cyan]"
        elif f"v{installed}" == tag or str(installed) == tag:
            action = "[green]current[/green]"
        else:
            action = "[cyan]update[/cyan]"
        table.add_row(
            "Docker Compose",
            f"v{installed}" if installed else "-",
            tag or "-",
            action,
        )

    console.print(table)
