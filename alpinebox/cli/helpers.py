# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Shared helpers for the alpinebox CLI."""

import functools
import sys
from typing import Callable, Optional

from rich.markup import escape
from rich.panel import Panel

from alpinebox.errors import ProvisionError
from alpinebox.utils.logging import console, get_logger

logger = get_logger(__name__)

# Panel titles per error class, falling back to "Provisioning Error"
ERROR_TITLES = {
    "RepositoryWriteError": "Repository Error",
    "UpgradeExecutionError": "Upgrade Failed",
    "VerificationError": "Verification Failed",
    "LockError": "Already Running",
}


def show_error_panel(title: str, message: str, hint: Optional[str] = None) -> None:
    """Display a formatted error panel.

    Args:
        title: Panel title (shown in red)
        message: Main error message
        hint: Optional hint text (shown with blue "Hint:" prefix)
    """
    content = escape(message)
    if hint:
        content += f"\n\n[blue]Hint:[/blue] {escape(hint)}"
    console.print(Panel(content, title=f"[red]{title}[/red]", border_style="red"))


def handle_errors(func: Callable) -> Callable:
    """Decorator that wraps CLI commands with standard error handling.

    Every error is logged before exiting with code 1:
    - ProvisionError: panel titled after the error class, with its hint
    - ClickException: left to click
    - Other exceptions: generic error panel
    """
    import click

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SystemExit:
            raise
        except ProvisionError as exc:
            logger.error(f"{type(exc).__name__}: {exc}", console_output=False)
            title = ERROR_TITLES.get(type(exc).__name__, "Provisioning Error")
            show_error_panel(title, str(exc), exc.hint)
            sys.exit(1)
        except click.ClickException:
            raise
        except Exception as exc:
            logger.exception(f"Unexpected error: {exc}")
            show_error_panel("Error", str(exc))
            sys.exit(1)

    return wrapper


def print_banner(title: str, lines: Optional[list] = None, style: str = "cyan") -> None:
    """Print a bold boxed banner."""
    body = f"[bold]{title}[/bold]"
    if lines:
        body += "\n\n" + "\n".join(lines)
    console.print(Panel(body, border_style=f"bold {style}", expand=False))
