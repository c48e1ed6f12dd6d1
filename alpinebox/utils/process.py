# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Subprocess wrapper used by every component that shells out.

All commands run with an explicit timeout. Missing executables and
timeouts are reported through CommandResult instead of raising, so each
caller maps them onto its own error type.
"""

import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from alpinebox.utils.logging import get_logger

logger = get_logger(__name__)

# Return code used when the executable is not on PATH (matches the shell)
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Outcome of a finished (or abandoned) command."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def describe(self) -> str:
        """Short human-readable failure reason for log lines."""
        if self.timed_out:
            return f"'{' '.join(self.args)}' timed out"
        if self.returncode == COMMAND_NOT_FOUND:
            return f"'{self.args[0]}' not found"
        detail = (self.stderr or self.stdout).strip().splitlines()
        reason = detail[-1] if detail else "no output"
        return f"'{' '.join(self.args)}' exited {self.returncode}: {reason}"


class CommandRunner:
    """Runs external commands with a default timeout."""

    def __init__(self, timeout: float = 120.0):
        self.timeout = timeout

    def run(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        """Run a command and capture its output.

        Args:
            args: Command and arguments
            timeout: Seconds before the command is killed (default: runner timeout)

        Returns:
            CommandResult, never raises for command failures
        """
        args = list(args)
        limit = timeout if timeout is not None else self.timeout
        logger.debug(f"Running: {' '.join(args)} (timeout={limit}s)")
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=limit,
            )
        except FileNotFoundError:
            return CommandResult(args, COMMAND_NOT_FOUND, stderr=f"{args[0]}: not found")
        except subprocess.TimeoutExpired as e:
            stdout = e.stdout.decode() if isinstance(e.stdout, bytes) else (e.stdout or "")
            return CommandResult(args, -1, stdout=stdout, timed_out=True)

        return CommandResult(args, result.returncode, result.stdout, result.stderr)

    def which(self, name: str) -> Optional[str]:
        """Locate an executable on PATH."""
        return shutil.which(name)
