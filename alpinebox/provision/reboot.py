# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Deferred reboot after a major release upgrade."""

import time
from pathlib import Path
from typing import Callable

from alpinebox.utils.logging import get_logger
from alpinebox.utils.process import CommandRunner

logger = get_logger(__name__)


class RebootScheduler:
    """Marks a pending reboot and performs it as the last step of a run."""

    def __init__(
        self,
        flag_path: Path,
        runner: CommandRunner,
        grace_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.flag_path = Path(flag_path)
        self.runner = runner
        self.grace_seconds = grace_seconds
        self.sleep = sleep

    def schedule(self) -> None:
        self.flag_path.parent.mkdir(parents=True, exist_ok=True)
        self.flag_path.touch()
        logger.info("A reboot is required to complete the Alpine major version upgrade.")

    def is_pending(self) -> bool:
        return self.flag_path.exists()

    def consume_and_reboot(self) -> bool:
        """Reboot if a reboot was scheduled.

        The flag is removed before restarting so an interrupted restart
        cannot loop.

        Returns:
            True if a reboot was issued
        """
        if not self.flag_path.exists():
            return False

        logger.warning("Rebooting system to complete Alpine version upgrade...")
        self.flag_path.unlink()
        self.sleep(self.grace_seconds)

        result = self.runner.run(["reboot"])
        if not result.ok:
            logger.error(f"Reboot failed: {result.describe()}. Reboot manually to finish the upgrade.")
            return False
        return True
