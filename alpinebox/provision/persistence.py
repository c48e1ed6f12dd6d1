# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Commit filesystem changes on diskless (lbu) Alpine roots."""

from alpinebox.errors import PersistenceCommitWarning
from alpinebox.utils.logging import get_logger
from alpinebox.utils.process import CommandRunner

logger = get_logger(__name__)


class PersistenceCommitter:
    """Runs ``lbu commit`` when the root is managed by lbu."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def commit_if_supported(self) -> bool:
        """Commit changes if lbu is installed.

        Never raises: a failed commit is reported as a warning, since
        standard persistent roots need no commit at all.

        Returns:
            True if a commit ran and succeeded
        """
        if not self.runner.which("lbu"):
            logger.info("lbu not found, skipping lbu commit (likely not a diskless setup).")
            return False

        logger.info("Committing changes with lbu...")
        result = self.runner.run(["lbu", "commit"])
        if result.ok:
            logger.success("lbu commit successful.")
            return True

        warning = PersistenceCommitWarning(
            f"lbu commit failed: {result.describe()}",
            hint="Check LBU_MEDIA in /etc/lbu/lbu.conf if the reboot loses changes",
        )
        logger.warning(f"{warning}. Ensure changes are persistent.")
        logger.info(warning.hint)
        return False
