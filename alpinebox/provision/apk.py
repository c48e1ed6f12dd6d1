# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""apk package index refresh, upgrades and installs."""

from typing import Callable, Sequence

from alpinebox.errors import NetworkError, UpgradeExecutionError
from alpinebox.utils.logging import get_logger
from alpinebox.utils.process import CommandRunner

logger = get_logger(__name__)


class UpgradeExecutor:
    """Drives apk for both the major-upgrade and the routine path."""

    def __init__(self, runner: CommandRunner, upgrade_timeout: float = 1800.0):
        self.runner = runner
        self.upgrade_timeout = upgrade_timeout

    def refresh_index(self) -> None:
        """Run ``apk update``.

        Raises:
            NetworkError: If the index cannot be fetched
        """
        result = self.runner.run(["apk", "update"])
        if not result.ok:
            raise NetworkError(f"Failed to refresh package index: {result.describe()}")

    def upgrade_all(self) -> None:
        """Run ``apk upgrade``.

        Raises:
            UpgradeExecutionError: If apk fails or times out
        """
        result = self.runner.run(["apk", "upgrade"], timeout=self.upgrade_timeout)
        if not result.ok:
            raise UpgradeExecutionError(f"Package upgrade failed: {result.describe()}")

    def upgradable_count(self) -> int:
        """Number of installed packages with a newer version in the index."""
        result = self.runner.run(["apk", "list", "--upgradable"])
        if not result.ok:
            logger.warning(f"Could not list upgradable packages: {result.describe()}")
            return 0
        # Package lines look like "name-1.2.3-r0 x86_64 {origin} (license) [upgradable from: ...]"
        return sum(1 for line in result.stdout.splitlines() if "upgradable from" in line)

    def routine_upgrade(self, current_version: Callable[[], str]) -> bool:
        """Refresh and upgrade packages for the current release branch.

        Args:
            current_version: Reads the release string, called before and after

        Returns:
            True if any packages were upgraded

        Raises:
            UpgradeExecutionError: If the upgrade itself fails
        """
        logger.info("Updating system packages...")
        try:
            self.refresh_index()
        except NetworkError as e:
            logger.warning(f"{e}. Skipping routine upgrade.")
            return False

        count = self.upgradable_count()
        if count == 0:
            logger.success("System is already up to date")
            return False

        logger.warning(f"Found {count} packages that can be upgraded")
        logger.info("Upgrading system packages...")
        before = current_version()
        self.upgrade_all()
        after = current_version()

        if after != before:
            logger.success(f"Alpine Linux updated: {before} → {after}")
        else:
            logger.success("System packages upgraded (Alpine version unchanged, or only patch updates)")
        return True

    def install(self, packages: Sequence[str]) -> None:
        """Run ``apk add --no-cache`` for the given packages.

        Raises:
            UpgradeExecutionError: If apk cannot install them
        """
        if not packages:
            return
        result = self.runner.run(
            ["apk", "add", "--no-cache", *packages], timeout=self.upgrade_timeout
        )
        if not result.ok:
            raise UpgradeExecutionError(f"Failed to install packages: {result.describe()}")

    def clean_cache(self) -> None:
        """Run ``apk cache clean``. Failure only warns: most VMs have no cache."""
        result = self.runner.run(["apk", "cache", "clean"])
        if not result.ok:
            logger.warning(f"apk cache clean skipped: {result.describe()}")
