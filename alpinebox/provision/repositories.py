# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""apk repository configuration with a single-slot backup."""

import os
import re
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from alpinebox.errors import RepositoryWriteError
from alpinebox.utils.files import atomic_write_text
from alpinebox.utils.logging import get_logger

logger = get_logger(__name__)

BRANCH_PATTERN = re.compile(r"/v(\d+\.\d+)/")


def mirror_urls(base_url: str, major_minor: str, repositories: Sequence[str]) -> List[str]:
    """Build the mirror lines for one release branch, in repository order."""
    base = base_url.rstrip("/")
    return [f"{base}/v{major_minor}/{repo}" for repo in repositories]


class RepositorySwitcher:
    """Rewrites /etc/apk/repositories and rolls it back on failure.

    The backup slot exists only while a switch is in flight: rollback()
    moves it back over the live file and discard_backup() removes it once
    the upgrade is committed. A backup found at startup therefore means an
    earlier run died mid-switch.
    """

    def __init__(
        self,
        config_path: Path,
        backup_path: Path,
        base_url: str,
        repositories: Sequence[str] = ("main", "community"),
    ):
        self.config_path = Path(config_path)
        self.backup_path = Path(backup_path)
        self.base_url = base_url
        self.repositories = list(repositories)

    def read(self) -> List[str]:
        """Live mirror lines, skipping blanks and comments."""
        try:
            content = self.config_path.read_text()
        except OSError:
            return []
        return [
            line.strip()
            for line in content.splitlines()
            if line.strip() and not line.lstrip().startswith("#")
        ]

    def branch(self) -> Optional[str]:
        """Release branch (``major.minor``) the live mirrors point at.

        None when no line names a ``vX.Y`` branch (edge, latest-stable, empty).
        """
        for line in self.read():
            match = BRANCH_PATTERN.search(line)
            if match:
                return match.group(1)
        return None

    def has_backup(self) -> bool:
        return self.backup_path.exists()

    def backup(self) -> None:
        """Copy the live configuration into the backup slot, overwriting it."""
        try:
            shutil.copy2(self.config_path, self.backup_path)
        except OSError as e:
            raise RepositoryWriteError(
                f"Failed to back up {self.config_path} to {self.backup_path}: {e}"
            ) from e
        logger.debug(f"Backed up {self.config_path} to {self.backup_path}")

    def write(self, major_minor: str) -> List[str]:
        """Point the configuration at one release branch.

        Returns:
            The mirror lines written

        Raises:
            RepositoryWriteError: If the file cannot be replaced
        """
        urls = mirror_urls(self.base_url, major_minor, self.repositories)
        logger.info(f"Overwriting {self.config_path} to point to v{major_minor}...")
        try:
            atomic_write_text(self.config_path, "\n".join(urls) + "\n")
        except OSError as e:
            raise RepositoryWriteError(f"Failed to update {self.config_path}: {e}") from e
        logger.success(f"Repository configuration updated for v{major_minor}.")
        return urls

    def rollback(self) -> None:
        """Restore the backup over the live configuration.

        Raises:
            RepositoryWriteError: If there is no backup or it cannot be moved
        """
        if not self.backup_path.exists():
            raise RepositoryWriteError(
                f"No backup at {self.backup_path} to restore",
                hint=f"Check {self.config_path} by hand before the next run",
            )
        try:
            os.replace(self.backup_path, self.config_path)
        except OSError as e:
            raise RepositoryWriteError(f"Failed to revert repository configuration: {e}") from e
        logger.warning(f"Restored {self.config_path} from {self.backup_path}")

    def discard_backup(self) -> None:
        """Drop the backup after a committed switch."""
        try:
            self.backup_path.unlink()
        except FileNotFoundError:
            pass
