# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Provision marker: first-run gate and append-only run history."""

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from alpinebox.utils.files import atomic_write_text
from alpinebox.utils.logging import get_logger

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ProvisionStateTracker:
    """Manages the provision marker file.

    The marker is human readable, one ``<timestamp>: <event>`` line per
    entry. The first line records the one-time setup; every run after
    that (including the first) appends a line. Lines are never removed.
    """

    def __init__(self, marker_path: Path, clock: Callable[[], datetime] = datetime.now):
        self.marker_path = Path(marker_path)
        self.clock = clock

    def _line(self, event: str) -> str:
        return f"{self.clock().strftime(TIMESTAMP_FORMAT)}: {event}\n"

    def is_first_run(self) -> bool:
        return not self.marker_path.exists()

    def mark_complete(self) -> bool:
        """Create the marker with the first-time setup line.

        Returns:
            False if the marker already existed and was left untouched
        """
        if self.marker_path.exists():
            logger.debug(f"Marker {self.marker_path} already present, not rewriting")
            return False
        self.marker_path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(self.marker_path, self._line("First-time provisioning completed"))
        return True

    def append_run(self, version: str) -> None:
        """Append a completed-run line, creating the marker if needed."""
        existing = ""
        if self.marker_path.exists():
            existing = self.marker_path.read_text()
            if existing and not existing.endswith("\n"):
                existing += "\n"
        else:
            self.marker_path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(
            self.marker_path,
            existing + self._line(f"Provisioning run v{version} completed"),
        )

    def history(self) -> List[str]:
        """All marker lines, oldest first."""
        try:
            content = self.marker_path.read_text()
        except FileNotFoundError:
            return []
        return [line for line in content.splitlines() if line.strip()]

    def last_setup(self) -> Optional[str]:
        """The first-time setup line, if provisioned."""
        lines = self.history()
        return lines[0] if lines else None

    def run_entries(self) -> List[str]:
        """Only the per-run lines."""
        return [line for line in self.history() if "Provisioning run" in line]
