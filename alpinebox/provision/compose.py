# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Keep an auxiliary tool (docker-compose) on its latest published release.

ComponentVersionSynchronizer holds the decision logic and knows nothing
about docker-compose; DockerComposeTool supplies the three operations it
needs for the standalone compose binary.
"""

import os
import platform
import re
import tempfile
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from alpinebox.errors import NetworkError, ParseError, ProvisionError
from alpinebox.provision.version import ReleaseVersion
from alpinebox.utils.http import HttpClient
from alpinebox.utils.logging import get_logger
from alpinebox.utils.process import CommandRunner

logger = get_logger(__name__)

# "Docker Compose version v2.27.0" / "docker-compose version 1.29.2, build 5becea4c"
COMPOSE_VERSION_PATTERN = re.compile(r"v?\d+\.\d+\.\d+")


class SyncOutcome(Enum):
    """What the synchronizer did on this run."""

    UP_TO_DATE = "up_to_date"
    INSTALLED = "installed"
    UPDATED = "updated"
    SKIPPED = "skipped"


class ComponentVersionSynchronizer:
    """Aligns an installed tool with its latest release tag.

    Args:
        name: Tool name for log lines
        fetch_latest_tag: Returns the latest tag, raises NetworkError/ParseError
        fetch_installed_version: Returns the installed version, or None if absent
        install: Downloads and installs the given tag
    """

    def __init__(
        self,
        name: str,
        fetch_latest_tag: Callable[[], str],
        fetch_installed_version: Callable[[], Optional[ReleaseVersion]],
        install: Callable[[str], None],
    ):
        self.name = name
        self.fetch_latest_tag = fetch_latest_tag
        self.fetch_installed_version = fetch_installed_version
        self.install = install

    def sync(self) -> SyncOutcome:
        logger.info(f"Checking {self.name} version...")
        installed = self.fetch_installed_version()

        try:
            latest_tag = self.fetch_latest_tag()
        except (NetworkError, ParseError) as e:
            logger.warning(f"Could not determine latest {self.name} release: {e}")
            if installed is None:
                logger.warning(f"{self.name} is not installed and cannot be installed right now")
            else:
                logger.info(f"Keeping installed {self.name} {installed}")
            return SyncOutcome.SKIPPED

        if installed is None:
            logger.warning(f"{self.name} not found. Installing {latest_tag}...")
            if not self._install(latest_tag):
                return SyncOutcome.SKIPPED
            logger.success(f"{self.name} installed: {latest_tag}")
            return SyncOutcome.INSTALLED

        try:
            latest = ReleaseVersion.parse(latest_tag)
        except ParseError as e:
            logger.warning(f"Skipping {self.name} update: {e}")
            return SyncOutcome.SKIPPED

        if installed == latest:
            logger.success(f"{self.name} is up to date: v{installed}")
            return SyncOutcome.UP_TO_DATE

        logger.warning(f"{self.name} update available: v{installed} → {latest_tag}")
        logger.info(f"Updating {self.name}...")
        if not self._install(latest_tag):
            return SyncOutcome.SKIPPED
        logger.success(f"{self.name} updated to: {latest_tag}")
        return SyncOutcome.UPDATED

    def _install(self, tag: str) -> bool:
        try:
            self.install(tag)
        except NetworkError as e:
            logger.warning(f"Download of {self.name} {tag} failed: {e}")
            return False
        return True


class DockerComposeTool:
    """Release lookup and install for the standalone docker-compose binary."""

    def __init__(
        self,
        http: HttpClient,
        runner: CommandRunner,
        binary_path: Path,
        api_url: str,
        download_url: str,
    ):
        self.http = http
        self.runner = runner
        self.binary_path = Path(binary_path)
        self.api_url = api_url
        self.download_url = download_url

    def latest_tag(self) -> str:
        """Latest release tag from the GitHub releases API."""
        data = self.http.get_json(self.api_url)
        tag = data.get("tag_name") if isinstance(data, dict) else None
        if not isinstance(tag, str) or not tag.strip():
            raise ParseError(f"No tag_name in release metadata from {self.api_url}")
        return tag.strip()

    def installed_version(self) -> Optional[ReleaseVersion]:
        """Version reported by ``docker-compose --version``, None if absent."""
        result = self.runner.run(["docker-compose", "--version"], timeout=30)
        if not result.ok:
            return None
        match = COMPOSE_VERSION_PATTERN.search(result.stdout)
        if not match:
            logger.warning(f"Unrecognised docker-compose version output: {result.stdout.strip()!r}")
            return None
        return ReleaseVersion.parse(match.group(0))

    def asset_url(self, tag: str) -> str:
        return self.download_url.format(
            tag=tag,
            os=platform.system().lower(),
            arch=platform.machine(),
        )

    def install(self, tag: str) -> None:
        """Download a release and swap it in place of the current binary.

        Raises:
            NetworkError: If the download fails (the old binary is kept)
            ProvisionError: If the binary cannot be written
        """
        url = self.asset_url(tag)
        self.binary_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.binary_path.parent, prefix=f".{self.binary_path.name}."
        )
        os.close(fd)
        try:
            size = self.http.download(url, Path(tmp_name))
            os.chmod(tmp_name, 0o755)
            os.replace(tmp_name, self.binary_path)
        except OSError as e:
            raise ProvisionError(f"Failed to install {self.binary_path}: {e}") from e
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug(f"Installed {url} ({size} bytes) to {self.binary_path}")

    def synchronizer(self) -> ComponentVersionSynchronizer:
        return ComponentVersionSynchronizer(
            "Docker Compose",
            fetch_latest_tag=self.latest_tag,
            fetch_installed_version=self.installed_version,
            install=self.install,
        )
