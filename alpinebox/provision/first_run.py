# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""One-time environment setup performed on the first provisioning run."""

from pathlib import Path

from alpinebox.models.guest_config import SetupConfig
from alpinebox.provision.apk import UpgradeExecutor
from alpinebox.utils.files import atomic_write_text
from alpinebox.utils.logging import get_logger
from alpinebox.utils.process import CommandRunner

logger = get_logger(__name__)


class FirstRunSetup:
    """Installs the container toolchain and prepares the VM user."""

    def __init__(
        self,
        runner: CommandRunner,
        apk: UpgradeExecutor,
        setup: SetupConfig,
        sudoers_dir: Path,
    ):
        self.runner = runner
        self.apk = apk
        self.setup = setup
        self.sudoers_dir = Path(sudoers_dir)

    def run(self) -> None:
        """Perform every setup step.

        Package installation failures are fatal; the remaining steps
        only warn so that a partially configured VM is still reachable.

        Raises:
            UpgradeExecutionError: If essential packages cannot be installed
        """
        logger.info("Installing essential packages...")
        self.apk.install(self.setup.packages)
        logger.success("Essential packages installed")

        for service in self.setup.services:
            self.enable_service(service)

        self.add_user_to_group(self.setup.user, "docker")

        if self.setup.passwordless_sudo:
            self.grant_passwordless_sudo(self.setup.user)

    def enable_service(self, service: str) -> bool:
        """Add an OpenRC service to the default runlevel and start it."""
        logger.info(f"Configuring {service}...")
        for args in (["rc-update", "add", service, "default"], ["service", service, "start"]):
            result = self.runner.run(args)
            if not result.ok:
                logger.warning(f"Could not configure {service}: {result.describe()}")
                return False
        logger.success(f"{service} configured and started")
        return True

    def add_user_to_group(self, user: str, group: str) -> bool:
        logger.info(f"Adding {user} user to {group} group...")
        result = self.runner.run(["addgroup", user, group])
        if not result.ok:
            logger.warning(f"Could not add {user} to {group}: {result.describe()}")
            return False
        return True

    def grant_passwordless_sudo(self, user: str) -> bool:
        """Write a sudoers drop-in for the user. Rewriting it is harmless."""
        logger.info(f"Configuring sudo for {user} user...")
        path = self.sudoers_dir / user
        try:
            self.sudoers_dir.mkdir(parents=True, exist_ok=True)
            atomic_write_text(path, f"{user} ALL=(ALL) NOPASSWD:ALL\n", mode=0o440)
        except OSError as e:
            logger.warning(f"Could not write {path}: {e}")
            return False
        return True
