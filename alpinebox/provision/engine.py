# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Provisioning control loop run on every machine start.

Phases, in order:

1. Recover   - undo a repository switch left behind by a crashed run
2. Inspect   - current release vs latest published release
3. Upgrade   - on a major.minor change: backup, switch, upgrade, commit, schedule reboot
4. Routine   - refresh the index and apply pending upgrades
5. FirstRun  - one-time setup gated by the provision marker
6. Sync      - align docker-compose with its latest release
7. Verify    - docker and docker-compose must answer --version
8. Record    - append the run to the provision marker
9. Reboot    - consume the pending-reboot flag

Fatal errors propagate as ProvisionError subclasses after the repository
configuration has been restored.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from alpinebox import __version__
from alpinebox.errors import (
    NetworkError,
    ParseError,
    RepositoryWriteError,
    UpgradeExecutionError,
)
from alpinebox.models.guest_config import GuestConfigModel
from alpinebox.provision.apk import UpgradeExecutor
from alpinebox.provision.compose import (
    ComponentVersionSynchronizer,
    DockerComposeTool,
    SyncOutcome,
)
from alpinebox.provision.first_run import FirstRunSetup
from alpinebox.provision.lock import provision_lock
from alpinebox.provision.persistence import PersistenceCommitter
from alpinebox.provision.reboot import RebootScheduler
from alpinebox.provision.repositories import RepositorySwitcher
from alpinebox.provision.state import ProvisionStateTracker
from alpinebox.provision.verify import ToolVerifier
from alpinebox.provision.version import (
    UNKNOWN_VERSION,
    ReleaseVersion,
    VersionInspector,
    same_major_minor,
)
from alpinebox.utils.http import HttpClient
from alpinebox.utils.logging import get_logger
from alpinebox.utils.process import CommandRunner

logger = get_logger(__name__)


class MajorUpgrade(Enum):
    """Result of the major.minor upgrade phase."""

    CURRENT = "current"
    UPGRADED = "upgraded"
    SKIPPED = "skipped"


@dataclass
class ProvisionReport:
    """Summary of one provisioning run."""

    start_version: str = UNKNOWN_VERSION
    latest_version: Optional[str] = None
    major_upgrade: MajorUpgrade = MajorUpgrade.SKIPPED
    recovered_switch: bool = False
    routine_upgraded: bool = False
    first_run: bool = False
    compose: Optional[SyncOutcome] = None
    tool_versions: Dict[str, str] = field(default_factory=dict)
    reboot_scheduled: bool = False
    rebooted: bool = False
    final_version: str = UNKNOWN_VERSION


class ProvisionEngine:
    """Runs the provisioning phases against injected collaborators."""

    def __init__(
        self,
        inspector: VersionInspector,
        switcher: RepositorySwitcher,
        apk: UpgradeExecutor,
        committer: PersistenceCommitter,
        state: ProvisionStateTracker,
        reboot: RebootScheduler,
        verifier: ToolVerifier,
        first_run: FirstRunSetup,
        compose_sync: Optional[ComponentVersionSynchronizer] = None,
        lock_path: Optional[Path] = None,
        reboot_enabled: bool = True,
    ):
        self.inspector = inspector
        self.switcher = switcher
        self.apk = apk
        self.committer = committer
        self.state = state
        self.reboot = reboot
        self.verifier = verifier
        self.first_run = first_run
        self.compose_sync = compose_sync
        self.lock_path = lock_path
        self.reboot_enabled = reboot_enabled

    @classmethod
    def from_config(
        cls,
        config: GuestConfigModel,
        runner: Optional[CommandRunner] = None,
        http: Optional[HttpClient] = None,
        reboot_enabled: Optional[bool] = None,
    ) -> "ProvisionEngine":
        """Wire up the real collaborators from configuration."""
        runner = runner or CommandRunner(timeout=config.timeouts.command)
        http = http or HttpClient(
            timeout=config.timeouts.http, download_timeout=config.timeouts.download
        )
        paths = config.paths
        apk = UpgradeExecutor(runner, upgrade_timeout=config.timeouts.upgrade)

        compose_sync = None
        if config.compose.enabled:
            compose_sync = DockerComposeTool(
                http,
                runner,
                binary_path=Path(paths.compose_binary),
                api_url=config.compose.api_url,
                download_url=config.compose.download_url,
            ).synchronizer()

        return cls(
            inspector=VersionInspector(
                Path(paths.release_file), config.mirror.release_index_url, http
            ),
            switcher=RepositorySwitcher(
                Path(paths.repositories_file),
                Path(paths.repositories_backup),
                config.mirror.base_url,
                config.mirror.repositories + config.mirror.extra_repositories,
            ),
            apk=apk,
            committer=PersistenceCommitter(runner),
            state=ProvisionStateTracker(Path(paths.provision_marker)),
            reboot=RebootScheduler(
                Path(paths.reboot_flag), runner, grace_seconds=config.reboot.grace_seconds
            ),
            verifier=ToolVerifier(runner),
            first_run=FirstRunSetup(runner, apk, config.setup, Path(paths.sudoers_dir)),
            compose_sync=compose_sync,
            lock_path=Path(paths.lock_file),
            reboot_enabled=config.reboot.enabled if reboot_enabled is None else reboot_enabled,
        )

    def run(self) -> ProvisionReport:
        """Execute every phase once, holding the provisioning lock."""
        if self.lock_path is None:
            return self._run_phases()
        with provision_lock(self.lock_path):
            return self._run_phases()

    def _run_phases(self) -> ProvisionReport:
        report = ProvisionReport()
        logger.info("Starting Alpine Linux provisioning...")

        report.recovered_switch = self.recover_interrupted_switch()
        self.inspect(report)
        self.upgrade_release(report)
        report.routine_upgraded = self.apk.routine_upgrade(self.inspector.current_version)
        self.first_run_gate(report)
        if self.compose_sync is not None:
            report.compose = self.compose_sync.sync()
        report.tool_versions = self.verifier.verify()

        self.state.append_run(__version__)
        self.apk.clean_cache()
        report.final_version = self.inspector.current_version()
        report.reboot_scheduled = self.reboot.is_pending()

        logger.success("Provisioning completed successfully!")
        report.rebooted = self.consume_reboot()
        return report

    def recover_interrupted_switch(self) -> bool:
        """Restore the repository backup left by a run that died mid-switch.

        apk may already have moved the system to the new branch before the
        crash. The restored mirrors must then follow the installed release,
        otherwise the major.minor check sees nothing to do and never
        rewrites them.
        """
        if not self.switcher.has_backup():
            return False
        logger.warning("Found repository backup from an interrupted upgrade. Restoring it...")
        self.switcher.rollback()

        try:
            installed = ReleaseVersion.parse(self.inspector.current_version())
        except ParseError:
            return True
        restored = self.switcher.branch()
        if restored is not None and restored != installed.major_minor:
            logger.warning(
                f"System is already on {installed} but restored mirrors point at v{restored}."
            )
            self.switcher.write(installed.major_minor)
        return True

    def inspect(self, report: ProvisionReport) -> None:
        report.start_version = self.inspector.current_version()
        logger.version(f"Current Alpine Linux version: {report.start_version}")
        logger.info("Checking for Alpine Linux version updates...")
        latest = self.inspector.latest_version()
        report.latest_version = str(latest) if latest else None

    def upgrade_release(self, report: ProvisionReport) -> None:
        """Switch to the latest major.minor branch if it differs from ours."""
        if report.latest_version is None:
            logger.error("Skipping major version check: latest version unavailable.")
            report.major_upgrade = MajorUpgrade.SKIPPED
            return

        if report.start_version == UNKNOWN_VERSION:
            logger.warning("Current Alpine version unknown. Skipping major version check.")
            report.major_upgrade = MajorUpgrade.SKIPPED
            return

        current = report.start_version
        latest = ReleaseVersion.parse(report.latest_version)
        current_mm = ".".join(current.split(".")[:2])
        logger.info(f"Current Alpine major.minor: {current_mm}")

        if same_major_minor(current, latest):
            logger.success(
                f"You are already on the latest stable major.minor version: {current_mm}"
            )
            report.major_upgrade = MajorUpgrade.CURRENT
            return

        target = latest.major_minor
        logger.warning(f"Alpine Linux major.minor upgrade available: {current_mm} → {target}")
        logger.info(f"Attempting to upgrade Alpine Linux to {target}...")
        self.switch_and_upgrade(target, previous=current_mm)

        # lbu commit persists /etc, so the backup must be gone before it runs
        self.switcher.discard_backup()
        self.committer.commit_if_supported()
        self.reboot.schedule()
        report.major_upgrade = MajorUpgrade.UPGRADED

    def switch_and_upgrade(self, target: str, previous: str) -> None:
        """Point apk at the target branch and upgrade, rolling back on failure.

        Raises:
            RepositoryWriteError: If the configuration cannot be switched
            UpgradeExecutionError: If apk fails (after the rollback)
        """
        self.switcher.backup()
        try:
            self.switcher.write(target)
        except RepositoryWriteError as e:
            logger.error("Failed to update repository configuration. Skipping major version upgrade.", exc=e)
            self.switcher.discard_backup()
            raise

        logger.info("Running apk update and apk upgrade for major version change...")
        try:
            self.apk.refresh_index()
            self.apk.upgrade_all()
        except (NetworkError, UpgradeExecutionError) as e:
            logger.error(
                "Failed to upgrade Alpine Linux major version. Manual intervention might be necessary",
                exc=e,
            )
            logger.warning(f"Attempting to revert repository configuration to v{previous}.")
            try:
                self.switcher.rollback()
            except RepositoryWriteError as rollback_error:
                logger.error("Failed to revert repository configuration", exc=rollback_error)
            raise UpgradeExecutionError(
                f"Major upgrade to v{target} failed: {e}",
                hint=f"Repositories were restored to v{previous}; re-provision to retry",
            ) from e

        logger.success("Alpine Linux major version upgrade initiated. Packages upgraded.")

    def first_run_gate(self, report: ProvisionReport) -> None:
        if self.state.is_first_run():
            report.first_run = True
            logger.info(
                "First-time provisioning detected - installing essential packages and setting up environment..."
            )
            self.first_run.run()
            self.state.mark_complete()
            logger.success("Initial development environment setup completed!")
            return

        logger.info("Subsequent run detected - skipping initial setup")
        logger.info(f"Last initial setup completed: {self.state.last_setup() or 'Unknown'}")

    def consume_reboot(self) -> bool:
        if not self.reboot_enabled:
            if self.reboot.is_pending():
                logger.warning("Reboot pending but disabled for this run. Reboot manually to finish the upgrade.")
            return False
        return self.reboot.consume_and_reboot()
