# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Centralized path definitions for alpinebox.

Every file the engine reads or writes inside the guest is listed here.
They are defaults only: the ``paths`` section of the config file can
override any of them, and tests point them at a temporary directory.

Usage:
    from alpinebox.paths import GuestPaths

    release = GuestPaths.ALPINE_RELEASE
    config_file = GuestPaths.config_file()
"""

import os
from pathlib import Path


class GuestPaths:
    """Paths on the Alpine guest where the provisioning hook runs."""

    # Read-only release file maintained by alpine-base
    ALPINE_RELEASE = "/etc/alpine-release"

    # apk repository configuration and its single-slot backup
    APK_REPOSITORIES = "/etc/apk/repositories"
    APK_REPOSITORIES_BACKUP = "/etc/apk/repositories.bak"

    # Append-only marker, one line per completed run
    PROVISION_MARKER = "/var/lib/vagrant-provision-complete"

    # Ephemeral sentinel, cleared by the reboot at the end of a run
    REBOOT_FLAG = "/tmp/reboot_required"

    # Advisory lock serialising provisioning runs
    LOCK_FILE = "/run/alpinebox.lock"

    # Standalone docker-compose binary kept in sync with upstream releases
    COMPOSE_BINARY = "/usr/local/bin/docker-compose"

    SUDOERS_DIR = "/etc/sudoers.d"

    @staticmethod
    def config_file() -> Path:
        """/etc/alpinebox/config.yml, or $ALPINEBOX_CONFIG"""
        env_path = os.environ.get("ALPINEBOX_CONFIG")
        if env_path:
            return Path(env_path)
        return Path("/etc/alpinebox/config.yml")
