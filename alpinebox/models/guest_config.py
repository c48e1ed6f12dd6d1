# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT

"""Pydantic models for guest configuration (/etc/alpinebox/config.yml)."""

import re
from typing import List

from pydantic import BaseModel, Field, field_validator

from alpinebox.paths import GuestPaths

# Repository component names as they appear under /alpine/vX.Y/
VALID_REPOSITORY_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")


class MirrorConfig(BaseModel):
    """Alpine package mirror and release index settings."""

    base_url: str = "http://dl-cdn.alpinelinux.org/alpine"
    arch: str = "x86_64"
    repositories: List[str] = Field(default_factory=lambda: ["main", "community"])
    # Appended after the standard repositories, e.g. ["testing"]
    extra_repositories: List[str] = Field(default_factory=list)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("repositories", "extra_repositories")
    @classmethod
    def validate_repositories(cls, v: List[str]) -> List[str]:
        for name in v:
            if not VALID_REPOSITORY_PATTERN.match(name):
                raise ValueError(f"Invalid repository name: {name!r}")
        return v

    @property
    def release_index_url(self) -> str:
        return f"{self.base_url}/latest-stable/releases/{self.arch}/"


class PathsConfig(BaseModel):
    """Guest file locations owned by the engine."""

    release_file: str = GuestPaths.ALPINE_RELEASE
    repositories_file: str = GuestPaths.APK_REPOSITORIES
    repositories_backup: str = GuestPaths.APK_REPOSITORIES_BACKUP
    provision_marker: str = GuestPaths.PROVISION_MARKER
    reboot_flag: str = GuestPaths.REBOOT_FLAG
    lock_file: str = GuestPaths.LOCK_FILE
    compose_binary: str = GuestPaths.COMPOSE_BINARY
    sudoers_dir: str = GuestPaths.SUDOERS_DIR


class ComposeConfig(BaseModel):
    """docker-compose release source."""

    enabled: bool = True
    api_url: str = "https://api.github.com/repos/docker/compose/releases/latest"
    download_url: str = (
        "https://github.com/docker/compose/releases/download/{tag}/docker-compose-{os}-{arch}"
    )


class SetupConfig(BaseModel):
    """One-time setup performed on the first run."""

    user: str = "vagrant"
    packages: List[str] = Field(
        default_factory=lambda: [
            "curl",
            "wget",
            "git",
            "bash",
            "sudo",
            "openssh",
            "shadow",
            "docker",
            "docker-compose",
            "htop",
            "nano",
            "vim",
        ]
    )
    services: List[str] = Field(default_factory=lambda: ["sshd", "docker"])
    passwordless_sudo: bool = True


class TimeoutsConfig(BaseModel):
    """Timeouts in seconds for external operations."""

    http: float = 30.0
    download: float = 300.0
    command: float = 120.0
    upgrade: float = 1800.0


class RebootConfig(BaseModel):
    """Deferred reboot settings."""

    enabled: bool = True
    grace_seconds: float = 5.0


class GuestConfigModel(BaseModel):
    """Root model for /etc/alpinebox/config.yml."""

    mirror: MirrorConfig = Field(default_factory=MirrorConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    setup: SetupConfig = Field(default_factory=SetupConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    reboot: RebootConfig = Field(default_factory=RebootConfig)
