# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT

"""Tests for guest configuration loading."""

import yaml

from alpinebox.guest_config import load_config
from alpinebox.models.guest_config import GuestConfigModel


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "config.yml")
    assert config == GuestConfigModel()
    assert config.paths.repositories_file == "/etc/apk/repositories"
    assert config.mirror.repositories == ["main", "community"]


def test_partial_file_merges_with_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        yaml.safe_dump(
            {
                "mirror": {"base_url": "https://mirror.example.org/alpine/", "arch": "aarch64"},
                "setup": {"user": "dev"},
            }
        )
    )

    config = load_config(path)

    assert config.mirror.base_url == "https://mirror.example.org/alpine"
    assert config.mirror.release_index_url == (
        "https://mirror.example.org/alpine/latest-stable/releases/aarch64/"
    )
    assert config.setup.user == "dev"
    assert "docker" in config.setup.packages
    assert config.timeouts.http == 30.0


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"mirror": {"repositories": ["main", "../etc"]}}))

    assert load_config(path) == GuestConfigModel()


def test_malformed_yaml_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("mirror: [unclosed\n")

    assert load_config(path) == GuestConfigModel()


def test_non_mapping_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("- just\n- a list\n")

    assert load_config(path) == GuestConfigModel()


def test_env_override(tmp_path, monkeypatch):
    path = tmp_path / "custom.yml"
    path.write_text(yaml.safe_dump({"reboot": {"enabled": False}}))
    monkeypatch.setenv("ALPINEBOX_CONFIG", str(path))

    assert load_config().reboot.enabled is False
