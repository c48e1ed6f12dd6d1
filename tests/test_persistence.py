# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT

"""Tests for lbu commits on diskless roots."""

from conftest import fail

from alpinebox.provision.persistence import PersistenceCommitter


def test_skips_without_lbu(runner):
    assert PersistenceCommitter(runner).commit_if_supported() is False
    assert runner.calls == []


def test_commits_when_lbu_present(runner):
    runner.executables["lbu"] = "/sbin/lbu"
    assert PersistenceCommitter(runner).commit_if_supported() is True
    assert runner.ran("lbu", "commit")


def test_commit_failure_only_warns(runner):
    runner.executables["lbu"] = "/sbin/lbu"
    runner.on("lbu", "commit", response=fail(stderr="No media found"))
    assert PersistenceCommitter(runner).commit_if_supported() is False
