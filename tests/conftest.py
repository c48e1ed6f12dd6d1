# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Pytest fixtures for alpinebox.

Nothing here touches the real guest: every path lives under tmp_path,
commands go through FakeRunner and HTTP through FakeHttp.
"""

import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

# Keep the rotating log out of /var/log while testing
os.environ.setdefault(
    "ALPINEBOX_LOG_FILE", os.path.join(tempfile.mkdtemp(prefix="alpinebox-test-"), "test.log")
)

from alpinebox.errors import NetworkError  # noqa: E402
from alpinebox.models.guest_config import GuestConfigModel  # noqa: E402
from alpinebox.utils.process import COMMAND_NOT_FOUND, CommandResult  # noqa: E402

Response = Union[CommandResult, Callable[[List[str]], CommandResult]]


def ok(stdout: str = "") -> Callable[[List[str]], CommandResult]:
    """Response factory: command succeeds with the given output."""
    return lambda args: CommandResult(args, 0, stdout=stdout)


def fail(returncode: int = 1, stderr: str = "error") -> Callable[[List[str]], CommandResult]:
    """Response factory: command exits non-zero."""
    return lambda args: CommandResult(args, returncode, stderr=stderr)


def timeout() -> Callable[[List[str]], CommandResult]:
    return lambda args: CommandResult(args, -1, timed_out=True)


def missing() -> Callable[[List[str]], CommandResult]:
    return lambda args: CommandResult(args, COMMAND_NOT_FOUND, stderr=f"{args[0]}: not found")


class FakeRunner:
    """Records commands and answers from a table keyed by argv tuple.

    Unknown commands succeed with empty output.
    """

    def __init__(self):
        self.responses: Dict[Tuple[str, ...], Response] = {}
        self.calls: List[List[str]] = []
        self.executables: Dict[str, str] = {}

    def on(self, *args: str, response: Response) -> None:
        self.responses[tuple(args)] = response

    def run(self, args, timeout: Optional[float] = None) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        response = self.responses.get(tuple(args))
        if response is None:
            return CommandResult(args, 0)
        if callable(response):
            return response(args)
        return response

    def which(self, name: str) -> Optional[str]:
        return self.executables.get(name)

    def ran(self, *args: str) -> bool:
        return list(args) in self.calls


class FakeHttp:
    """Serves canned bodies by URL. Unknown URLs raise NetworkError."""

    def __init__(self):
        self.pages: Dict[str, Union[str, Exception]] = {}
        self.json: Dict[str, Union[object, Exception]] = {}
        self.files: Dict[str, Union[bytes, Exception]] = {}
        self.downloads: List[Tuple[str, Path]] = []

    def get_text(self, url: str) -> str:
        body = self.pages.get(url)
        if body is None:
            raise NetworkError(f"Failed to fetch {url}")
        if isinstance(body, Exception):
            raise body
        return body

    def get_json(self, url: str):
        if url not in self.json:
            raise NetworkError(f"Failed to fetch {url}")
        data = self.json[url]
        if isinstance(data, Exception):
            raise data
        return data

    def download(self, url: str, dest: Path) -> int:
        self.downloads.append((url, dest))
        content = self.files.get(url)
        if content is None:
            raise NetworkError(f"Failed to fetch {url}")
        if isinstance(content, Exception):
            raise content
        Path(dest).write_bytes(content)
        return len(content)


def release_index(*versions: str, arch: str = "x86_64") -> str:
    """Build a directory listing like dl-cdn's releases/<arch>/ page."""
    rows = ['<a href="../">../</a>']
    for version in versions:
        for kind in ("minirootfs", "standard", "virt"):
            name = f"alpine-{kind}-{version}-{arch}.tar.gz" if kind == "minirootfs" else (
                f"alpine-{kind}-{version}-{arch}.iso"
            )
            rows.append(f'<a href="{name}">{name}</a>   01-Jan-2025 00:00   1M')
    rows.append('<a href="latest-releases.yaml">latest-releases.yaml</a>')
    return "<html><body><pre>\n" + "\n".join(rows) + "\n</pre></body></html>"


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def guest_root(tmp_path):
    """A fake guest filesystem with an Alpine 3.19 install."""
    (tmp_path / "etc" / "apk").mkdir(parents=True)
    (tmp_path / "etc" / "alpine-release").write_text("3.19.1\n")
    (tmp_path / "etc" / "apk" / "repositories").write_text(
        "http://dl-cdn.alpinelinux.org/alpine/v3.19/main\n"
        "http://dl-cdn.alpinelinux.org/alpine/v3.19/community\n"
    )
    (tmp_path / "var" / "lib").mkdir(parents=True)
    (tmp_path / "tmp").mkdir()
    (tmp_path / "run").mkdir()
    (tmp_path / "usr" / "local" / "bin").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def guest_config(guest_root):
    """Config with every path redirected into guest_root."""
    return GuestConfigModel.model_validate(
        {
            "paths": {
                "release_file": str(guest_root / "etc" / "alpine-release"),
                "repositories_file": str(guest_root / "etc" / "apk" / "repositories"),
                "repositories_backup": str(guest_root / "etc" / "apk" / "repositories.bak"),
                "provision_marker": str(guest_root / "var" / "lib" / "vagrant-provision-complete"),
                "reboot_flag": str(guest_root / "tmp" / "reboot_required"),
                "lock_file": str(guest_root / "run" / "alpinebox.lock"),
                "compose_binary": str(guest_root / "usr" / "local" / "bin" / "docker-compose"),
                "sudoers_dir": str(guest_root / "etc" / "sudoers.d"),
            },
            "reboot": {"grace_seconds": 0},
        }
    )
