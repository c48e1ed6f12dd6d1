# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Advisory lock so two provisioning runs never overlap."""

import fcntl
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from alpinebox.errors import LockError


@contextmanager
def provision_lock(lock_path: Path) -> Iterator[None]:
    """Hold an exclusive flock on lock_path for the duration of the block.

    Raises:
        LockError: If another process holds the lock or the file can't be opened
    """
    lock_path = Path(lock_path)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(lock_path, "w", encoding="utf-8")
    except OSError as e:
        raise LockError(f"Cannot open lock file {lock_path}: {e}") from e

    with handle:
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            raise LockError(
                f"Another provisioning run is in progress (lockfile: {lock_path})",
                hint="Wait for it to finish, then re-provision",
            ) from e
        try:
            yield
        finally:
            fcntl.flock(handle, fcntl.LOCK_UN)
