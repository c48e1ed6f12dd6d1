# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""File helpers for state the engine owns."""

import os
import tempfile
from pathlib import Path
from typing import Optional


def atomic_write_text(path: Path, content: str, mode: Optional[int] = None) -> None:
    """Replace a file's content via write-temp-then-rename.

    The temp file lives in the target directory so the final rename stays
    on one filesystem. Readers see either the old or the new content.

    Args:
        path: Target file
        content: New text content
        mode: Permission bits for the new file (default: keep existing, else 0644)
    """
    path = Path(path)
    if mode is None:
        try:
            mode = path.stat().st_mode & 0o7777
        except FileNotFoundError:
            mode = 0o644

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
