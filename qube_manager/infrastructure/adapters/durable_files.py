"""Durable file writes shared by the file-backed adapters.

Both helpers block and fsync; adapters run them with asyncio.to_thread.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def append_line(path: Path, line: str) -> None:
    """Append one newline-terminated line and fsync it."""
    with path.open("a", encoding="utf-8") as handle:
        handle.write(line + "\n")
        handle.flush()
        os.fsync(handle.fileno())


def atomic_write(path: Path, payload: str) -> None:
    """Replace path with payload: temp file in the same directory, fsync,
    rename over the old file, fsync the directory.

    On failure the temp file is removed and path is left untouched.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    dir_fd = os.open(path.parent, os.O_RDONLY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)
