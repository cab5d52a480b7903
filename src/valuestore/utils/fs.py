"""
valuestore — filesystem utilities

File: src/valuestore/utils/fs.py

Purpose
- Atomic whole-file replacement and idempotent removal for file-backed stores.

Functional requirements
- Readers observe either the previous file content or the new one, never a prefix.
- Removing a file that does not exist succeeds.

Non-functional requirements
- Standard library only and cross-platform behavior where feasible.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "remove_file",
]


def atomic_write(path: PathLike, data: bytes, *, create_parents: bool = False) -> None:
    """
    Atomically replace ``path`` with ``data``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``,
    4. fsync the directory so the rename itself is durable.
    """

    target = Path(path)
    if create_parents:
        target.parent.mkdir(parents=True, exist_ok=True)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(data)
            file_handle.flush()
            os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
        _fsync_directory(target_parent)
    except BaseException:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def remove_file(path: PathLike) -> bool:
    """Remove ``path`` if present; return whether a file was removed."""

    target = Path(path)
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    _fsync_directory(target.parent)
    return True


def _fsync_directory(path: Path) -> None:
    """
    Best-effort directory fsync for metadata durability after rename/unlink.

    Some platforms/filesystems do not support fsync on directories.
    """

    if os.name == "nt":
        return

    flags = os.O_RDONLY
    if hasattr(os, "O_DIRECTORY"):
        flags |= os.O_DIRECTORY

    try:
        dir_fd = os.open(path, flags)
    except OSError:
        return

    try:
        os.fsync(dir_fd)
    except OSError:
        return
    finally:
        os.close(dir_fd)
