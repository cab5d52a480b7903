"""Byte-oriented storage backends addressed by location strings."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from valuestore.utils.fs import atomic_write, remove_file


@runtime_checkable
class StorageBackend(Protocol):
    """Whole-value byte storage.

    ``read_bytes`` raises ``FileNotFoundError`` for a missing location,
    ``write_bytes`` must replace the content atomically, and ``delete`` of a missing
    location is a no-op.
    """

    def exists(self, location: str) -> bool: ...

    def read_bytes(self, location: str) -> bytes: ...

    def write_bytes(self, location: str, data: bytes) -> None: ...

    def delete(self, location: str) -> None: ...


class FileSystemBackend:
    """Local filesystem storage with temp-file + rename writes."""

    def __init__(self, *, create_parents: bool = True) -> None:
        self._create_parents = create_parents

    @property
    def create_parents(self) -> bool:
        return self._create_parents

    def exists(self, location: str) -> bool:
        return Path(location).is_file()

    def read_bytes(self, location: str) -> bytes:
        return Path(location).read_bytes()

    def write_bytes(self, location: str, data: bytes) -> None:
        atomic_write(location, data, create_parents=self._create_parents)

    def delete(self, location: str) -> None:
        remove_file(location)

    def __repr__(self) -> str:
        return f"FileSystemBackend(create_parents={self._create_parents!r})"


class MemoryBackend:
    """Process-local storage keyed by location; thread-safe."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._lock = threading.Lock()
        self._blobs: dict[str, bytes] = dict(initial or {})

    def exists(self, location: str) -> bool:
        with self._lock:
            return location in self._blobs

    def read_bytes(self, location: str) -> bytes:
        with self._lock:
            try:
                return self._blobs[location]
            except KeyError:
                raise FileNotFoundError(location) from None

    def write_bytes(self, location: str, data: bytes) -> None:
        with self._lock:
            self._blobs[location] = bytes(data)

    def delete(self, location: str) -> None:
        with self._lock:
            self._blobs.pop(location, None)

    def locations(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._blobs))


__all__ = [
    "FileSystemBackend",
    "MemoryBackend",
    "StorageBackend",
]
