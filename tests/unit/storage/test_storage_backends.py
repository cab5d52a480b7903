"""Storage backends: absence, replacement and deletion semantics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from valuestore.storage.backend import FileSystemBackend, MemoryBackend, StorageBackend

if TYPE_CHECKING:
    from pathlib import Path


def test_backends_satisfy_protocol() -> None:
    assert isinstance(FileSystemBackend(), StorageBackend)
    assert isinstance(MemoryBackend(), StorageBackend)


def test_memory_backend_lifecycle() -> None:
    backend = MemoryBackend({"a": b"1"})

    assert backend.exists("a")
    assert backend.read_bytes("a") == b"1"
    backend.write_bytes("b", bytearray(b"2"))
    backend.delete("a")
    backend.delete("missing")

    assert backend.locations() == ("b",)
    assert backend.read_bytes("b") == b"2"
    with pytest.raises(FileNotFoundError):
        backend.read_bytes("a")


def test_memory_backend_copies_initial_mapping() -> None:
    initial = {"a": b"1"}
    backend = MemoryBackend(initial)

    backend.delete("a")

    assert initial == {"a": b"1"}


def test_filesystem_backend_lifecycle(tmp_path: Path) -> None:
    backend = FileSystemBackend()
    location = str(tmp_path / "nested" / "value.json")

    assert not backend.exists(location)
    with pytest.raises(FileNotFoundError):
        backend.read_bytes(location)

    backend.write_bytes(location, b"first")
    backend.write_bytes(location, b"second")
    assert backend.read_bytes(location) == b"second"

    backend.delete(location)
    backend.delete(location)
    assert not backend.exists(location)


def test_filesystem_backend_can_require_existing_parents(tmp_path: Path) -> None:
    backend = FileSystemBackend(create_parents=False)

    with pytest.raises(FileNotFoundError):
        backend.write_bytes(str(tmp_path / "absent" / "value.json"), b"x")
