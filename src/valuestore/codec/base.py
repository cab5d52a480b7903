"""Codec contract and the async I/O helpers shared by codec implementations."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from valuestore.storage.backend import StorageBackend

T = TypeVar("T")


@runtime_checkable
class Codec(Protocol[T]):
    """Durable persistence for exactly one value.

    ``decode`` returns ``None`` only when no value is stored; corrupt data raises.
    ``encode(None)`` clears everything the codec persisted and is idempotent.
    """

    async def decode(self) -> T | None: ...

    async def encode(self, value: T | None) -> None: ...


async def read_optional(backend: StorageBackend, location: str) -> bytes | None:
    """Read ``location`` off the event loop; ``None`` when it does not exist."""
    try:
        return await asyncio.to_thread(backend.read_bytes, location)
    except FileNotFoundError:
        return None


async def write_all(backend: StorageBackend, location: str, data: bytes) -> None:
    await asyncio.to_thread(backend.write_bytes, location, data)


async def delete_quietly(backend: StorageBackend, location: str) -> None:
    await asyncio.to_thread(backend.delete, location)


__all__ = [
    "Codec",
    "delete_quietly",
    "read_optional",
    "write_all",
]
