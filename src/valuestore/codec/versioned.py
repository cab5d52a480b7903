"""Versioned codec: a value file plus a side-channel schema version marker.

Layout for a value stored at ``cat.json``::

    cat.json          the serialized value
    cat.json.version  the schema version it was written under (an integer)

Encoding writes the marker before the value and clears the marker before the value.
Decoding never consults the marker unless the value exists and does not decode as
the current type; only then is the marker read (missing marker means version 0)
and the value handed to the migration function in its structured form.
"""

from __future__ import annotations

import inspect
import os
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Generic, TypeAlias, TypeVar, cast

import structlog

from valuestore.codec.base import delete_quietly, read_optional, write_all
from valuestore.constants import (
    DEFAULT_TARGET_VERSION,
    UNVERSIONED_VERSION,
    VERSION_MARKER_SUFFIX,
)
from valuestore.errors import MalformedDataError, MigrationError, SerializationError
from valuestore.serialization.formats import Format, JsonFormat
from valuestore.serialization.structured import StructuredValue
from valuestore.storage.backend import FileSystemBackend

if TYPE_CHECKING:
    from valuestore.serialization.serializer import Serializer
    from valuestore.storage.backend import StorageBackend

T = TypeVar("T")

Migration: TypeAlias = Callable[
    [int | None, StructuredValue | None],
    T | None | Awaitable[T | None],
]


def default_migration(default: T | None) -> Migration[T]:
    """Migration that discards stale data and yields ``default``."""

    def migrate(version: int | None, previous: StructuredValue | None) -> T | None:
        return default

    return migrate


def version_marker_path(path: str | os.PathLike[str]) -> str:
    """Return the default marker location for a value stored at ``path``."""
    return f"{os.fspath(path)}{VERSION_MARKER_SUFFIX}"


class VersionedCodec(Generic[T]):
    """Codec that records the schema version and migrates stale values on read.

    Parameters
    ----------
    path:
        Location of the value.
    serializer:
        Typed serializer for the current schema.
    version:
        Current schema version, written next to every stored value.
    migration:
        ``(previous_version, previous_data) -> value | None``; may be a coroutine
        function. Called at most once per decode, only for values that exist and do
        not decode as the current type. Defaults to discarding stale data.
    version_path:
        Marker location; defaults to ``path`` with a ``.version`` suffix.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        serializer: Serializer[T],
        *,
        version: int = DEFAULT_TARGET_VERSION,
        migration: Migration[T] | None = None,
        version_path: str | os.PathLike[str] | None = None,
        format: Format | None = None,
        backend: StorageBackend | None = None,
        logger: Any | None = None,
    ) -> None:
        if isinstance(version, bool) or not isinstance(version, int):
            raise TypeError(f"version must be an integer, got {type(version).__name__}")
        if version < 0:
            raise ValueError("version must be >= 0")

        self._location = os.fspath(path)
        self._version_location = (
            os.fspath(version_path) if version_path is not None else version_marker_path(path)
        )
        if self._version_location == self._location:
            raise ValueError("version_path must differ from the value path")

        self._serializer = serializer
        self._version = version
        self._migration: Migration[T] = (
            migration if migration is not None else default_migration(None)
        )
        self._format = format if format is not None else JsonFormat()
        self._backend = backend if backend is not None else FileSystemBackend()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def location(self) -> str:
        return self._location

    @property
    def version_location(self) -> str:
        return self._version_location

    @property
    def version(self) -> int:
        return self._version

    async def decode(self) -> T | None:
        data = await read_optional(self._backend, self._location)
        if data is None:
            self._logger.debug("store_decode_missing", location=self._location)
            return None

        try:
            return self._format.decode_value(self._serializer, data)
        except SerializationError as exc:
            typed_error = exc

        previous_version = await self.stored_version()
        try:
            previous = self._format.decode_structured(data)
        except SerializationError as exc:
            raise MalformedDataError(
                self._location,
                f"{exc} (after typed decode failed with: {typed_error})",
            ) from exc

        self._logger.info(
            "store_migration_started",
            location=self._location,
            previous_version=previous_version,
            target_version=self._version,
            reason=str(typed_error),
        )
        migrated = await self._migrate(previous_version, previous)
        self._logger.info(
            "store_migration_completed",
            location=self._location,
            previous_version=previous_version,
            target_version=self._version,
            emptied=migrated is None,
        )
        return migrated

    async def encode(self, value: T | None) -> None:
        if value is None:
            await delete_quietly(self._backend, self._version_location)
            await delete_quietly(self._backend, self._location)
            self._logger.debug("store_encode_cleared", location=self._location)
            return

        payload = self._format.encode_value(self._serializer, value)
        marker = self._format.encode_version(self._version)
        await write_all(self._backend, self._version_location, marker)
        await write_all(self._backend, self._location, payload)
        self._logger.debug(
            "store_encode_written",
            location=self._location,
            version=self._version,
            size=len(payload),
        )

    async def stored_version(self) -> int:
        """Return the version recorded next to the value (0 when unrecorded)."""
        marker = await read_optional(self._backend, self._version_location)
        if marker is None:
            return UNVERSIONED_VERSION
        try:
            return self._format.decode_version(marker)
        except SerializationError as exc:
            raise MalformedDataError(self._version_location, str(exc)) from exc

    async def _migrate(self, previous_version: int, previous: StructuredValue) -> T | None:
        try:
            result = self._migration(previous_version, previous)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise MigrationError(
                self._location,
                previous_version,
                f"{type(exc).__name__}: {exc}",
            ) from exc
        return cast("T | None", result)

    def __repr__(self) -> str:
        return (
            f"VersionedCodec({self._location!r}, version={self._version}, "
            f"format={self._format!r})"
        )


__all__ = [
    "Migration",
    "VersionedCodec",
    "default_migration",
    "version_marker_path",
]
