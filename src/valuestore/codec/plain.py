"""Plain file codec: one value per location, no version tracking."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from valuestore.codec.base import delete_quietly, read_optional, write_all
from valuestore.errors import MalformedDataError, SerializationError
from valuestore.serialization.formats import Format, JsonFormat
from valuestore.storage.backend import FileSystemBackend

if TYPE_CHECKING:
    from valuestore.serialization.serializer import Serializer
    from valuestore.storage.backend import StorageBackend

T = TypeVar("T")


class FileCodec(Generic[T]):
    """Persist a value at a single location.

    A missing location decodes as ``None``. Bytes that do not decode as the target
    type raise ``MalformedDataError``; nothing is repaired or migrated.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        serializer: Serializer[T],
        *,
        format: Format | None = None,
        backend: StorageBackend | None = None,
        logger: Any | None = None,
    ) -> None:
        self._location = os.fspath(path)
        self._serializer = serializer
        self._format = format if format is not None else JsonFormat()
        self._backend = backend if backend is not None else FileSystemBackend()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def location(self) -> str:
        return self._location

    async def decode(self) -> T | None:
        data = await read_optional(self._backend, self._location)
        if data is None:
            self._logger.debug("store_decode_missing", location=self._location)
            return None
        try:
            return self._format.decode_value(self._serializer, data)
        except SerializationError as exc:
            raise MalformedDataError(self._location, str(exc)) from exc

    async def encode(self, value: T | None) -> None:
        if value is None:
            await delete_quietly(self._backend, self._location)
            self._logger.debug("store_encode_cleared", location=self._location)
            return
        payload = self._format.encode_value(self._serializer, value)
        await write_all(self._backend, self._location, payload)
        self._logger.debug("store_encode_written", location=self._location, size=len(payload))

    def __repr__(self) -> str:
        return f"FileCodec({self._location!r}, format={self._format!r})"


__all__ = ["FileCodec"]
