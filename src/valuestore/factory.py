"""Convenience constructors wiring a serializer, a codec and a ``ValueStore``."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, TypeVar

from valuestore.codec.plain import FileCodec
from valuestore.codec.versioned import Migration, VersionedCodec, default_migration
from valuestore.constants import DEFAULT_TARGET_VERSION
from valuestore.serialization.formats import Format, format_for_name
from valuestore.serialization.serializer import Serializer, TypeSerializer
from valuestore.storage.backend import FileSystemBackend
from valuestore.store import ValueStore

if TYPE_CHECKING:
    from valuestore.config.schema import StoreSettings
    from valuestore.storage.backend import StorageBackend

T = TypeVar("T")


def store_of(
    path: str | os.PathLike[str],
    value_type: Any,
    *,
    default: T | None = None,
    enable_cache: bool = True,
    format: Format | None = None,
    serializer: Serializer[T] | None = None,
    backend: StorageBackend | None = None,
) -> ValueStore[T]:
    """Create a store persisting ``value_type`` at ``path`` without versioning."""

    codec: FileCodec[T] = FileCodec(
        path,
        serializer if serializer is not None else TypeSerializer(value_type),
        format=format,
        backend=backend,
    )
    return ValueStore(codec, default=default, enable_cache=enable_cache)


def versioned_store_of(
    path: str | os.PathLike[str],
    value_type: Any,
    version: int = DEFAULT_TARGET_VERSION,
    *,
    default: T | None = None,
    enable_cache: bool = True,
    migration: Migration[T] | None = None,
    version_path: str | os.PathLike[str] | None = None,
    format: Format | None = None,
    serializer: Serializer[T] | None = None,
    backend: StorageBackend | None = None,
) -> ValueStore[T]:
    """Create a store that records ``version`` next to the value.

    An extra file is written at ``version_path`` (``<path>.version`` by default).
    Without a ``migration``, stale values are replaced by ``default``.
    """

    codec: VersionedCodec[T] = VersionedCodec(
        path,
        serializer if serializer is not None else TypeSerializer(value_type),
        version=version,
        migration=migration if migration is not None else default_migration(default),
        version_path=version_path,
        format=format,
        backend=backend,
    )
    return ValueStore(codec, default=default, enable_cache=enable_cache)


def store_from_settings(
    settings: StoreSettings,
    value_type: Any,
    *,
    default: T | None = None,
    migration: Migration[T] | None = None,
    serializer: Serializer[T] | None = None,
    backend: StorageBackend | None = None,
) -> ValueStore[T]:
    """Create a plain or versioned store from validated settings.

    A ``version`` entry selects the versioned codec.
    """

    resolved_backend = (
        backend
        if backend is not None
        else FileSystemBackend(create_parents=settings["create_parents"])
    )
    format = format_for_name(settings["format"])
    if "version" not in settings:
        if migration is not None:
            raise ValueError("migration requires a versioned store (set store.version)")
        return store_of(
            settings["path"],
            value_type,
            default=default,
            enable_cache=settings["enable_cache"],
            format=format,
            serializer=serializer,
            backend=resolved_backend,
        )
    return versioned_store_of(
        settings["path"],
        value_type,
        settings["version"],
        default=default,
        enable_cache=settings["enable_cache"],
        migration=migration,
        version_path=settings.get("version_path"),
        format=format,
        serializer=serializer,
        backend=resolved_backend,
    )


__all__ = [
    "store_from_settings",
    "store_of",
    "versioned_store_of",
]
