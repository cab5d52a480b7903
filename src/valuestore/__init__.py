"""
valuestore — persistent single-value store

File: src/valuestore/__init__.py

Purpose
- Package root. Keep one typed value durably on disk with get/set/update access,
  an optional in-memory cache, and schema-versioned migration of stale data.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from valuestore.codec import (
    Codec,
    FileCodec,
    Migration,
    VersionedCodec,
    default_migration,
    version_marker_path,
)
from valuestore.errors import (
    MalformedDataError,
    MigrationError,
    SerializationError,
    ValueStoreError,
)
from valuestore.factory import store_from_settings, store_of, versioned_store_of
from valuestore.serialization import (
    Format,
    JsonFormat,
    Serializer,
    StructuredValue,
    TypeSerializer,
    YamlFormat,
)
from valuestore.storage import FileSystemBackend, MemoryBackend, StorageBackend
from valuestore.store import ValueStore

__version__ = "0.1.0"

__all__ = [
    "Codec",
    "FileCodec",
    "FileSystemBackend",
    "Format",
    "JsonFormat",
    "MalformedDataError",
    "MemoryBackend",
    "Migration",
    "MigrationError",
    "SerializationError",
    "Serializer",
    "StorageBackend",
    "StructuredValue",
    "TypeSerializer",
    "ValueStore",
    "ValueStoreError",
    "VersionedCodec",
    "YamlFormat",
    "__version__",
    "default_migration",
    "store_from_settings",
    "store_of",
    "version_marker_path",
    "versioned_store_of",
]
