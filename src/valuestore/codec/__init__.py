"""Codecs: durable persistence of one value, with optional schema versioning."""

from valuestore.codec.base import Codec
from valuestore.codec.plain import FileCodec
from valuestore.codec.versioned import (
    Migration,
    VersionedCodec,
    default_migration,
    version_marker_path,
)

__all__ = [
    "Codec",
    "FileCodec",
    "Migration",
    "VersionedCodec",
    "default_migration",
    "version_marker_path",
]
