"""Storage backends consumed by codecs."""

from valuestore.storage.backend import FileSystemBackend, MemoryBackend, StorageBackend

__all__ = [
    "FileSystemBackend",
    "MemoryBackend",
    "StorageBackend",
]
