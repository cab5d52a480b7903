"""Utility exports for filesystem helpers."""

from valuestore.utils.fs import atomic_write, remove_file

__all__ = [
    "atomic_write",
    "remove_file",
]
