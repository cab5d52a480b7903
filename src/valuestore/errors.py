"""Exception hierarchy for value store failures.

A missing storage location is never an error at the codec boundary: backends raise
``FileNotFoundError`` and codecs turn it into ``None``. Everything else that goes
wrong either surfaces as one of the types below or propagates unchanged.
"""

from __future__ import annotations


class ValueStoreError(Exception):
    """Base exception for all value store failures."""


class MalformedDataError(ValueStoreError, ValueError):
    """Raised when stored bytes exist but cannot be parsed as the expected form."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"malformed data at {location}: {reason}")


class MigrationError(ValueStoreError):
    """Raised when the migration function fails for a stale stored value."""

    def __init__(self, location: str, previous_version: int | None, reason: str) -> None:
        self.location = location
        self.previous_version = previous_version
        self.reason = reason
        super().__init__(
            f"migration from version {previous_version} failed for {location}: {reason}"
        )


class SerializationError(ValueError):
    """Raised by serializers when structured data does not match the target type.

    ``path`` is a dotted/indexed pointer to the offending field, e.g. ``Cat.owner.age``.
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


__all__ = [
    "MalformedDataError",
    "MigrationError",
    "SerializationError",
    "ValueStoreError",
]
