"""Stable constants shared across codecs, stores and configuration."""

from __future__ import annotations

from typing import Final

# Version marker files live next to the value file.
VERSION_MARKER_SUFFIX: Final[str] = ".version"
DEFAULT_TARGET_VERSION: Final[int] = 0
# Version assumed when a stored value has no marker at all.
UNVERSIONED_VERSION: Final[int] = 0

# Structured form limits enforced by loose decoding.
MAX_STRUCTURED_DEPTH: Final[int] = 64

# Configuration.
CONFIG_SCHEMA_VERSION: Final[int] = 1
DEFAULT_CONFIG_FILE: Final[str] = "valuestore.toml"
ENV_PREFIX: Final[str] = "VALUESTORE_"
SUPPORTED_FORMATS: Final[tuple[str, ...]] = ("json", "yaml")

# Change notifications.
DEFAULT_UPDATES_QUEUE_SIZE: Final[int] = 1

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_TARGET_VERSION",
    "DEFAULT_UPDATES_QUEUE_SIZE",
    "ENV_PREFIX",
    "MAX_STRUCTURED_DEPTH",
    "SUPPORTED_FORMATS",
    "UNVERSIONED_VERSION",
    "VERSION_MARKER_SUFFIX",
]
