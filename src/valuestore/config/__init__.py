"""
valuestore config package public API.

File: src/valuestore/config/__init__.py

Purpose
- Export settings loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``valuestore.toml`` + ``VALUESTORE_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from valuestore.config.loader import ConfigLoadError, load_settings, normalize_paths
from valuestore.config.schema import (
    DEFAULT_SETTINGS,
    PATH_FIELDS,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    StoreSettings,
    assert_valid_settings,
    default_settings,
    migration_guidance,
    validate_settings,
)

__all__ = [
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_SETTINGS",
    "PATH_FIELDS",
    "StoreSettings",
    "assert_valid_settings",
    "default_settings",
    "load_settings",
    "migration_guidance",
    "normalize_paths",
    "validate_settings",
]
