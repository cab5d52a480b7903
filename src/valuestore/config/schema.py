"""
valuestore — store settings schema.

File: src/valuestore/config/schema.py

Purpose
- Define the recognized store settings, their defaults, and strict validation.

Functional requirements
- Collect every validation issue with a dotted path instead of failing on the first.
- Reject unknown keys so typos do not silently fall back to defaults.

Non-functional requirements
- Deterministic issue ordering.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, NotRequired, TypedDict

from valuestore.constants import CONFIG_SCHEMA_VERSION, SUPPORTED_FORMATS

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION


class StoreSettings(TypedDict):
    path: str
    format: str
    enable_cache: bool
    create_parents: bool
    version: NotRequired[int]
    version_path: NotRequired[str]


DEFAULT_SETTINGS: Final[dict[str, Any]] = {
    "format": "json",
    "enable_cache": True,
    "create_parents": True,
}

PATH_FIELDS: Final[tuple[str, ...]] = ("path", "version_path")

_KNOWN_KEYS: Final[frozenset[str]] = frozenset(
    {"path", "format", "enable_cache", "create_parents", "version", "version_path"}
)


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized settings when no issues were found."""

    settings: StoreSettings | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.settings is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict settings validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid store settings:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_settings() -> dict[str, Any]:
    """Return a copy of the built-in defaults (``path`` has no default)."""

    return copy.deepcopy(DEFAULT_SETTINGS)


def migration_guidance(found_version: int) -> str:
    """Return guidance for a config file written under another schema version."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "update valuestore.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade valuestore"
        )
    return "schema version is current"


def validate_settings(payload: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate settings and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    if not isinstance(payload, Mapping):
        issues.add("store", f"expected object, got {type(payload).__name__}")
        return ConfigValidationResult(settings=None, issues=issues.items())

    for key in sorted(str(item) for item in payload):
        if key not in _KNOWN_KEYS:
            issues.add(f"store.{key}", "unknown setting")

    path = _as_path_text(payload.get("path"), "store.path", issues, required=True)

    format_name = payload.get("format", DEFAULT_SETTINGS["format"])
    if not isinstance(format_name, str):
        issues.add("store.format", f"expected string, got {type(format_name).__name__}")
    elif format_name.strip().lower() not in SUPPORTED_FORMATS:
        allowed = ", ".join(SUPPORTED_FORMATS)
        issues.add(
            "store.format",
            f"unsupported format {format_name!r}; expected one of: {allowed}",
        )

    enable_cache = _as_bool(
        payload.get("enable_cache", DEFAULT_SETTINGS["enable_cache"]),
        "store.enable_cache",
        issues,
    )
    create_parents = _as_bool(
        payload.get("create_parents", DEFAULT_SETTINGS["create_parents"]),
        "store.create_parents",
        issues,
    )

    version: int | None = None
    if "version" in payload and payload["version"] is not None:
        raw_version = payload["version"]
        if isinstance(raw_version, bool) or not isinstance(raw_version, int):
            issues.add("store.version", f"expected integer, got {type(raw_version).__name__}")
        elif raw_version < 0:
            issues.add("store.version", "must be >= 0")
        else:
            version = raw_version

    version_path: str | None = None
    if "version_path" in payload and payload["version_path"] is not None:
        version_path = _as_path_text(
            payload["version_path"], "store.version_path", issues, required=True
        )
        if "version" not in payload or payload["version"] is None:
            issues.add("store.version_path", "only allowed together with store.version")
        elif version_path is not None and version_path == path:
            issues.add("store.version_path", "must differ from store.path")

    if issues.has_issues or path is None or enable_cache is None or create_parents is None:
        return ConfigValidationResult(settings=None, issues=issues.items())

    settings: StoreSettings = {
        "path": path,
        "format": str(format_name).strip().lower(),
        "enable_cache": enable_cache,
        "create_parents": create_parents,
    }
    if version is not None:
        settings["version"] = version
    if version_path is not None:
        settings["version_path"] = version_path
    return ConfigValidationResult(settings=settings, issues=())


def assert_valid_settings(payload: Mapping[str, object] | object) -> StoreSettings:
    """Validate settings and raise ``ConfigValidationError`` on failure."""

    result = validate_settings(payload)
    if result.settings is None:
        raise ConfigValidationError(result.issues)
    return result.settings


def _as_path_text(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    required: bool,
) -> str | None:
    if value is None:
        if required:
            issues.add(path, "is required")
        return None
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    normalized = value.strip()
    if not normalized:
        issues.add(path, "must not be empty")
        return None
    if "\x00" in normalized:
        issues.add(path, "must not contain NUL bytes")
        return None
    return normalized


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


__all__ = [
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_SETTINGS",
    "PATH_FIELDS",
    "StoreSettings",
    "assert_valid_settings",
    "default_settings",
    "migration_guidance",
    "validate_settings",
]
