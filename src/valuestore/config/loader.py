"""
valuestore — store settings loader.

File: src/valuestore/config/loader.py

Purpose
- Load effective store settings from defaults, a TOML file, env vars, and overrides.

What should be included in this file
- Precedence logic: overrides > env (VALUESTORE_) > file > defaults.
- TOML loading via ``tomllib`` from the ``[store]`` table.
- Path normalization relative to the config file location.

Functional requirements
- Reject invalid settings via schema validation.

Non-functional requirements
- Keep loading deterministic and reproducible.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from valuestore.config.schema import (
    PATH_FIELDS,
    ConfigSchemaVersion,
    StoreSettings,
    assert_valid_settings,
    default_settings,
    migration_guidance,
)
from valuestore.constants import DEFAULT_CONFIG_FILE, ENV_PREFIX

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ENV_BINDINGS: Final[tuple[tuple[str, Literal["str", "int", "bool"]], ...]] = (
    ("path", "str"),
    ("format", "str"),
    ("enable_cache", "bool"),
    ("create_parents", "bool"),
    ("version", "int"),
    ("version_path", "str"),
)


class ConfigLoadError(ValueError):
    """Raised when settings cannot be loaded or env values cannot be coerced."""


def load_settings(
    config_path: str | Path | None = None,
    *,
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> StoreSettings:
    """Load effective settings with precedence: overrides > env > file > defaults."""

    resolved_path = _resolve_config_path(config_path)
    explicit_path = config_path is not None
    env_map = dict(os.environ if environ is None else environ)

    merged = default_settings()
    merged.update(_load_store_table(resolved_path, required=explicit_path))
    merged.update(_collect_env_overrides(env_map))
    merged.update({key: value for key, value in (overrides or {}).items() if value is not None})

    normalized = normalize_paths(merged, base_dir=resolved_path.parent)
    return assert_valid_settings(normalized)


def normalize_paths(settings: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve relative path fields against ``base_dir``."""

    materialized = dict(settings)
    for field_name in PATH_FIELDS:
        value = materialized.get(field_name)
        if isinstance(value, str) and value.strip():
            materialized[field_name] = _normalize_one_path(value.strip(), base_dir)
    return materialized


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_store_table(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    schema_version = parsed.get("schema_version", ConfigSchemaVersion)
    if schema_version != ConfigSchemaVersion:
        if isinstance(schema_version, bool) or not isinstance(schema_version, int):
            raise ConfigLoadError(f"schema_version must be an integer in {path}")
        raise ConfigLoadError(f"{path}: {migration_guidance(schema_version)}")

    table = parsed.get("store", {})
    if not isinstance(table, dict):
        raise ConfigLoadError(f"[store] must be a table in {path}")
    return dict(table)


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for key, value_type in _ENV_BINDINGS:
        env_name = _env_name_for_key(key)
        raw = environ.get(env_name)
        if raw is None:
            continue
        overrides[key] = _coerce_env(raw, value_type, env_name)
    return overrides


def _coerce_env(raw: str, value_type: Literal["str", "int", "bool"], env_name: str) -> object:
    value = raw.strip()
    if value_type == "str":
        return value
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{env_name} must be an integer") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(f"{env_name} must be a boolean (true/false/1/0/yes/no/on/off)")


def _normalize_one_path(raw: str, base_dir: Path) -> str:
    expanded = os.path.expandvars(raw)
    candidate = Path(expanded).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    normalized = Path(os.path.normpath(str(candidate)))
    return normalized.as_posix()


def _env_name_for_key(key: str) -> str:
    return ENV_PREFIX + key.upper()


__all__ = [
    "ConfigLoadError",
    "load_settings",
    "normalize_paths",
]
