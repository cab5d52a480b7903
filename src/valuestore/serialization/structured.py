"""Structured intermediate form: the JSON value union used for loose decoding."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import NoReturn

from valuestore.constants import MAX_STRUCTURED_DEPTH
from valuestore.errors import SerializationError

StructuredScalar = str | int | float | bool | None
StructuredValue = StructuredScalar | list["StructuredValue"] | dict[str, "StructuredValue"]


def _fail(path: str, message: str) -> NoReturn:
    raise SerializationError(path, message)


def as_structured(value: object, path: str = "$", *, depth: int = 0) -> StructuredValue:
    """Validate ``value`` as a structured tree and return a normalized copy.

    Tuples become lists; mapping keys must be strings; floats must be finite.
    """

    if depth > MAX_STRUCTURED_DEPTH:
        _fail(path, f"nesting exceeds max depth {MAX_STRUCTURED_DEPTH}")

    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            _fail(path, "float values must be finite")
        return value
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return [
            as_structured(item, f"{path}[{index}]", depth=depth + 1)
            for index, item in enumerate(value)
        ]
    if isinstance(value, Mapping):
        parsed: dict[str, StructuredValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                _fail(path, f"object key must be string, got {type(key).__name__}")
            parsed[key] = as_structured(item, f"{path}.{key}", depth=depth + 1)
        return parsed

    _fail(path, f"value is not structured data ({type(value).__name__})")


def canonical_json(value: StructuredValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


__all__ = [
    "StructuredScalar",
    "StructuredValue",
    "as_structured",
    "canonical_json",
]
