"""Typed serializers: convert Python values to and from the structured form.

``TypeSerializer`` derives the conversion from a type expression, so a store can be
declared for ``Cat``, ``list[Cat]`` or ``dict[str, int] | None`` without writing any
per-type code. Supported shapes:

- ``None``, ``bool``, ``int``, ``float``, ``str`` and ``datetime`` (ISO-8601);
- ``Enum`` subclasses (by value);
- dataclasses, whose fields are read from their resolved type hints;
- ``list[X]``, ``tuple[X, ...]``, fixed ``tuple[X, Y]``, ``set[X]``, ``frozenset[X]``;
- ``dict[str, X]`` (string or string-valued ``Enum`` keys);
- ``X | Y`` unions, ``Optional[X]``, ``Literal[...]`` and ``Any``.

Decoding failures raise ``SerializationError`` with a path to the failing field.
"""

from __future__ import annotations

import dataclasses
import math
import types
import typing
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Generic, NoReturn, Protocol, TypeVar, runtime_checkable

from valuestore.errors import SerializationError
from valuestore.serialization.structured import StructuredValue, as_structured, canonical_json

T = TypeVar("T")

_NONE_TYPE = type(None)
_UNION_ORIGINS: tuple[object, ...] = (typing.Union, types.UnionType)


@runtime_checkable
class Serializer(Protocol[T]):
    """Conversion between one Python type and the structured form."""

    def to_structured(self, value: T) -> StructuredValue: ...

    def from_structured(self, data: StructuredValue) -> T: ...


def _fail(path: str, message: str) -> NoReturn:
    raise SerializationError(path, message)


class TypeSerializer(Generic[T]):
    """Serializer driven by a type expression.

    Parameters
    ----------
    tp:
        Target type expression.
    ignore_unknown_keys:
        Skip dataclass keys that have no matching field instead of failing.
    encode_defaults:
        Emit dataclass fields whose value equals the declared default.
    """

    def __init__(
        self,
        tp: Any,
        *,
        ignore_unknown_keys: bool = True,
        encode_defaults: bool = True,
    ) -> None:
        self._tp = tp
        self._ignore_unknown_keys = ignore_unknown_keys
        self._encode_defaults = encode_defaults
        self._hints_cache: dict[type, dict[str, Any]] = {}

    @property
    def target_type(self) -> Any:
        return self._tp

    @property
    def type_name(self) -> str:
        return _type_name(self._tp)

    def to_structured(self, value: T) -> StructuredValue:
        return self._encode(value, self.type_name)

    def from_structured(self, data: StructuredValue) -> T:
        return typing.cast("T", self._decode(data, self._tp, self.type_name))

    def __repr__(self) -> str:
        return f"TypeSerializer({self.type_name})"

    def _encode(self, value: object, path: str) -> StructuredValue:
        if isinstance(value, Enum):
            return self._encode(value.value, path)
        if value is None or isinstance(value, (bool, int, str)):
            return typing.cast("StructuredValue", value)
        if isinstance(value, float):
            if not math.isfinite(value):
                _fail(path, "float values must be finite")
            return value
        if isinstance(value, datetime):
            return _datetime_to_text(value)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            out: dict[str, StructuredValue] = {}
            for field in dataclasses.fields(value):
                item = getattr(value, field.name)
                if not self._encode_defaults and _equals_default(field, item):
                    continue
                out[field.name] = self._encode(item, f"{path}.{field.name}")
            return out
        if isinstance(value, Mapping):
            mapped: dict[str, StructuredValue] = {}
            for key, item in value.items():
                name = key.value if isinstance(key, Enum) else key
                if not isinstance(name, str):
                    _fail(path, f"mapping keys must be strings, got {type(name).__name__}")
                mapped[name] = self._encode(item, f"{path}.{name}")
            return mapped
        if isinstance(value, (set, frozenset)):
            items = [self._encode(item, f"{path}[]") for item in value]
            return sorted(items, key=canonical_json)
        if isinstance(value, (list, tuple)):
            return [self._encode(item, f"{path}[{index}]") for index, item in enumerate(value)]

        _fail(path, f"cannot serialize value of type {type(value).__name__}")

    def _decode(self, data: StructuredValue, tp: Any, path: str) -> object:
        if tp is Any or tp is object:
            return as_structured(data, path)
        if tp is None or tp is _NONE_TYPE:
            if data is not None:
                _fail(path, f"expected null, got {_kind(data)}")
            return None

        origin = typing.get_origin(tp)
        if origin in _UNION_ORIGINS:
            return self._decode_union(data, typing.get_args(tp), path)
        if origin is typing.Literal:
            allowed = typing.get_args(tp)
            if not any(type(item) is type(data) and item == data for item in allowed):
                _fail(path, f"expected one of {list(allowed)!r}, got {data!r}")
            return data
        if origin is not None:
            return self._decode_generic(data, origin, typing.get_args(tp), path)

        if tp is bool:
            if not isinstance(data, bool):
                _fail(path, f"expected boolean, got {_kind(data)}")
            return data
        if tp is int:
            if isinstance(data, bool) or not isinstance(data, int):
                _fail(path, f"expected integer, got {_kind(data)}")
            return data
        if tp is float:
            if isinstance(data, bool) or not isinstance(data, (int, float)):
                _fail(path, f"expected number, got {_kind(data)}")
            try:
                return float(data)
            except OverflowError:
                _fail(path, "number is out of range for float")
        if tp is str:
            if not isinstance(data, str):
                _fail(path, f"expected string, got {_kind(data)}")
            return data
        if tp is datetime:
            return _datetime_from_text(data, path)
        if isinstance(tp, type) and issubclass(tp, Enum):
            try:
                return tp(data)
            except ValueError:
                allowed = ", ".join(repr(item.value) for item in tp)
                _fail(path, f"invalid value {data!r}; expected one of: {allowed}")
        if isinstance(tp, type) and dataclasses.is_dataclass(tp):
            return self._decode_dataclass(data, tp, path)
        if tp in (list, tuple, set, frozenset, dict):
            return self._decode_generic(data, tp, (), path)

        _fail(path, f"unsupported target type {_type_name(tp)}")

    def _decode_union(self, data: StructuredValue, members: tuple[Any, ...], path: str) -> object:
        if data is None and _NONE_TYPE in members:
            return None
        errors: list[str] = []
        for member in members:
            if member is _NONE_TYPE:
                continue
            try:
                return self._decode(data, member, path)
            except SerializationError as exc:
                errors.append(f"{_type_name(member)}: {exc.message}")
        _fail(path, "no union member matched (" + "; ".join(errors) + ")")

    def _decode_generic(
        self,
        data: StructuredValue,
        origin: Any,
        args: tuple[Any, ...],
        path: str,
    ) -> object:
        if origin in (dict, Mapping):
            if not isinstance(data, dict):
                _fail(path, f"expected object, got {_kind(data)}")
            key_tp, value_tp = args if args else (str, Any)
            return {
                self._decode_key(key, key_tp, path): self._decode(item, value_tp, f"{path}.{key}")
                for key, item in data.items()
            }

        if not isinstance(data, list):
            _fail(path, f"expected array, got {_kind(data)}")

        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return tuple(
                    self._decode(item, args[0], f"{path}[{index}]")
                    for index, item in enumerate(data)
                )
            if not args:
                return tuple(
                    as_structured(item, f"{path}[{index}]") for index, item in enumerate(data)
                )
            if len(args) != len(data):
                _fail(path, f"expected {len(args)} items, got {len(data)}")
            return tuple(
                self._decode(item, item_tp, f"{path}[{index}]")
                for index, (item, item_tp) in enumerate(zip(data, args, strict=True))
            )

        item_tp = args[0] if args else Any
        items = [self._decode(item, item_tp, f"{path}[{index}]") for index, item in enumerate(data)]
        if origin in (set, frozenset):
            return origin(items)
        if origin in (list, Sequence):
            return items
        _fail(path, f"unsupported container type {_type_name(origin)}")

    def _decode_key(self, key: str, key_tp: Any, path: str) -> object:
        if key_tp is str or key_tp is Any:
            return key
        if isinstance(key_tp, type) and issubclass(key_tp, Enum):
            return self._decode(key, key_tp, f"{path}.{key}")
        _fail(path, f"unsupported mapping key type {_type_name(key_tp)}")

    def _decode_dataclass(self, data: StructuredValue, tp: type, path: str) -> object:
        if not isinstance(data, dict):
            _fail(path, f"expected object, got {_kind(data)}")

        hints = self._type_hints(tp)
        init_fields = {field.name: field for field in dataclasses.fields(tp) if field.init}

        if not self._ignore_unknown_keys:
            unknown = sorted(key for key in data if key not in init_fields)
            if unknown:
                _fail(path, f"unexpected fields: {unknown}")

        kwargs: dict[str, object] = {}
        missing: list[str] = []
        for name, field in init_fields.items():
            if name in data:
                kwargs[name] = self._decode(data[name], hints.get(name, Any), f"{path}.{name}")
            elif (
                field.default is dataclasses.MISSING
                and field.default_factory is dataclasses.MISSING
            ):
                missing.append(name)
        if missing:
            _fail(path, f"missing required fields: {sorted(missing)}")

        try:
            return tp(**kwargs)
        except (TypeError, ValueError) as exc:
            _fail(path, f"cannot construct {tp.__name__}: {exc}")

    def _type_hints(self, tp: type) -> dict[str, Any]:
        cached = self._hints_cache.get(tp)
        if cached is None:
            cached = typing.get_type_hints(tp)
            self._hints_cache[tp] = cached
        return cached


def _equals_default(field: dataclasses.Field[Any], value: object) -> bool:
    if field.default is not dataclasses.MISSING:
        return bool(value == field.default)
    if field.default_factory is not dataclasses.MISSING:
        return bool(value == field.default_factory())
    return False


def _datetime_to_text(value: datetime) -> str:
    if value.tzinfo is None or value.utcoffset() is None:
        return value.isoformat(timespec="microseconds")
    normalized = value.astimezone(UTC)
    return normalized.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _datetime_from_text(data: StructuredValue, path: str) -> datetime:
    if not isinstance(data, str):
        _fail(path, f"expected ISO-8601 string, got {_kind(data)}")
    text = data[:-1] + "+00:00" if data.endswith("Z") else data
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        _fail(path, f"invalid ISO-8601 datetime: {data!r} ({exc})")


def _kind(data: object) -> str:
    if data is None:
        return "null"
    if isinstance(data, bool):
        return "boolean"
    if isinstance(data, (int, float)):
        return "number"
    if isinstance(data, str):
        return "string"
    if isinstance(data, list):
        return "array"
    if isinstance(data, dict):
        return "object"
    return type(data).__name__


def _type_name(tp: Any) -> str:
    if isinstance(tp, type) and typing.get_origin(tp) is None:
        return tp.__name__
    return repr(tp).replace("typing.", "")


__all__ = [
    "Serializer",
    "TypeSerializer",
]
