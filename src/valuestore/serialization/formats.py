"""Serialization engines turning structured values into bytes and back.

A ``Format`` only knows the structured form; typed conversion is delegated to a
``Serializer``. Both layers raise ``SerializationError`` and leave it to the codecs
to attach the storage location.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, NoReturn, TypeVar

import yaml

from valuestore.errors import SerializationError
from valuestore.serialization.structured import StructuredValue, as_structured

if TYPE_CHECKING:
    from valuestore.serialization.serializer import Serializer

T = TypeVar("T")


def _fail(message: str) -> NoReturn:
    raise SerializationError("$", message)


class Format(ABC):
    """Byte-level encoding of the structured form."""

    name: str = "abstract"

    @abstractmethod
    def dumps(self, value: StructuredValue) -> bytes:
        """Encode a structured value to bytes."""

    @abstractmethod
    def loads(self, data: bytes) -> StructuredValue:
        """Decode bytes to a structured value, raising ``SerializationError``."""

    def encode_value(self, serializer: Serializer[T], value: T) -> bytes:
        return self.dumps(serializer.to_structured(value))

    def decode_value(self, serializer: Serializer[T], data: bytes) -> T:
        return serializer.from_structured(self.loads(data))

    def decode_structured(self, data: bytes) -> StructuredValue:
        """Format-tolerant decode used as migration input."""
        return self.loads(data)

    def encode_version(self, version: int) -> bytes:
        return self.dumps(version)

    def decode_version(self, data: bytes) -> int:
        parsed = self.loads(data)
        if isinstance(parsed, bool) or not isinstance(parsed, int):
            _fail(f"version marker must be an integer, got {parsed!r}")
        return parsed

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class JsonFormat(Format):
    """Canonical JSON: sorted keys, UTF-8, no NaN or Infinity."""

    name = "json"

    def __init__(self, *, indent: int | None = None) -> None:
        self._indent = indent

    def dumps(self, value: StructuredValue) -> bytes:
        separators = (",", ":") if self._indent is None else (",", ": ")
        try:
            text = json.dumps(
                value,
                sort_keys=True,
                ensure_ascii=False,
                allow_nan=False,
                indent=self._indent,
                separators=separators,
            )
        except (TypeError, ValueError) as exc:
            _fail(f"cannot encode JSON: {exc}")
        return (text + "\n").encode("utf-8")

    def loads(self, data: bytes) -> StructuredValue:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            _fail(f"invalid UTF-8: {exc}")
        try:
            parsed = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            _fail(f"invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})")
        except RecursionError:
            _fail("invalid JSON: nesting too deep")
        except SerializationError:
            raise
        except ValueError as exc:
            _fail(f"invalid JSON: {exc}")
        return as_structured(parsed)

    def __repr__(self) -> str:
        return f"JsonFormat(indent={self._indent!r})"


class YamlFormat(Format):
    """YAML via PyYAML's safe loader and dumper."""

    name = "yaml"

    def dumps(self, value: StructuredValue) -> bytes:
        try:
            text = yaml.safe_dump(value, sort_keys=True, allow_unicode=True)
        except yaml.YAMLError as exc:
            _fail(f"cannot encode YAML: {exc}")
        return text.encode("utf-8")

    def loads(self, data: bytes) -> StructuredValue:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            _fail(f"invalid UTF-8: {exc}")
        try:
            parsed = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            _fail(f"invalid YAML: {exc}")
        except RecursionError:
            _fail("invalid YAML: nesting too deep")
        except ValueError as exc:
            _fail(f"invalid YAML: {exc}")
        return as_structured(parsed)


def _reject_constant(token: str) -> NoReturn:
    _fail(f"non-finite number {token} is not allowed")


def format_for_name(name: str) -> Format:
    """Return the built-in format registered under ``name``."""

    normalized = name.strip().lower()
    if normalized == JsonFormat.name:
        return JsonFormat()
    if normalized == YamlFormat.name:
        return YamlFormat()
    raise ValueError(f"unsupported format {name!r}; expected one of: json, yaml")


__all__ = [
    "Format",
    "JsonFormat",
    "YamlFormat",
    "format_for_name",
]
