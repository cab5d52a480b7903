"""Serialization engine: structured form, typed serializers and byte formats."""

from valuestore.serialization.formats import Format, JsonFormat, YamlFormat, format_for_name
from valuestore.serialization.serializer import Serializer, TypeSerializer
from valuestore.serialization.structured import (
    StructuredScalar,
    StructuredValue,
    as_structured,
    canonical_json,
)

__all__ = [
    "Format",
    "JsonFormat",
    "Serializer",
    "StructuredScalar",
    "StructuredValue",
    "TypeSerializer",
    "YamlFormat",
    "as_structured",
    "canonical_json",
    "format_for_name",
]
