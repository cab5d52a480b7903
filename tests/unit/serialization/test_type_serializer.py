"""TypeSerializer conversions between typed values and the structured form."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from enum import IntEnum, StrEnum
from typing import Any, Literal

import pytest

from tests.pets import MYLO, OREO, Cat, Mood, Owner
from valuestore.errors import SerializationError
from valuestore.serialization.serializer import Serializer, TypeSerializer


class _Color(StrEnum):
    RED = "red"
    BLUE = "blue"


class _Priority(IntEnum):
    LOW = 1
    HIGH = 2


@dataclass(frozen=True)
class _Paint:
    color: _Color
    priority: _Priority = _Priority.LOW


@dataclass(frozen=True)
class _Positive:
    value: int

    def __post_init__(self) -> None:
        if self.value <= 0:
            raise ValueError("value must be positive")


def test_dataclass_roundtrip_with_nested_fields() -> None:
    owner = Owner(name="Ada", cats=[MYLO, OREO], mood=Mood.GRUMPY, nickname="A")
    serializer: TypeSerializer[Owner] = TypeSerializer(Owner)

    data = serializer.to_structured(owner)

    assert data == {
        "name": "Ada",
        "cats": [{"name": "Mylo", "age": 1}, {"name": "Oreo", "age": 2}],
        "mood": "grumpy",
        "nickname": "A",
    }
    assert serializer.from_structured(data) == owner


def test_missing_optional_fields_use_dataclass_defaults() -> None:
    serializer: TypeSerializer[Owner] = TypeSerializer(Owner)

    assert serializer.from_structured({"name": "Bo"}) == Owner(name="Bo")


def test_missing_required_field_reports_path() -> None:
    message = r"missing required fields: \['name'\]"
    with pytest.raises(SerializationError, match=message) as excinfo:
        TypeSerializer(Cat).from_structured({"age": 3})

    assert excinfo.value.path == "Cat"


def test_nested_type_mismatch_reports_field_path() -> None:
    serializer: TypeSerializer[Owner] = TypeSerializer(Owner)

    with pytest.raises(SerializationError) as excinfo:
        serializer.from_structured({"name": "Ada", "cats": [{"name": "Mylo", "age": "one"}]})

    assert excinfo.value.path == "Owner.cats[0].age"
    assert "expected integer" in excinfo.value.message


def test_unknown_keys_are_ignored_unless_strict() -> None:
    data = {"name": "Mylo", "age": 1, "color": "black"}

    assert TypeSerializer(Cat).from_structured(data) == MYLO
    with pytest.raises(SerializationError, match="unexpected fields: \\['color'\\]"):
        TypeSerializer(Cat, ignore_unknown_keys=False).from_structured(data)


def test_encode_defaults_can_be_skipped() -> None:
    serializer: TypeSerializer[Cat] = TypeSerializer(Cat, encode_defaults=False)

    assert serializer.to_structured(Cat(name="Tom")) == {"name": "Tom"}
    assert serializer.to_structured(MYLO) == {"name": "Mylo", "age": 1}


def test_constructor_validation_errors_become_serialization_errors() -> None:
    with pytest.raises(SerializationError, match="cannot construct _Positive"):
        TypeSerializer(_Positive).from_structured({"value": 0})


def test_bool_is_not_accepted_as_integer() -> None:
    with pytest.raises(SerializationError, match="expected integer, got boolean"):
        TypeSerializer(int).from_structured(True)


def test_float_accepts_integers_but_rejects_non_finite_values() -> None:
    assert TypeSerializer(float).from_structured(3) == 3.0
    with pytest.raises(SerializationError, match="finite"):
        TypeSerializer(float).to_structured(float("nan"))


def test_str_and_int_enums_encode_as_plain_values() -> None:
    serializer: TypeSerializer[_Paint] = TypeSerializer(_Paint)

    data = serializer.to_structured(_Paint(_Color.BLUE, _Priority.HIGH))

    assert data == {"color": "blue", "priority": 2}
    assert isinstance(data, dict)
    assert type(data["color"]) is str
    assert type(data["priority"]) is int
    assert serializer.from_structured(data) == _Paint(_Color.BLUE, _Priority.HIGH)


def test_float_rejects_integers_beyond_float_range() -> None:
    with pytest.raises(SerializationError, match="out of range for float"):
        TypeSerializer(float).from_structured(10**400)


def test_optional_and_union_types() -> None:
    optional: TypeSerializer[int | None] = TypeSerializer(int | None)
    union: TypeSerializer[int | str] = TypeSerializer(int | str)

    assert optional.from_structured(None) is None
    assert optional.from_structured(4) == 4
    assert union.from_structured("four") == "four"
    with pytest.raises(SerializationError, match="no union member matched"):
        union.from_structured([1])


def test_literal_requires_exact_type_match() -> None:
    serializer: TypeSerializer[Any] = TypeSerializer(Literal[1, "one"])

    assert serializer.from_structured(1) == 1
    assert serializer.from_structured("one") == "one"
    with pytest.raises(SerializationError, match="expected one of"):
        serializer.from_structured(True)


def test_enum_values_and_invalid_members() -> None:
    serializer: TypeSerializer[Mood] = TypeSerializer(Mood)

    assert serializer.to_structured(Mood.CALM) == "calm"
    assert serializer.from_structured("grumpy") is Mood.GRUMPY
    with pytest.raises(SerializationError, match="expected one of: 'calm', 'grumpy'"):
        serializer.from_structured("sleepy")


def test_datetime_is_written_as_utc_iso_text() -> None:
    serializer: TypeSerializer[datetime] = TypeSerializer(datetime)
    moment = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))

    text = serializer.to_structured(moment)

    assert text == "2024-05-01T12:30:00.000000Z"
    assert serializer.from_structured(text) == moment.astimezone(UTC)


def test_containers_roundtrip() -> None:
    tags: TypeSerializer[set[str]] = TypeSerializer(set[str])
    pair: TypeSerializer[tuple[str, int]] = TypeSerializer(tuple[str, int])
    by_mood: TypeSerializer[dict[Mood, list[Cat]]] = TypeSerializer(dict[Mood, list[Cat]])

    assert tags.to_structured({"b", "a", "c"}) == ["a", "b", "c"]
    assert tags.from_structured(["a", "b"]) == {"a", "b"}
    assert pair.from_structured(["Mylo", 1]) == ("Mylo", 1)
    assert by_mood.from_structured({"calm": [{"name": "Mylo", "age": 1}]}) == {
        Mood.CALM: [MYLO]
    }


def test_fixed_tuple_length_is_checked() -> None:
    with pytest.raises(SerializationError, match="expected 2 items, got 3"):
        TypeSerializer(tuple[str, int]).from_structured(["Mylo", 1, 2])


def test_any_passes_structured_data_through() -> None:
    serializer: TypeSerializer[Any] = TypeSerializer(Any)

    assert serializer.from_structured({"a": [1, 2.5, None]}) == {"a": [1, 2.5, None]}


def test_unsupported_values_fail_to_encode() -> None:
    with pytest.raises(SerializationError, match="cannot serialize value of type object"):
        TypeSerializer(Any).to_structured(object())


def test_type_serializer_satisfies_protocol() -> None:
    serializer: TypeSerializer[list[Cat]] = TypeSerializer(list[Cat])

    assert isinstance(serializer, Serializer)
    assert serializer.type_name == "list[tests.pets.Cat]"
    assert serializer.target_type == list[Cat]
