from __future__ import annotations

import pytest

from tests.pets import KAT, MYLO, OREO, Cat, CountingCodec
from valuestore import lists
from valuestore.store import ValueStore


@pytest.fixture
def empty_store() -> ValueStore[list[Cat]]:
    return ValueStore(CountingCodec())


@pytest.fixture
def cats_store() -> ValueStore[list[Cat]]:
    return ValueStore(CountingCodec([MYLO, OREO, MYLO]))


async def test_get_or_empty(empty_store: ValueStore[list[Cat]]) -> None:
    assert await lists.get_or_empty(empty_store) == []


async def test_item_at_supports_negative_and_out_of_range_indexes(
    cats_store: ValueStore[list[Cat]],
) -> None:
    assert await lists.item_at(cats_store, 1) == OREO
    assert await lists.item_at(cats_store, -1) == MYLO
    assert await lists.item_at(cats_store, 3) is None
    assert await lists.item_at(cats_store, -4) is None


async def test_append_starts_from_empty(empty_store: ValueStore[list[Cat]]) -> None:
    assert await lists.append(empty_store, MYLO) == [MYLO]
    assert await lists.append(empty_store, OREO, KAT) == [MYLO, OREO, KAT]


async def test_remove_drops_every_occurrence(cats_store: ValueStore[list[Cat]]) -> None:
    assert await lists.remove(cats_store, MYLO) == [OREO]


async def test_remove_on_empty_store_stays_empty(empty_store: ValueStore[list[Cat]]) -> None:
    assert await lists.remove(empty_store, MYLO) is None
    assert await empty_store.get() is None


async def test_map_items(cats_store: ValueStore[list[Cat]]) -> None:
    older = await lists.map_items(cats_store, lambda cat: Cat(cat.name, cat.age + 1))

    assert older == [Cat("Mylo", 2), Cat("Oreo", 3), Cat("Mylo", 2)]


async def test_map_items_indexed(cats_store: ValueStore[list[Cat]]) -> None:
    numbered = await lists.map_items_indexed(
        cats_store, lambda index, cat: Cat(f"{index}:{cat.name}", cat.age)
    )

    assert [cat.name for cat in numbered or []] == ["0:Mylo", "1:Oreo", "2:Mylo"]


async def test_updates_or_empty_replaces_none(empty_store: ValueStore[list[Cat]]) -> None:
    stream = lists.updates_or_empty(empty_store)

    assert await anext(stream) == []
    await lists.append(empty_store, KAT)
    assert await anext(stream) == [KAT]
    await stream.aclose()
