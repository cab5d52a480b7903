"""Helpers for stores that hold a list of items.

Every mutating helper goes through ``ValueStore.update`` and is therefore atomic
with respect to other operations on the same store instance.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import TypeVar

from valuestore.store import ValueStore

T = TypeVar("T")


async def get_or_empty(store: ValueStore[list[T]]) -> list[T]:
    """Return the stored list, or an empty list when nothing is stored."""
    items = await store.get()
    return list(items) if items is not None else []


async def item_at(store: ValueStore[list[T]], index: int) -> T | None:
    """Return the item at ``index`` (negative indexes allowed), or ``None``."""
    items = await store.get()
    if items is None or not -len(items) <= index < len(items):
        return None
    return items[index]


async def append(store: ValueStore[list[T]], *items: T) -> list[T] | None:
    """Append ``items``, starting from an empty list when nothing is stored."""
    return await store.update(lambda current: [*(current or []), *items])


async def remove(store: ValueStore[list[T]], *items: T) -> list[T] | None:
    """Drop every occurrence of ``items``; an empty store stays empty."""

    def without(current: list[T] | None) -> list[T] | None:
        if current is None:
            return None
        return [item for item in current if item not in items]

    return await store.update(without)


async def map_items(store: ValueStore[list[T]], transform: Callable[[T], T]) -> list[T] | None:
    def mapped(current: list[T] | None) -> list[T] | None:
        if current is None:
            return None
        return [transform(item) for item in current]

    return await store.update(mapped)


async def map_items_indexed(
    store: ValueStore[list[T]],
    transform: Callable[[int, T], T],
) -> list[T] | None:
    def mapped(current: list[T] | None) -> list[T] | None:
        if current is None:
            return None
        return [transform(index, item) for index, item in enumerate(current)]

    return await store.update(mapped)


async def updates_or_empty(store: ValueStore[list[T]]) -> AsyncIterator[list[T]]:
    """Like ``ValueStore.updates`` but yields ``[]`` instead of ``None``."""
    async for items in store.updates():
        yield list(items) if items is not None else []


__all__ = [
    "append",
    "get_or_empty",
    "item_at",
    "map_items",
    "map_items_indexed",
    "remove",
    "updates_or_empty",
]
