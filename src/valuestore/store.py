"""
valuestore — single-value store

File: src/valuestore/store.py

Purpose
- Own the in-memory snapshot of one persisted value and serialize access to it.

Functional requirements
- ``get``/``set``/``update``/``delete``/``reset`` run one at a time per instance,
  in the order they were issued.
- The snapshot only changes after the codec finished writing, so a failed write
  leaves the last durable value cached.
- Cancelling a caller does not cancel its write; the next operation starts only
  after storage has settled.
- ``updates()`` subscribers see the current value, then every committed change.

Non-functional requirements
- No I/O in the constructor; nothing is read until the first ``get``.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

import structlog

from valuestore.constants import DEFAULT_UPDATES_QUEUE_SIZE

if TYPE_CHECKING:
    from valuestore.codec.base import Codec

T = TypeVar("T")

Transform = Callable[[T | None], T | None | Awaitable[T | None]]


@dataclass(eq=False, slots=True)
class _Subscription(Generic[T]):
    queue: asyncio.Queue[T | None] = field(repr=False)
    dropped: int = 0

    def offer(self, value: T | None) -> None:
        # Conflate: a slow subscriber only needs the latest value.
        while True:
            try:
                self.queue.put_nowait(value)
                return
            except asyncio.QueueFull:
                try:
                    self.queue.get_nowait()
                except asyncio.QueueEmpty:
                    continue
                self.dropped += 1


class ValueStore(Generic[T]):
    """Cached, lock-guarded access to one value persisted by a codec.

    ``default`` is returned whenever the codec reports that nothing is stored.
    With ``enable_cache=False`` every ``get`` goes through the codec.
    """

    def __init__(
        self,
        codec: Codec[T],
        *,
        default: T | None = None,
        enable_cache: bool = True,
        updates_queue_size: int = DEFAULT_UPDATES_QUEUE_SIZE,
        logger: Any | None = None,
    ) -> None:
        if not isinstance(updates_queue_size, int) or updates_queue_size <= 0:
            raise ValueError("updates_queue_size must be > 0")
        self._codec = codec
        self._default = default
        self._enable_cache = enable_cache
        self._updates_queue_size = updates_queue_size
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._lock = asyncio.Lock()
        self._snapshot: T | None = None
        self._subscriptions: set[_Subscription[T]] = set()

    @property
    def codec(self) -> Codec[T]:
        return self._codec

    @property
    def default(self) -> T | None:
        return self._default

    @property
    def enable_cache(self) -> bool:
        return self._enable_cache

    @property
    def cached(self) -> T | None:
        """Snapshot held in memory, without touching storage."""
        return self._snapshot

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def get(self) -> T | None:
        async with self._lock:
            return await self._read()

    async def set(self, value: T | None) -> None:
        async with self._lock:
            await self._write(value)

    async def update(self, transform: Transform[T]) -> T | None:
        """Atomically replace the value with ``transform(current)`` and return it.

        ``transform`` may be a plain or a coroutine function. If it raises, nothing
        is written and the error propagates.
        """

        async with self._lock:
            current = await self._read()
            result = transform(current)
            if inspect.isawaitable(result):
                result = await result
            updated = cast("T | None", result)
            await self._write(updated)
            return updated

    async def delete(self) -> None:
        """Clear persisted state; the next ``get`` yields ``default``."""
        await self.set(None)

    async def reset(self) -> None:
        """Persist ``default`` (clearing storage when there is no default)."""
        await self.set(self._default)

    async def updates(self) -> AsyncIterator[T | None]:
        """Yield the current value, then each value committed by this instance."""
        subscription: _Subscription[T] = _Subscription(
            queue=asyncio.Queue(maxsize=self._updates_queue_size)
        )
        async with self._lock:
            current = await self._read()
            self._subscriptions.add(subscription)
        try:
            yield current
            while True:
                yield await subscription.queue.get()
        finally:
            self._subscriptions.discard(subscription)

    async def _read(self) -> T | None:
        if self._enable_cache and self._snapshot is not None:
            return self._snapshot
        decoded = await self._codec.decode()
        value = decoded if decoded is not None else self._default
        if self._enable_cache:
            self._snapshot = value
        return value

    async def _write(self, value: T | None) -> None:
        # Storage must settle before the lock is released, even when cancelled.
        encoding = asyncio.ensure_future(self._codec.encode(value))
        try:
            await asyncio.shield(encoding)
        except asyncio.CancelledError:
            while not encoding.done():
                with contextlib.suppress(asyncio.CancelledError):
                    await asyncio.wait({encoding})
            if not encoding.cancelled() and encoding.exception() is None:
                self._commit(value)
            raise
        self._commit(value)

    def _commit(self, value: T | None) -> None:
        if self._enable_cache:
            self._snapshot = value
        self._logger.debug("store_value_committed", cleared=value is None)
        visible = value if value is not None else self._default
        for subscription in tuple(self._subscriptions):
            subscription.offer(visible)

    def __repr__(self) -> str:
        return f"ValueStore({self._codec!r}, enable_cache={self._enable_cache!r})"


__all__ = [
    "Transform",
    "ValueStore",
]
