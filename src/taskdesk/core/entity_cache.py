# src/taskdesk/core/entity_cache.py

"""
Keyed, memoizing resolver for secondary entities (e.g. comment authors).

- one in-flight lookup per key: concurrent resolve(k) calls share it
- resolved entries are served without a request
- failed lookups read as None ("unknown") and are retried by the next
  resolve(k); ensure_resolved() only retries them when asked to

Lookups for different keys run independently and may settle in any order.
Entries are settled in place, so an entry detached by clear()/invalidate()
settles into nothing.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

from .errors import SyncError, TransportError

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class CacheState(StrEnum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(slots=True)
class CacheEntry(Generic[K, V]):
    key: K
    state: CacheState = CacheState.PENDING
    value: V | None = None
    error: SyncError | None = None
    lookup: asyncio.Task[V | None] | None = field(default=None, repr=False)


class EntityCache(Generic[K, V]):
    def __init__(self, loader: Callable[[K], Awaitable[V]], *, name: str = "entity") -> None:
        self._loader = loader
        self._name = name
        self._entries: dict[K, CacheEntry[K, V]] = {}
        self.lookups_started = 0

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def state(self, key: K) -> CacheState | None:
        entry = self._entries.get(key)
        return None if entry is None else entry.state

    def peek(self, key: K) -> V | None:
        """Synchronous read: the value if resolved, else None. Never fetches."""
        entry = self._entries.get(key)
        if entry is None or entry.state != CacheState.RESOLVED:
            return None
        return entry.value

    def error(self, key: K) -> SyncError | None:
        entry = self._entries.get(key)
        return None if entry is None else entry.error

    async def resolve(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is not None:
            if entry.state == CacheState.RESOLVED:
                return entry.value
            if entry.state == CacheState.PENDING and entry.lookup is not None:
                # shield: one caller going away must not kill the shared lookup
                return await asyncio.shield(entry.lookup)

        return await asyncio.shield(self._start(key))

    async def ensure_resolved(self, keys: Iterable[K], *, retry_failed: bool = False) -> dict[K, V | None]:
        """
        Make sure every key is resolved or settled; returns key -> value/None.

        Meant to be called from a controlled place (after a list loads), not
        from rendering code.
        """
        unique: list[K] = []
        seen: set[K] = set()
        for key in keys:
            if key in seen:
                continue
            seen.add(key)
            unique.append(key)

        waits: dict[K, Awaitable[V | None]] = {}
        out: dict[K, V | None] = {}
        for key in unique:
            entry = self._entries.get(key)
            if entry is not None and entry.state == CacheState.RESOLVED:
                out[key] = entry.value
            elif entry is not None and entry.state == CacheState.FAILED and not retry_failed:
                out[key] = None
            else:
                waits[key] = self.resolve(key)

        if waits:
            values = await asyncio.gather(*waits.values())
            out.update(zip(waits.keys(), values))
        return out

    def invalidate(self, key: K) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    # ---- internals ----

    def _start(self, key: K) -> asyncio.Task[V | None]:
        entry: CacheEntry[K, V] = CacheEntry(key=key)
        self._entries[key] = entry
        self.lookups_started += 1
        lookup = asyncio.ensure_future(self._load(entry))
        entry.lookup = lookup
        logger.debug("%s cache: lookup started key=%r", self._name, key)
        return lookup

    async def _load(self, entry: CacheEntry[K, V]) -> V | None:
        try:
            value = await self._loader(entry.key)
        except SyncError as e:
            entry.state = CacheState.FAILED
            entry.error = e
            logger.info("%s cache: lookup failed key=%r (%s): %s", self._name, entry.key, e.kind.value, e.message)
            return None
        except asyncio.CancelledError:
            # Settle before propagating so the next resolve() starts over.
            entry.state = CacheState.FAILED
            entry.error = TransportError("lookup cancelled")
            logger.info("%s cache: lookup cancelled key=%r", self._name, entry.key)
            raise
        except Exception as e:
            entry.state = CacheState.FAILED
            entry.error = TransportError(str(e) or type(e).__name__)
            logger.exception("%s cache: unexpected lookup error key=%r", self._name, entry.key)
            return None

        entry.state = CacheState.RESOLVED
        entry.value = value
        entry.error = None
        return value
