# tests/test_entity_cache.py

from __future__ import annotations

import asyncio

import pytest

from taskdesk.core.entity_cache import CacheState, EntityCache
from taskdesk.core.errors import ErrorKind, TransportError


class Loader:
    """Counts lookups; per-key gates let tests control settlement order."""

    def __init__(self) -> None:
        self.calls: list[int] = []
        self.gates: dict[int, asyncio.Event] = {}
        self.failing: set[int] = set()

    async def __call__(self, key: int) -> str:
        self.calls.append(key)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        if key in self.failing:
            raise TransportError(f"user {key} unavailable")
        return f"user-{key}"


@pytest.mark.asyncio
async def test_concurrent_resolves_for_same_key_share_one_lookup() -> None:
    loader = Loader()
    loader.gates[7] = asyncio.Event()
    cache: EntityCache[int, str] = EntityCache(loader)

    first = asyncio.create_task(cache.resolve(7))
    second = asyncio.create_task(cache.resolve(7))
    await asyncio.sleep(0)
    assert cache.state(7) == CacheState.PENDING

    loader.gates[7].set()
    assert await first == "user-7"
    assert await second == "user-7"
    assert loader.calls == [7]
    assert cache.lookups_started == 1


@pytest.mark.asyncio
async def test_resolved_value_is_served_without_lookup() -> None:
    loader = Loader()
    cache: EntityCache[int, str] = EntityCache(loader)

    assert cache.peek(3) is None
    assert await cache.resolve(3) == "user-3"
    assert cache.peek(3) == "user-3"
    assert await cache.resolve(3) == "user-3"
    assert loader.calls == [3]


@pytest.mark.asyncio
async def test_failed_lookup_reads_unknown_and_retries_on_next_resolve() -> None:
    loader = Loader()
    loader.failing.add(5)
    cache: EntityCache[int, str] = EntityCache(loader)

    assert await cache.resolve(5) is None
    assert cache.state(5) == CacheState.FAILED
    assert cache.error(5) is not None and cache.error(5).kind == ErrorKind.TRANSPORT  # type: ignore[union-attr]

    loader.failing.clear()
    assert await cache.resolve(5) == "user-5"
    assert cache.state(5) == CacheState.RESOLVED
    assert loader.calls == [5, 5]


@pytest.mark.asyncio
async def test_ensure_resolved_dedupes_and_skips_failed_unless_asked() -> None:
    loader = Loader()
    loader.failing.add(2)
    cache: EntityCache[int, str] = EntityCache(loader)

    out = await cache.ensure_resolved([1, 2, 1, 1])
    assert out == {1: "user-1", 2: None}
    assert sorted(loader.calls) == [1, 2]

    out = await cache.ensure_resolved([1, 2])
    assert out == {1: "user-1", 2: None}
    assert sorted(loader.calls) == [1, 2]

    loader.failing.clear()
    out = await cache.ensure_resolved([1, 2], retry_failed=True)
    assert out == {1: "user-1", 2: "user-2"}
    assert sorted(loader.calls) == [1, 2, 2]


@pytest.mark.asyncio
async def test_different_keys_settle_in_any_order() -> None:
    loader = Loader()
    loader.gates[1] = asyncio.Event()
    loader.gates[2] = asyncio.Event()
    cache: EntityCache[int, str] = EntityCache(loader)

    a = asyncio.create_task(cache.resolve(1))
    b = asyncio.create_task(cache.resolve(2))
    await asyncio.sleep(0)

    loader.gates[2].set()
    assert await b == "user-2"
    assert cache.state(1) == CacheState.PENDING
    assert cache.state(2) == CacheState.RESOLVED

    loader.gates[1].set()
    assert await a == "user-1"


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_break_shared_lookup() -> None:
    loader = Loader()
    loader.gates[9] = asyncio.Event()
    cache: EntityCache[int, str] = EntityCache(loader)

    impatient = asyncio.create_task(cache.resolve(9))
    patient = asyncio.create_task(cache.resolve(9))
    await asyncio.sleep(0)
    impatient.cancel()

    loader.gates[9].set()
    assert await patient == "user-9"
    assert loader.calls == [9]


@pytest.mark.asyncio
async def test_clear_detaches_pending_lookup() -> None:
    loader = Loader()
    loader.gates[4] = asyncio.Event()
    cache: EntityCache[int, str] = EntityCache(loader)

    pending = asyncio.create_task(cache.resolve(4))
    await asyncio.sleep(0)
    cache.clear()
    loader.gates[4].set()

    assert await pending == "user-4"
    assert 4 not in cache
    assert cache.peek(4) is None


@pytest.mark.asyncio
async def test_cancelled_lookup_settles_as_failed_and_is_retried() -> None:
    calls: list[int] = []

    async def loader(key: int) -> str:
        calls.append(key)
        if len(calls) == 1:
            raise asyncio.CancelledError()
        return f"user-{key}"

    cache: EntityCache[int, str] = EntityCache(loader)

    with pytest.raises(asyncio.CancelledError):
        await cache.resolve(3)
    assert cache.state(3) == CacheState.FAILED
    assert cache.peek(3) is None

    assert await cache.resolve(3) == "user-3"
    assert cache.state(3) == CacheState.RESOLVED
    assert calls == [3, 3]
