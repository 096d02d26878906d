from __future__ import annotations

import asyncio

import pytest

from gql_extract.core.ports.cache import ResultCache
from gql_extract.models import FeatureFlags, FileExtraction
from gql_extract.store import InMemoryResultCache, get_or_compute


def test_implements_protocol() -> None:
    cache: ResultCache = InMemoryResultCache()
    assert cache.get("missing") is None


def test_first_write_wins(result_cache: InMemoryResultCache) -> None:
    first = FileExtraction(features=FeatureFlags(head=True))
    second = FileExtraction(features=FeatureFlags(config=True))

    assert result_cache.set("k", first) is first
    assert result_cache.set("k", second) is first
    assert result_cache.get("k") is first
    assert "k" in result_cache
    assert len(result_cache) == 1


@pytest.mark.asyncio
async def test_get_or_compute_computes_once(result_cache: InMemoryResultCache) -> None:
    calls = 0

    async def _compute() -> FileExtraction:
        nonlocal calls
        calls += 1
        return FileExtraction()

    first = await get_or_compute(result_cache, "k", _compute)
    second = await get_or_compute(result_cache, "k", _compute)

    assert calls == 1
    assert first is second


@pytest.mark.asyncio
async def test_racing_computations_share_one_entry(result_cache: InMemoryResultCache) -> None:
    gate = asyncio.Event()

    async def _compute(flags: FeatureFlags) -> FileExtraction:
        await gate.wait()
        return FileExtraction(features=flags)

    racers = [
        asyncio.create_task(get_or_compute(result_cache, "k", lambda: _compute(FeatureFlags(head=True)))),
        asyncio.create_task(get_or_compute(result_cache, "k", lambda: _compute(FeatureFlags(config=True)))),
    ]
    await asyncio.sleep(0)
    gate.set()
    first, second = await asyncio.gather(*racers)

    assert first is second
    assert result_cache.get("k") is first


@pytest.mark.asyncio
async def test_failed_computation_is_not_cached(result_cache: InMemoryResultCache) -> None:
    async def _boom() -> FileExtraction:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await get_or_compute(result_cache, "k", _boom)

    assert "k" not in result_cache
