"""Unit tests for the in-process and output caches."""

import asyncio

import pytest

from vip_transfer.core.cache import MemoryCache, OutputCache


def _paused(value):
    """Factory that signals once it has loaded and waits to be released."""
    loaded = asyncio.Event()
    release = asyncio.Event()

    async def factory():
        loaded.set()
        await release.wait()
        return value

    return factory, loaded, release


def _value(value):
    async def factory():
        return value

    return factory


@pytest.mark.asyncio
async def test_get_or_create_stores_on_miss(clock):
    cache = MemoryCache(clock)

    assert await cache.get_or_create("regions_all", 600, _value(("Kemer",))) == ("Kemer",)
    assert await cache.get_or_create("regions_all", 600, _value(("Belek",))) == ("Kemer",)

    clock.advance(601)
    assert await cache.get_or_create("regions_all", 600, _value(("Belek",))) == ("Belek",)


@pytest.mark.asyncio
async def test_get_or_create_does_not_store_none(clock):
    cache = MemoryCache(clock)

    assert await cache.get_or_create("region_9", 600, _value(None)) is None
    assert "region_9" not in cache


@pytest.mark.asyncio
@pytest.mark.parametrize("evict", [
    lambda cache: cache.remove("currency_rates"),
    lambda cache: cache.remove_many(["currency_rates", "regions_all"]),
    lambda cache: cache.remove_prefix("currency_"),
    lambda cache: cache.clear(),
])
async def test_load_overtaken_by_removal_is_not_stored(clock, evict):
    cache = MemoryCache(clock)
    factory, loaded, release = _paused(("TRY", 38.27))

    in_flight = asyncio.create_task(cache.get_or_create("currency_rates", 600, factory))
    await loaded.wait()
    evict(cache)
    release.set()

    assert await in_flight == ("TRY", 38.27)
    assert "currency_rates" not in cache

    assert await cache.get_or_create("currency_rates", 600, _value(("TRY", 38.5))) == ("TRY", 38.5)
    assert cache.get("currency_rates") == ("TRY", 38.5)


@pytest.mark.asyncio
async def test_removal_of_other_key_keeps_load(clock):
    cache = MemoryCache(clock)
    factory, loaded, release = _paused(("Kemer",))

    in_flight = asyncio.create_task(cache.get_or_create("regions_all", 600, factory))
    await loaded.wait()
    cache.remove("vehicles_all_active")
    release.set()
    await in_flight

    assert cache.get("regions_all") == ("Kemer",)


def test_output_store_skipped_after_tag_eviction(clock):
    output_cache = OutputCache(clock)
    generation = output_cache.generation(("regions", "homepage"))

    asyncio.run(output_cache.evict_by_tag("homepage"))

    assert not output_cache.store_if_unchanged("regions:tr", {"n": 1}, ("regions", "homepage"), 300, generation)
    assert output_cache.get("regions:tr") is None

    fresh = output_cache.generation(("homepage", "regions"))
    assert output_cache.store_if_unchanged("regions:tr", {"n": 2}, ("regions", "homepage"), 300, fresh)
    assert output_cache.get("regions:tr") == {"n": 2}


def test_output_store_kept_after_unrelated_eviction(clock):
    output_cache = OutputCache(clock)
    generation = output_cache.generation(("vehicles",))

    asyncio.run(output_cache.evict_by_tag("regions"))

    assert output_cache.store_if_unchanged("vehicles", {"n": 1}, ("vehicles",), 300, generation)
    assert output_cache.tags_of("vehicles") == frozenset({"vehicles"})
