"""Concurrency tests for the shared caches and the notification fan-out."""

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from vip_transfer.core.cache import MemoryCache, OutputCache
from vip_transfer.notifications.base import Outcome
from vip_transfer.notifications.dispatcher import NotificationDispatcher
from vip_transfer.notifications.log import NotificationLog
from vip_transfer.schemas.reservation import Reservation
from vip_transfer.services.cache_invalidation import REGIONS_ALL, CacheInvalidator, region_key

pytestmark = pytest.mark.concurrency


@pytest.mark.asyncio
async def test_concurrent_get_or_create_converges():
    """Concurrent misses may each load, but every caller sees a complete value."""
    cache = MemoryCache()
    loads = 0

    async def load():
        nonlocal loads
        loads += 1
        await asyncio.sleep(0.01)
        return ("EUR", "TRY", "USD", "GBP")

    results = await asyncio.gather(*(cache.get_or_create("rates", 600, load) for _ in range(50)))

    assert all(r == ("EUR", "TRY", "USD", "GBP") for r in results)
    assert 1 <= loads <= 50
    assert cache.get("rates") == ("EUR", "TRY", "USD", "GBP")

    before = loads
    await cache.get_or_create("rates", 600, load)
    assert loads == before


def test_threaded_writers_and_invalidation():
    """Readers, writers and prefix eviction from many threads never corrupt the cache."""
    cache = MemoryCache()

    def writer(n):
        for i in range(200):
            cache.set(f"region:{n}:{i}", (n, i), 600)
            cache.get(f"region:{n}:{i // 2}")

    def evictor():
        for _ in range(50):
            cache.remove_prefix("region:")
            time.sleep(0)

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(writer, n) for n in range(6)] + [pool.submit(evictor)]
        for future in futures:
            future.result()

    for key in cache.keys():
        n, i = (int(part) for part in key.split(":")[1:])
        assert cache.get(key) == (n, i)

    cache.remove_prefix("region:")
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_invalidation_races_with_output_reads():
    cache = MemoryCache()
    output_cache = OutputCache()
    invalidator = CacheInvalidator(cache, output_cache)

    async def reader(n):
        for i in range(20):
            output_cache.store(f"regions:{n}:{i}", {"n": n}, ("regions",), 300)
            cache.set(region_key(n), (n,), 600)
            await asyncio.sleep(0)

    async def invalidate():
        for _ in range(20):
            await invalidator.invalidate_regions()
            await asyncio.sleep(0)

    await asyncio.gather(*(reader(n) for n in range(5)), invalidate())
    await invalidator.invalidate_regions()

    assert REGIONS_ALL not in cache
    assert len(output_cache) == 0


class SlowMailer:
    async def send_customer_confirmation(self, reservation):
        await asyncio.sleep(0.2)
        return True

    async def send_admin_alert(self, reservation):
        await asyncio.sleep(0.2)
        return 1


class SlowWhatsApp:
    async def send_reservation_documents(self, reservation):
        await asyncio.sleep(0.2)
        return True


@pytest.mark.asyncio
async def test_channels_run_concurrently(tmp_path):
    dispatcher = NotificationDispatcher(
        SlowMailer(), SlowWhatsApp(), NotificationLog(str(tmp_path / "log.txt")), timeout_seconds=5
    )
    reservation = Reservation(
        id=1,
        customer_name="Anna Schmidt",
        customer_phone="+49 170 1234567",
        pickup_location="Antalya Airport",
        dropoff_location="Kemer",
        transfer_date=date(2026, 6, 1),
        transfer_time="14:00",
        passenger_count=2,
        number_of_adults=2,
        number_of_children=0,
        child_seat_count=0,
        language="de",
        currency="EUR",
        status="Pending",
    )

    started = time.monotonic()
    results = await dispatcher.notify_created(reservation)
    elapsed = time.monotonic() - started

    assert [r.outcome for r in results] == [Outcome.SENT] * 3
    assert elapsed < 0.5
