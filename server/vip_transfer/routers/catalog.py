"""Public catalog router served through the tagged output cache."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Optional

from fastapi import APIRouter, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import MemoryCache, OutputCache
from ..core.clock import Clock
from ..core.config import settings
from ..core.dependencies import (
    CacheDependency,
    ClockDependency,
    DatabaseSession,
    OutputCacheDependency,
)
from ..core.exceptions import NotFoundError
from ..models.reservation import DEFAULT_LANGUAGE
from ..schemas.catalog import HeroSlide, Homepage, Region, Vehicle
from ..schemas.rates import Rates
from ..services.cache_invalidation import (
    TAG_GALLERY,
    TAG_HOMEPAGE,
    TAG_REGIONS,
    TAG_STATIC,
    TAG_VEHICLES,
)
from ..services.catalog_service import CatalogService
from ..services.rate_service import BASE_CURRENCY, RateService
from ..services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/catalog", tags=["catalog"])

LANG_QUERY = Query(DEFAULT_LANGUAGE, max_length=5, description="tr, en, de or ru")


async def _cached(
    output_cache: OutputCache,
    key: str,
    tags: Iterable[str],
    render: Callable[[], Awaitable[Any]],
) -> JSONResponse:
    """Serve key from the output cache, rendering and storing it on a miss."""
    payload = output_cache.get(key)
    if payload is not None:
        return JSONResponse(status_code=200, content=payload, headers={"X-Cache": "HIT"})

    generation = output_cache.generation(tags)
    payload = jsonable_encoder(await render())
    output_cache.store_if_unchanged(key, payload, tags, settings.output_cache_ttl_seconds, generation)
    return JSONResponse(status_code=200, content=payload, headers={"X-Cache": "MISS"})


@router.get("/homepage", response_model=Homepage)
async def homepage(
    lang: str = LANG_QUERY,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Hero slides, featured vehicles and regions, localised settings and rates."""
    async def render():
        catalog = CatalogService(db, cache)
        return Homepage(
            hero=await catalog.list_hero_slides(),
            vehicles=await catalog.homepage_vehicles(),
            regions=await catalog.homepage_regions(),
            settings=await SettingsService(db, cache, clock=clock).get_settings(lang),
            rates=await RateService(db, cache, clock).get_rates(),
        )

    return await _cached(output_cache, f"homepage:{lang}", (TAG_HOMEPAGE,), render)


@router.get("/hero", response_model=list[HeroSlide])
async def hero_slides(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
) -> JSONResponse:
    async def render():
        return await CatalogService(db, cache).list_hero_slides()

    return await _cached(output_cache, "hero", (TAG_HOMEPAGE,), render)


@router.get("/vehicles", response_model=list[Vehicle])
async def list_vehicles(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
) -> JSONResponse:
    """Active vehicles in display order."""
    async def render():
        return await CatalogService(db, cache).list_active_vehicles()

    return await _cached(output_cache, "vehicles", (TAG_VEHICLES, TAG_GALLERY), render)


@router.get("/vehicles/{vehicle_id}", response_model=Vehicle)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
) -> JSONResponse:
    async def render():
        vehicle = await CatalogService(db, cache).get_vehicle_detail(vehicle_id)
        if vehicle is None:
            raise NotFoundError(resource_type="vehicle", resource_id=vehicle_id)
        return vehicle

    return await _cached(output_cache, f"vehicles:{vehicle_id}", (TAG_VEHICLES,), render)


@router.get("/regions", response_model=list[Region])
async def list_regions(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
) -> JSONResponse:
    """Active regions in alphabetical order."""
    async def render():
        return await CatalogService(db, cache).list_active_regions()

    return await _cached(output_cache, "regions", (TAG_REGIONS,), render)


@router.get("/regions/booking-form", response_model=list[Region])
async def booking_form_regions(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
) -> JSONResponse:
    async def render():
        return await CatalogService(db, cache).booking_form_regions()

    return await _cached(output_cache, "regions:booking-form", (TAG_REGIONS, TAG_HOMEPAGE), render)


@router.get("/regions/{region_id}", response_model=Region)
async def get_region(
    region_id: int,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
) -> JSONResponse:
    async def render():
        region = await CatalogService(db, cache).get_region_detail(region_id)
        if region is None:
            raise NotFoundError(resource_type="region", resource_id=region_id)
        return region

    return await _cached(output_cache, f"regions:{region_id}", (TAG_REGIONS,), render)


@router.get("/rates", response_model=Rates)
async def current_rates(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    async def render():
        service = RateService(db, cache, clock)
        return Rates(
            base=BASE_CURRENCY,
            rates=await service.get_rates(),
            updated_at=await service.last_updated(),
        )

    return await _cached(output_cache, "rates", (TAG_STATIC,), render)


@router.get("/settings", response_model=dict[str, str])
async def site_settings(
    lang: Optional[str] = LANG_QUERY,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    output_cache: OutputCache = OutputCacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Site settings resolved for one language."""
    async def render():
        return await SettingsService(db, cache, clock=clock).get_settings(lang)

    return await _cached(output_cache, f"settings:{lang}", (TAG_STATIC, TAG_HOMEPAGE), render)
