"""Admin catalog router: vehicles, regions and hero slides."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import MemoryCache
from ..core.clock import Clock
from ..core.dependencies import (
    CacheDependency,
    ClockDependency,
    DatabaseSession,
    InvalidatorDependency,
    RequiredAuth,
)
from ..schemas.catalog import (
    HeroSlide,
    HeroSlideRequest,
    Region,
    RegionRequest,
    Vehicle,
    VehicleRequest,
)
from ..schemas.common import MessageResponse
from ..services.cache_invalidation import CacheInvalidator
from ..services.catalog_admin_service import CatalogAdminService
from ..services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"], dependencies=[RequiredAuth])


def _ok(model) -> JSONResponse:
    return JSONResponse(status_code=200, content=model.model_dump(mode="json"))


def _deleted(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=MessageResponse(success=True, message=message).model_dump(),
    )


# Vehicles

@router.get("/vehicles", response_model=list[Vehicle])
async def list_vehicles(
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    """Every vehicle including inactive ones."""
    vehicles = await CatalogAdminService(db, invalidator).list_vehicles()
    return JSONResponse(status_code=200, content=[v.model_dump(mode="json") for v in vehicles])


@router.post("/vehicles", response_model=Vehicle, status_code=201)
async def create_vehicle(
    request: VehicleRequest,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    vehicle = await CatalogAdminService(db, invalidator, clock).create_vehicle(request)
    return JSONResponse(status_code=201, content=vehicle.model_dump(mode="json"))


@router.put("/vehicles/{vehicle_id}", response_model=Vehicle)
async def update_vehicle(
    vehicle_id: int,
    request: VehicleRequest,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Replace every field and the gallery of a vehicle."""
    return _ok(await CatalogAdminService(db, invalidator, clock).update_vehicle(vehicle_id, request))


@router.post("/vehicles/{vehicle_id}/toggle", response_model=Vehicle)
async def toggle_vehicle(
    vehicle_id: int,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    return _ok(await CatalogAdminService(db, invalidator).toggle_vehicle(vehicle_id))


@router.delete("/vehicles/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    """Delete a vehicle; fails with 409 while reservations reference it."""
    await CatalogAdminService(db, invalidator).delete_vehicle(vehicle_id)
    return _deleted(f"Vehicle {vehicle_id} deleted")


# Regions

@router.get("/regions", response_model=list[Region])
async def list_regions(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
) -> JSONResponse:
    regions = await CatalogService(db, cache).list_regions()
    return JSONResponse(status_code=200, content=[r.model_dump(mode="json") for r in regions])


@router.post("/regions", response_model=Region, status_code=201)
async def create_region(
    request: RegionRequest,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    region = await CatalogAdminService(db, invalidator, clock).create_region(request)
    return JSONResponse(status_code=201, content=region.model_dump(mode="json"))


@router.put("/regions/{region_id}", response_model=Region)
async def update_region(
    region_id: int,
    request: RegionRequest,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    return _ok(await CatalogAdminService(db, invalidator, clock).update_region(region_id, request))


@router.post("/regions/{region_id}/toggle", response_model=Region)
async def toggle_region(
    region_id: int,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    return _ok(await CatalogAdminService(db, invalidator, clock).toggle_region(region_id))


@router.delete("/regions/{region_id}", response_model=MessageResponse)
async def delete_region(
    region_id: int,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    """Delete a region; its reservations are kept without a region."""
    detached = await CatalogAdminService(db, invalidator).delete_region(region_id)
    return _deleted(f"Region {region_id} deleted, {detached} reservation(s) detached")


# Hero slides

@router.get("/hero", response_model=list[HeroSlide])
async def list_hero_slides(
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    slides = await CatalogAdminService(db, invalidator).list_hero_slides()
    return JSONResponse(status_code=200, content=[s.model_dump(mode="json") for s in slides])


@router.post("/hero", response_model=HeroSlide, status_code=201)
async def create_hero_slide(
    request: HeroSlideRequest,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    slide = await CatalogAdminService(db, invalidator, clock).create_hero(request)
    return JSONResponse(status_code=201, content=slide.model_dump(mode="json"))


@router.put("/hero/{slide_id}", response_model=HeroSlide)
async def update_hero_slide(
    slide_id: int,
    request: HeroSlideRequest,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    return _ok(await CatalogAdminService(db, invalidator).update_hero(slide_id, request))


@router.delete("/hero/{slide_id}", response_model=MessageResponse)
async def delete_hero_slide(
    slide_id: int,
    db: AsyncSession = DatabaseSession,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    await CatalogAdminService(db, invalidator).delete_hero(slide_id)
    return _deleted(f"Hero slide {slide_id} deleted")
