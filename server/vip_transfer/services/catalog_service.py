"""Catalog read side: cached vehicles, regions and hero slides."""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import MemoryCache
from ..core.config import settings
from ..models.region import Region
from ..models.site_setting import HeroSlide
from ..models.vehicle import Vehicle
from ..schemas.catalog import HeroSlide as HeroSlideSchema
from ..schemas.catalog import Region as RegionSchema
from ..schemas.catalog import Vehicle as VehicleSchema
from .cache_invalidation import (
    HOMEPAGE_HERO,
    HOMEPAGE_REGIONS,
    HOMEPAGE_REGIONS_FORM,
    HOMEPAGE_VEHICLES,
    REGIONS_ACTIVE,
    REGIONS_ALL,
    REGIONS_ALPHABETIC,
    VEHICLES_ACTIVE,
    region_detail_key,
    region_key,
    vehicle_detail_key,
    vehicle_key,
)

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".jpg", ".jpeg")


def list_vehicle_image_files(directory: str | Path) -> list[str]:
    """Names of the .jpg/.jpeg files in directory, sorted; empty if it does not exist."""
    path = Path(directory)
    if not path.is_dir():
        return []
    return sorted(
        entry.name
        for entry in path.iterdir()
        if entry.is_file() and entry.suffix.lower() in IMAGE_SUFFIXES
    )


def assign_round_robin(vehicle_ids: list[int], files: list[str]) -> dict[int, str]:
    """Pair each vehicle with the next file, wrapping around when files run out."""
    if not files:
        return {}
    return {vehicle_id: files[index % len(files)] for index, vehicle_id in enumerate(vehicle_ids)}


class CatalogService:
    """
    Cached catalog queries.

    Every value put in the cache is a frozen schema snapshot or a tuple of
    them, never an ORM instance bound to a session.
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: MemoryCache,
        image_dir: Optional[str] = None,
        image_url_prefix: Optional[str] = None,
    ):
        self.db = db
        self.cache = cache
        self.image_dir = image_dir if image_dir is not None else settings.vehicle_image_dir
        self.image_url_prefix = (
            image_url_prefix if image_url_prefix is not None else settings.vehicle_image_url_prefix
        )

    # Vehicles

    async def list_active_vehicles(self) -> tuple[VehicleSchema, ...]:
        """
        Active vehicles ordered by sort order, with gallery images.

        Vehicles that have neither a primary image nor gallery images are
        given one from the image directory before the list is cached.
        """
        return await self.cache.get_or_create(
            VEHICLES_ACTIVE,
            settings.vehicle_cache_ttl_seconds,
            self._load_active_vehicles,
        )

    async def _query_active_vehicles(self) -> list[Vehicle]:
        stmt = (
            select(Vehicle)
            .where(Vehicle.is_active == 1)
            .order_by(Vehicle.sort_order, Vehicle.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _load_active_vehicles(self) -> tuple[VehicleSchema, ...]:
        vehicles = await self._query_active_vehicles()
        if await self.assign_missing_images(vehicles):
            vehicles = await self._query_active_vehicles()
        return tuple(VehicleSchema.model_validate(v) for v in vehicles)

    async def assign_missing_images(self, vehicles: list[Vehicle]) -> bool:
        """
        Persist a round-robin image for every vehicle without any image.

        Returns:
            True if at least one vehicle was updated
        """
        missing = [v for v in vehicles if not v.has_any_image]
        if not missing:
            return False

        files = list_vehicle_image_files(self.image_dir)
        if not files:
            logger.warning(
                "Vehicles without images but no image files available",
                extra={"vehicle_ids": [v.id for v in missing], "image_dir": self.image_dir}
            )
            return False

        assignments = assign_round_robin([v.id for v in missing], files)
        for vehicle in missing:
            vehicle.image_url = f"{self.image_url_prefix}{assignments[vehicle.id]}"

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to persist self-assigned vehicle images",
                extra={"vehicle_ids": list(assignments), "error": str(e)}
            )
            return False

        self.cache.remove_many([VEHICLES_ACTIVE, HOMEPAGE_VEHICLES])
        logger.info(
            "Assigned images to vehicles",
            extra={"assignments": assignments}
        )
        return True

    async def homepage_vehicles(self) -> tuple[VehicleSchema, ...]:
        async def load():
            vehicles = await self.list_active_vehicles()
            return vehicles[: settings.homepage_vehicle_count]

        return await self.cache.get_or_create(
            HOMEPAGE_VEHICLES, settings.vehicle_cache_ttl_seconds, load
        )

    async def get_vehicle(self, vehicle_id: int) -> Optional[VehicleSchema]:
        """Vehicle by id regardless of active state; None when it does not exist."""
        async def load():
            stmt = (
                select(Vehicle)
                .where(Vehicle.id == vehicle_id)
                .execution_options(populate_existing=True)
            )
            vehicle = (await self.db.execute(stmt)).scalar_one_or_none()
            return VehicleSchema.model_validate(vehicle) if vehicle else None

        return await self.cache.get_or_create(
            vehicle_key(vehicle_id), settings.vehicle_cache_ttl_seconds, load
        )

    async def get_vehicle_detail(self, vehicle_id: int) -> Optional[VehicleSchema]:
        """Active vehicle for the public detail page."""
        async def load():
            stmt = (
                select(Vehicle)
                .where(Vehicle.id == vehicle_id, Vehicle.is_active == 1)
                .execution_options(populate_existing=True)
            )
            vehicle = (await self.db.execute(stmt)).scalar_one_or_none()
            return VehicleSchema.model_validate(vehicle) if vehicle else None

        return await self.cache.get_or_create(
            vehicle_detail_key(vehicle_id), settings.vehicle_cache_ttl_seconds, load
        )

    # Regions

    async def _regions(self, key: str, stmt, limit: Optional[int] = None) -> tuple[RegionSchema, ...]:
        async def load():
            query = stmt.limit(limit) if limit else stmt
            result = await self.db.execute(query)
            return tuple(RegionSchema.model_validate(r) for r in result.scalars())

        return await self.cache.get_or_create(key, settings.region_cache_ttl_seconds, load)

    async def list_regions(self) -> tuple[RegionSchema, ...]:
        """All regions in display order, for admin screens."""
        return await self._regions(
            REGIONS_ALL, select(Region).order_by(Region.sort_order, Region.name)
        )

    async def list_regions_alphabetic(self) -> tuple[RegionSchema, ...]:
        return await self._regions(REGIONS_ALPHABETIC, select(Region).order_by(Region.name))

    async def list_active_regions(self) -> tuple[RegionSchema, ...]:
        return await self._regions(
            REGIONS_ACTIVE,
            select(Region).where(Region.is_active == 1).order_by(Region.name),
        )

    async def homepage_regions(self) -> tuple[RegionSchema, ...]:
        return await self._regions(
            HOMEPAGE_REGIONS,
            select(Region).where(Region.is_active == 1).order_by(Region.name),
            limit=settings.homepage_region_count,
        )

    async def booking_form_regions(self) -> tuple[RegionSchema, ...]:
        """Every active region, for the destination picker on the booking form."""
        return await self._regions(
            HOMEPAGE_REGIONS_FORM,
            select(Region).where(Region.is_active == 1).order_by(Region.name),
        )

    async def get_region(self, region_id: int) -> Optional[RegionSchema]:
        async def load():
            region = await self.db.get(Region, region_id)
            return RegionSchema.model_validate(region) if region else None

        return await self.cache.get_or_create(
            region_key(region_id), settings.region_cache_ttl_seconds, load
        )

    async def get_region_detail(self, region_id: int) -> Optional[RegionSchema]:
        """Active region for the public detail page."""
        async def load():
            stmt = select(Region).where(Region.id == region_id, Region.is_active == 1)
            region = (await self.db.execute(stmt)).scalar_one_or_none()
            return RegionSchema.model_validate(region) if region else None

        return await self.cache.get_or_create(
            region_detail_key(region_id), settings.region_cache_ttl_seconds, load
        )

    # Hero slides

    async def list_hero_slides(self) -> tuple[HeroSlideSchema, ...]:
        async def load():
            stmt = (
                select(HeroSlide)
                .where(HeroSlide.is_active == 1)
                .order_by(HeroSlide.sort_order, HeroSlide.id)
            )
            result = await self.db.execute(stmt)
            return tuple(HeroSlideSchema.model_validate(h) for h in result.scalars())

        return await self.cache.get_or_create(
            HOMEPAGE_HERO, settings.hero_cache_ttl_seconds, load
        )
