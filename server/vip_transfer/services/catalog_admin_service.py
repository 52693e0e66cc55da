"""Admin mutations for vehicles, regions and hero slides."""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock, system_clock
from ..core.exceptions import NotFoundError, raise_persistence_error
from ..models.region import Region
from ..models.reservation import Reservation
from ..models.site_setting import HeroSlide
from ..models.vehicle import Vehicle, VehicleImage
from ..schemas.catalog import HeroSlide as HeroSlideSchema
from ..schemas.catalog import HeroSlideRequest, RegionRequest, VehicleRequest
from ..schemas.catalog import Region as RegionSchema
from ..schemas.catalog import Vehicle as VehicleSchema
from .cache_invalidation import CacheInvalidator

logger = logging.getLogger(__name__)


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


class CatalogAdminService:
    """
    Create, update, delete and toggle catalog entities.

    Every successful mutation runs the matching cache invalidation before
    returning, so the next public read sees the change.
    """

    def __init__(
        self,
        db: AsyncSession,
        invalidator: CacheInvalidator,
        clock: Optional[Clock] = None,
    ):
        self.db = db
        self.invalidator = invalidator
        self.clock = clock or system_clock

    async def _commit(self, operation: str, **context) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise_persistence_error(e, {"operation": operation, **context})

    # Vehicles

    async def list_vehicles(self) -> list[VehicleSchema]:
        """Every vehicle, active or not, in display order."""
        stmt = (
            select(Vehicle)
            .order_by(Vehicle.sort_order, Vehicle.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [VehicleSchema.model_validate(v) for v in result.scalars()]

    async def _load_vehicle(self, vehicle_id: int) -> Vehicle:
        stmt = (
            select(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .execution_options(populate_existing=True)
        )
        vehicle = (await self.db.execute(stmt)).scalar_one_or_none()
        if vehicle is None:
            logger.warning("Vehicle not found", extra={"vehicle_id": vehicle_id})
            raise NotFoundError(resource_type="vehicle", resource_id=vehicle_id)
        return vehicle

    def _apply_vehicle(self, vehicle: Vehicle, request: VehicleRequest) -> None:
        vehicle.name = request.name.strip()
        vehicle.type = request.type
        vehicle.brand = request.brand
        vehicle.model = request.model
        vehicle.passenger_capacity = request.passenger_capacity
        vehicle.luggage_capacity = request.luggage_capacity
        vehicle.description = request.description
        vehicle.features = request.features
        vehicle.image_url = request.image_url
        vehicle.minimum_price = _money(request.minimum_price)
        vehicle.minimum_price_usd = _money(request.minimum_price_usd)
        vehicle.minimum_price_try = _money(request.minimum_price_try)
        vehicle.price_per_km = _money(request.price_per_km)
        vehicle.price_per_km_usd = _money(request.price_per_km_usd)
        vehicle.price_per_km_try = _money(request.price_per_km_try)
        vehicle.currency = (request.currency or "EUR").upper()
        vehicle.is_active = 1 if request.is_active else 0
        vehicle.sort_order = request.sort_order

    async def create_vehicle(self, request: VehicleRequest) -> VehicleSchema:
        """
        Create a vehicle with its gallery images.

        Args:
            request: Vehicle fields; currency defaults to EUR

        Returns:
            Snapshot of the stored vehicle
        """
        vehicle = Vehicle(created_at=self.clock.now_utc(), images=[])
        self._apply_vehicle(vehicle, request)
        vehicle.images = [
            VehicleImage(image_url=url, sort_order=index, created_at=self.clock.now_utc())
            for index, url in enumerate(request.images)
        ]
        self.db.add(vehicle)
        await self._commit("create_vehicle", name=request.name)

        stored = await self._load_vehicle(vehicle.id)
        await self.invalidator.invalidate_vehicles(stored.id)

        logger.info(
            "Vehicle created",
            extra={"vehicle_id": stored.id, "name": stored.name}
        )
        return VehicleSchema.model_validate(stored)

    async def update_vehicle(self, vehicle_id: int, request: VehicleRequest) -> VehicleSchema:
        vehicle = await self._load_vehicle(vehicle_id)
        self._apply_vehicle(vehicle, request)
        vehicle.images = [
            VehicleImage(image_url=url, sort_order=index, created_at=self.clock.now_utc())
            for index, url in enumerate(request.images)
        ]
        await self._commit("update_vehicle", vehicle_id=vehicle_id)

        stored = await self._load_vehicle(vehicle_id)
        await self.invalidator.invalidate_vehicles(vehicle_id)
        logger.info("Vehicle updated", extra={"vehicle_id": vehicle_id})
        return VehicleSchema.model_validate(stored)

    async def delete_vehicle(self, vehicle_id: int) -> None:
        """
        Delete a vehicle and its images.

        Raises:
            NotFoundError: If the vehicle does not exist
            PersistenceError: If reservations still reference it
        """
        vehicle = await self._load_vehicle(vehicle_id)
        await self.db.delete(vehicle)
        await self._commit("delete_vehicle", vehicle_id=vehicle_id)

        await self.invalidator.invalidate_vehicles(vehicle_id)
        logger.info("Vehicle deleted", extra={"vehicle_id": vehicle_id})

    async def toggle_vehicle(self, vehicle_id: int) -> VehicleSchema:
        vehicle = await self._load_vehicle(vehicle_id)
        vehicle.is_active = 0 if vehicle.active else 1
        await self._commit("toggle_vehicle", vehicle_id=vehicle_id)

        await self.invalidator.invalidate_vehicles(vehicle_id)
        logger.info(
            "Vehicle active state toggled",
            extra={"vehicle_id": vehicle_id, "is_active": vehicle.is_active}
        )
        return VehicleSchema.model_validate(vehicle)

    # Regions

    async def _load_region(self, region_id: int) -> Region:
        region = await self.db.get(Region, region_id)
        if region is None:
            logger.warning("Region not found", extra={"region_id": region_id})
            raise NotFoundError(resource_type="region", resource_id=region_id)
        return region

    def _apply_region(self, region: Region, request: RegionRequest) -> None:
        region.name = request.name.strip()
        region.name_en = request.name_en
        region.description = request.description
        region.description_en = request.description_en
        region.image_url = request.image_url
        region.price = _money(request.price)
        region.currency = (request.currency or "EUR").upper()
        region.start_point = request.start_point
        region.start_point_en = request.start_point_en
        region.distance_km = request.distance_km
        region.estimated_duration_minutes = request.estimated_duration_minutes
        region.sort_order = request.sort_order
        region.is_active = 1 if request.is_active else 0

    async def create_region(self, request: RegionRequest) -> RegionSchema:
        region = Region(created_at=self.clock.now_utc())
        self._apply_region(region, request)
        self.db.add(region)
        await self._commit("create_region", name=request.name)

        await self.invalidator.invalidate_regions(region.id)
        logger.info("Region created", extra={"region_id": region.id, "name": region.name})
        return RegionSchema.model_validate(region)

    async def update_region(self, region_id: int, request: RegionRequest) -> RegionSchema:
        region = await self._load_region(region_id)
        self._apply_region(region, request)
        region.updated_at = self.clock.now_utc()
        await self._commit("update_region", region_id=region_id)

        await self.invalidator.invalidate_regions(region_id)
        logger.info("Region updated", extra={"region_id": region_id})
        return RegionSchema.model_validate(region)

    async def delete_region(self, region_id: int) -> int:
        """
        Delete a region, keeping the reservations that referenced it.

        Referencing reservations get a NULL ``region_id`` in the same
        transaction as the delete.

        Returns:
            Number of reservations that were detached
        """
        region = await self._load_region(region_id)
        detached = await self.db.execute(
            update(Reservation)
            .where(Reservation.region_id == region_id)
            .values(region_id=None)
        )
        await self.db.delete(region)
        await self._commit("delete_region", region_id=region_id)

        await self.invalidator.invalidate_regions(region_id)
        logger.info(
            "Region deleted",
            extra={"region_id": region_id, "detached_reservations": detached.rowcount}
        )
        return detached.rowcount or 0

    async def toggle_region(self, region_id: int) -> RegionSchema:
        region = await self._load_region(region_id)
        region.is_active = 0 if region.active else 1
        region.updated_at = self.clock.now_utc()
        await self._commit("toggle_region", region_id=region_id)

        await self.invalidator.invalidate_regions(region_id)
        return RegionSchema.model_validate(region)

    # Hero slides

    async def list_hero_slides(self) -> list[HeroSlideSchema]:
        result = await self.db.execute(select(HeroSlide).order_by(HeroSlide.sort_order, HeroSlide.id))
        return [HeroSlideSchema.model_validate(h) for h in result.scalars()]

    async def _load_hero(self, slide_id: int) -> HeroSlide:
        slide = await self.db.get(HeroSlide, slide_id)
        if slide is None:
            raise NotFoundError(resource_type="hero slide", resource_id=slide_id)
        return slide

    async def create_hero(self, request: HeroSlideRequest) -> HeroSlideSchema:
        slide = HeroSlide(
            image_url=request.image_url,
            sort_order=request.sort_order,
            is_active=1 if request.is_active else 0,
            created_at=self.clock.now_utc(),
        )
        self.db.add(slide)
        await self._commit("create_hero")

        await self.invalidator.invalidate_hero()
        return HeroSlideSchema.model_validate(slide)

    async def update_hero(self, slide_id: int, request: HeroSlideRequest) -> HeroSlideSchema:
        slide = await self._load_hero(slide_id)
        slide.image_url = request.image_url
        slide.sort_order = request.sort_order
        slide.is_active = 1 if request.is_active else 0
        await self._commit("update_hero", slide_id=slide_id)

        await self.invalidator.invalidate_hero()
        return HeroSlideSchema.model_validate(slide)

    async def delete_hero(self, slide_id: int) -> None:
        slide = await self._load_hero(slide_id)
        await self.db.delete(slide)
        await self._commit("delete_hero", slide_id=slide_id)

        await self.invalidator.invalidate_hero()
