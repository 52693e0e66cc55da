"""Admin router for currency rates and site settings."""

import logging
from typing import Optional

from fastapi import APIRouter, Query
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
from ..schemas.catalog import SettingsUpdateRequest
from ..schemas.common import MessageResponse
from ..schemas.rates import Rates, SaveRatesRequest
from ..services.cache_invalidation import CacheInvalidator
from ..services.rate_service import BASE_CURRENCY, RateService, parse_rate_inputs
from ..services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"], dependencies=[RequiredAuth])


@router.get("/rates", response_model=Rates)
async def get_rates(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    service = RateService(db, cache, clock)
    response_data = Rates(
        base=BASE_CURRENCY,
        rates=await service.get_rates(),
        updated_at=await service.last_updated(),
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.put("/rates", response_model=Rates)
async def save_rates(
    request: SaveRatesRequest,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    """
    Store TRY, USD and GBP per 1 EUR.

    Values may use a decimal comma. Invalid values are reported per currency
    and nothing is saved.
    """
    try_rate, usd_rate, gbp_rate = parse_rate_inputs(
        request.try_rate, request.usd_rate, request.gbp_rate
    )
    service = RateService(db, cache, clock, invalidator=invalidator)
    rates = await service.save_rates(try_rate, usd_rate, gbp_rate)

    response_data = Rates(base=BASE_CURRENCY, rates=rates, updated_at=clock.now_utc())
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.get("/settings", response_model=dict[str, str])
async def get_settings(
    lang: Optional[str] = Query(None, max_length=5),
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    values = await SettingsService(db, cache, clock=clock).get_settings(lang)
    return JSONResponse(status_code=200, content=values)


@router.put("/settings", response_model=MessageResponse)
async def update_settings(
    request: SettingsUpdateRequest,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
    invalidator: CacheInvalidator = InvalidatorDependency,
) -> JSONResponse:
    count = await SettingsService(db, cache, invalidator, clock).update_settings(request.values)
    response_data = MessageResponse(success=True, message=f"{count} setting(s) updated")
    return JSONResponse(status_code=200, content=response_data.model_dump())
