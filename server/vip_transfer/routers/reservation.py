"""Public reservation router: booking form, confirmation view and price quotes."""

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
    DispatcherDependency,
)
from ..notifications.dispatcher import NotificationDispatcher
from ..schemas.reservation import (
    CreateReservationRequest,
    PriceCalculationRequest,
    PriceQuote,
    Reservation,
    ReservationCreated,
    ReservationSource,
)
from ..services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/reservations", tags=["reservations"])


@router.post("", response_model=ReservationCreated, status_code=201)
async def create_reservation(
    request: CreateReservationRequest,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
    dispatcher: NotificationDispatcher = DispatcherDependency,
) -> JSONResponse:
    """
    Submit the public booking form.

    Field errors come back as a 400 problem whose ``errors`` member maps
    each field to its message.
    """
    service = ReservationService(db, cache, dispatcher=dispatcher, clock=clock)
    reservation = await service.create_reservation(request, ReservationSource.PUBLIC)

    response_data = ReservationCreated(
        id=reservation.id,
        status=reservation.status,
        confirmation_url=f"/v1/reservations/{reservation.id}",
    )
    return JSONResponse(status_code=201, content=response_data.model_dump(mode="json"))


@router.post("/price", response_model=PriceQuote)
async def calculate_price(
    request: PriceCalculationRequest,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Flat usage fee of the selected vehicle, in EUR and every supported currency."""
    service = ReservationService(db, cache, clock=clock)
    quote = await service.calculate_price(request.vehicle_id, request.distance_km)
    return JSONResponse(status_code=200, content=quote.model_dump(mode="json"))


@router.get("/{reservation_id}", response_model=Reservation)
async def get_confirmation(
    reservation_id: int,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Confirmation view shown after a successful booking."""
    service = ReservationService(db, cache, clock=clock)
    reservation = await service.get_reservation(reservation_id)
    return JSONResponse(status_code=200, content=reservation.model_dump(mode="json"))
