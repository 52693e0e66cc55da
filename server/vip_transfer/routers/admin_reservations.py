"""Admin reservation router."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import MemoryCache
from ..core.clock import Clock
from ..core.dependencies import (
    CacheDependency,
    ClockDependency,
    DatabaseSession,
    DispatcherDependency,
    RequiredAuth,
)
from ..notifications.dispatcher import NotificationDispatcher
from ..schemas.common import MessageResponse
from ..schemas.reservation import (
    CreateReservationRequest,
    DashboardSummary,
    Reservation,
    ReservationListItem,
    ReservationSource,
    ReservationStatus,
    UpdateStatusRequest,
)
from ..services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/admin/reservations",
    tags=["admin"],
    dependencies=[RequiredAuth],
)

STATUS_QUERY = Query(None, description="Filter by status; Pending includes rows with no status")
LANG_QUERY = Query(None, max_length=5, description="Document language; defaults to the reservation's")


def _service(db, cache, clock, dispatcher=None) -> ReservationService:
    return ReservationService(db, cache, dispatcher=dispatcher, clock=clock)


@router.get("", response_model=list[ReservationListItem])
async def list_reservations(
    status: Optional[ReservationStatus] = STATUS_QUERY,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    items = await _service(db, cache, clock).list_reservations(status)
    return JSONResponse(
        status_code=200,
        content=[item.model_dump(mode="json") for item in items],
    )


@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Totals, pending count, today's transfers and the latest bookings."""
    summary = await _service(db, cache, clock).dashboard_summary()
    return JSONResponse(status_code=200, content=summary.model_dump(mode="json"))


@router.post("", response_model=Reservation, status_code=201)
async def create_reservation(
    request: CreateReservationRequest,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
    dispatcher: NotificationDispatcher = DispatcherDependency,
) -> JSONResponse:
    """Manual entry by an admin; a region is required here."""
    reservation = await _service(db, cache, clock, dispatcher).create_reservation(
        request, ReservationSource.ADMIN
    )
    return JSONResponse(status_code=201, content=reservation.model_dump(mode="json"))


@router.get("/{reservation_id}", response_model=Reservation)
async def get_reservation(
    reservation_id: int,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    reservation = await _service(db, cache, clock).get_reservation(reservation_id)
    return JSONResponse(status_code=200, content=reservation.model_dump(mode="json"))


@router.post("/{reservation_id}/status", response_model=Reservation)
async def update_status(
    reservation_id: int,
    request: UpdateStatusRequest,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
    dispatcher: NotificationDispatcher = DispatcherDependency,
) -> JSONResponse:
    """
    Change the status of a reservation.

    Confirming re-sends the customer confirmation email. A change that the
    lifecycle does not allow returns 409.
    """
    reservation = await _service(db, cache, clock, dispatcher).update_status(
        reservation_id, request.status, request.admin_notes
    )
    return JSONResponse(status_code=200, content=reservation.model_dump(mode="json"))


@router.delete("/{reservation_id}", response_model=MessageResponse)
async def delete_reservation(
    reservation_id: int,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    await _service(db, cache, clock).delete_reservation(reservation_id)
    response_data = MessageResponse(success=True, message=f"Reservation {reservation_id} deleted")
    return JSONResponse(status_code=200, content=response_data.model_dump())


@router.get("/{reservation_id}/document", response_class=Response)
async def download_document(
    reservation_id: int,
    lang: Optional[str] = LANG_QUERY,
    db: AsyncSession = DatabaseSession,
    cache: MemoryCache = CacheDependency,
    clock: Clock = ClockDependency,
) -> Response:
    """Itinerary PDF."""
    filename, content = await _service(db, cache, clock).render_document(reservation_id, lang)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
