"""Reservation lifecycle: intake, status changes, pricing and admin views."""

import logging
import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import MemoryCache
from ..core.clock import Clock, system_clock
from ..core.config import settings
from ..core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    raise_persistence_error,
)
from ..core.observability import metrics_collector
from ..models.region import Region
from ..models.reservation import (
    DEFAULT_CURRENCY,
    DEFAULT_LANGUAGE,
    Reservation,
    ReservationStatus,
    can_transition,
)
from ..models.vehicle import Vehicle
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.documents import ItineraryDocument, document_filename
from ..schemas.reservation import CreateReservationRequest, DashboardSummary, PriceQuote
from ..schemas.reservation import Reservation as ReservationSchema
from ..schemas.reservation import ReservationListItem, ReservationSource
from .catalog_service import CatalogService
from .rate_service import RateService

logger = logging.getLogger(__name__)

RECENT_RESERVATIONS = 10


def derive_passenger_count(adults: Optional[int], children: Optional[int]) -> int:
    """Adults (default 1) plus children (default 0), never below 1."""
    adults = 1 if adults is None else adults
    children = 0 if children is None else children
    return max(1, adults + children)


def _split_time(value: Optional[str]) -> Optional[tuple[int, int]]:
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def parse_transfer_time(value: Optional[str]) -> Optional[tuple[int, int]]:
    """
    Parse ``HH:mm``.

    Returns:
        (hour, minute), or None when the value is empty, not two integers,
        or not a time of day
    """
    parts = _split_time(value)
    if parts is None:
        return None
    hour, minute = parts
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def is_out_of_range_time(value: Optional[str]) -> bool:
    """True for two integers that are not a time of day, such as ``25:00``."""
    return _split_time(value) is not None and parse_transfer_time(value) is None


def transfer_datetime(transfer_date: date, hour: int, minute: int) -> datetime:
    return datetime.combine(transfer_date, datetime.min.time()) + timedelta(hours=hour, minutes=minute)


def violates_lead_time(
    transfer_date: Optional[date],
    transfer_time: Optional[str],
    now_local: datetime,
    lead_minutes: int,
) -> bool:
    """
    True when the requested pickup is earlier than now plus the lead time.

    A missing or unparseable time is not checked; a missing date means today.
    """
    parsed = parse_transfer_time(transfer_time)
    if parsed is None:
        return False
    pickup = transfer_datetime(transfer_date or now_local.date(), *parsed)
    return pickup < now_local + timedelta(minutes=lead_minutes)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def required_field_errors(request: CreateReservationRequest, source: ReservationSource) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _blank(request.customer_name):
        errors["customer_name"] = "Customer name is required"
    if _blank(request.customer_phone):
        errors["customer_phone"] = "Phone number is required"
    if _blank(request.pickup_location):
        errors["pickup_location"] = "Pick-up location is required"
    if _blank(request.dropoff_location):
        errors["dropoff_location"] = "Drop-off location is required"
    if request.vehicle_id is None or request.vehicle_id < 1:
        errors["vehicle_id"] = "Vehicle selection is required"
    if source == ReservationSource.ADMIN and (request.region_id is None or request.region_id < 1):
        errors["region_id"] = "Region selection is required"
    return errors


def to_schema(reservation: Reservation) -> ReservationSchema:
    """Snapshot an ORM reservation with legacy defaults applied."""
    return ReservationSchema(
        id=reservation.id,
        customer_name=reservation.customer_name,
        customer_phone=reservation.customer_phone,
        customer_email=reservation.customer_email or "",
        pickup_location_type=reservation.pickup_location_type,
        pickup_location=reservation.pickup_location,
        pickup_location_detail=reservation.pickup_location_detail or "",
        dropoff_location_type=reservation.dropoff_location_type,
        dropoff_location=reservation.dropoff_location,
        dropoff_location_detail=reservation.dropoff_location_detail or "",
        transfer_date=reservation.transfer_date,
        transfer_time=reservation.transfer_time,
        flight_number=reservation.flight_number or "",
        airline_company=reservation.airline_company,
        hotel_name=reservation.hotel_name,
        is_return_transfer=bool(reservation.is_return_transfer),
        return_transfer_date=reservation.return_transfer_date,
        return_transfer_time=reservation.return_transfer_time,
        return_flight_number=reservation.return_flight_number,
        passenger_count=reservation.passenger_count or derive_passenger_count(
            reservation.number_of_adults, reservation.number_of_children
        ),
        number_of_adults=reservation.adults,
        number_of_children=reservation.children,
        child_seat_count=reservation.child_seats,
        luggage_count=reservation.luggage_count or 0,
        child_names=reservation.child_names or "",
        additional_passenger_names=reservation.additional_passenger_names or "",
        language=reservation.effective_language,
        vehicle_id=reservation.vehicle_id,
        vehicle_name=reservation.vehicle.name if reservation.vehicle else None,
        region_id=reservation.region_id,
        region_name=reservation.region.name if reservation.region else None,
        distance_km=reservation.distance_km or 0.0,
        estimated_price=float(reservation.price),
        currency=reservation.effective_currency,
        notes=reservation.notes or "",
        status=reservation.effective_status.value,
        admin_notes=reservation.admin_notes or "",
        created_at=reservation.created_at,
        updated_at=reservation.updated_at,
        confirmed_at=reservation.confirmed_at,
    )


def to_list_item(reservation: Reservation) -> ReservationListItem:
    return ReservationListItem(
        id=reservation.id,
        customer_name=reservation.customer_name,
        customer_phone=reservation.customer_phone,
        pickup_location=reservation.pickup_location,
        dropoff_location=reservation.dropoff_location,
        transfer_date=reservation.transfer_date,
        transfer_time=reservation.transfer_time,
        vehicle_name=reservation.vehicle.name if reservation.vehicle else None,
        estimated_price=float(reservation.price),
        currency=reservation.effective_currency,
        status=reservation.effective_status.value,
        created_at=reservation.created_at,
    )


class ReservationService:
    """Service for reservation intake and administration."""

    def __init__(
        self,
        db: AsyncSession,
        cache: MemoryCache,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Optional[Clock] = None,
        documents: Optional[ItineraryDocument] = None,
    ):
        self.db = db
        self.cache = cache
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.clock = clock or system_clock
        self.documents = documents or ItineraryDocument()
        self.catalog = CatalogService(db, cache)
        self.rates = RateService(db, cache, self.clock)

    async def _load(self, reservation_id: int) -> Reservation:
        stmt = (
            select(Reservation)
            .where(Reservation.id == reservation_id)
            .execution_options(populate_existing=True)
        )
        reservation = (await self.db.execute(stmt)).unique().scalar_one_or_none()
        if reservation is None:
            logger.warning("Reservation not found", extra={"reservation_id": reservation_id})
            raise NotFoundError(resource_type="reservation", resource_id=reservation_id)
        return reservation

    async def create_reservation(
        self,
        request: CreateReservationRequest,
        source: ReservationSource = ReservationSource.PUBLIC,
    ) -> ReservationSchema:
        """
        Validate and store a booking, then notify every channel.

        Notification failures are logged and never affect the stored
        reservation or the return value.

        Args:
            request: Booking form fields
            source: Public booking form or admin entry

        Returns:
            The stored reservation with vehicle and region names

        Raises:
            ValidationError: If required fields are missing, the vehicle or
                region does not exist, or the pickup is too soon
            PersistenceError: If the insert fails
        """
        errors = required_field_errors(request, source)
        if errors:
            logger.warning(
                "Reservation rejected: missing fields",
                extra={"fields": sorted(errors), "source": source.value}
            )
            raise ValidationError(detail="Required reservation fields are missing", errors=errors)

        if await self.db.get(Vehicle, request.vehicle_id) is None:
            raise ValidationError(
                detail="Selected vehicle does not exist",
                errors={"vehicle_id": "Vehicle not found"}
            )
        if request.region_id is not None and await self.db.get(Region, request.region_id) is None:
            raise ValidationError(
                detail="Selected region does not exist",
                errors={"region_id": "Region not found"}
            )

        if is_out_of_range_time(request.transfer_time):
            raise ValidationError(
                detail="Transfer time is not a valid time of day",
                errors={"transfer_time": "Transfer time must be between 00:00 and 23:59"}
            )

        now_local = self.clock.now_local()
        if violates_lead_time(
            request.transfer_date,
            request.transfer_time,
            now_local,
            settings.booking_lead_time_minutes,
        ):
            hours = settings.booking_lead_time_minutes / 60
            raise ValidationError(
                detail="Transfer time is too soon",
                errors={"transfer_time": f"Reservations must be made at least {hours:g} hour(s) in advance"}
            )

        reservation = Reservation(
            customer_name=request.customer_name.strip(),
            customer_phone=request.customer_phone.strip(),
            customer_email=(request.customer_email or "").strip(),
            pickup_location_type=request.pickup_location_type.value if request.pickup_location_type else None,
            pickup_location=request.pickup_location.strip(),
            pickup_location_detail=request.pickup_location_detail or "",
            dropoff_location_type=request.dropoff_location_type.value if request.dropoff_location_type else None,
            dropoff_location=request.dropoff_location.strip(),
            dropoff_location_detail=request.dropoff_location_detail or "",
            transfer_date=request.transfer_date,
            transfer_time=request.transfer_time,
            flight_number=request.flight_number or "",
            airline_company=request.airline_company,
            hotel_name=request.hotel_name,
            is_return_transfer=request.is_return_transfer,
            return_transfer_date=request.return_transfer_date,
            return_transfer_time=request.return_transfer_time,
            return_flight_number=request.return_flight_number,
            passenger_count=derive_passenger_count(request.number_of_adults, request.number_of_children),
            number_of_adults=request.number_of_adults,
            number_of_children=request.number_of_children,
            child_seat_count=request.child_seat_count or 0,
            luggage_count=request.luggage_count,
            child_names=request.child_names,
            additional_passenger_names=request.additional_passenger_names,
            language=(request.language or DEFAULT_LANGUAGE).lower(),
            vehicle_id=request.vehicle_id,
            region_id=request.region_id,
            distance_km=request.distance_km or 0,
            estimated_price=Decimal(str(request.estimated_price or 0)),
            currency=(request.currency or DEFAULT_CURRENCY).upper(),
            notes=request.notes or "",
            admin_notes=request.admin_notes or "",
            status=ReservationStatus.PENDING.value,
            created_at=self.clock.now_utc(),
        )

        self.db.add(reservation)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise_persistence_error(e, {"operation": "create_reservation", "source": source.value})

        stored = to_schema(await self._load(reservation.id))
        metrics_collector.record_reservation_created(source.value)
        logger.info(
            "Reservation created",
            extra={
                "reservation_id": stored.id,
                "source": source.value,
                "vehicle_id": stored.vehicle_id,
                "transfer_date": str(stored.transfer_date),
            }
        )

        await self.dispatcher.notify_created(stored)
        return stored

    async def update_status(
        self,
        reservation_id: int,
        status: ReservationStatus,
        admin_notes: Optional[str] = None,
    ) -> ReservationSchema:
        """
        Move a reservation to a new status.

        Confirming stamps ``confirmed_at`` and re-sends the customer
        confirmation when an email address is on file.

        Raises:
            NotFoundError: If the reservation does not exist
            InvalidTransitionError: If the change is not allowed from the current status
        """
        requested = ReservationStatus(status)
        reservation = await self._load(reservation_id)
        current = reservation.effective_status

        if not can_transition(current, requested):
            logger.warning(
                "Rejected reservation status change",
                extra={
                    "reservation_id": reservation_id,
                    "current": current.value,
                    "requested": requested.value,
                }
            )
            raise InvalidTransitionError(reservation_id, current.value, requested.value)

        now = self.clock.now_utc()
        reservation.status = requested.value
        reservation.updated_at = now
        if admin_notes and admin_notes.strip():
            reservation.admin_notes = admin_notes
        if requested == ReservationStatus.CONFIRMED:
            reservation.confirmed_at = now

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise_persistence_error(e, {"operation": "update_status", "reservation_id": reservation_id})

        stored = to_schema(await self._load(reservation_id))
        metrics_collector.record_status_change(requested.value)
        logger.info(
            "Reservation status changed",
            extra={"reservation_id": reservation_id, "from": current.value, "to": requested.value}
        )

        if requested == ReservationStatus.CONFIRMED and stored.customer_email:
            await self.dispatcher.notify_confirmed(stored)

        return stored

    async def calculate_price(
        self,
        vehicle_id: Optional[int],
        distance_km: Optional[float],
    ) -> PriceQuote:
        """
        Quote the flat usage fee of a vehicle.

        Distance is validated but does not change the price. Failures are
        reported in the quote, never raised.
        """
        if vehicle_id is None or distance_km is None or not math.isfinite(distance_km) or distance_km <= 0:
            return PriceQuote(success=False, message="Invalid parameters")

        vehicle = await self.catalog.get_vehicle(vehicle_id)
        if vehicle is None:
            return PriceQuote(success=False, message="Vehicle not found")

        price = vehicle.minimum_price
        return PriceQuote(
            success=True,
            price=price,
            distance_km=distance_km,
            vehicle_name=vehicle.name,
            currency=DEFAULT_CURRENCY,
            prices=await self.rates.convert_all(price),
        )

    async def get_reservation(self, reservation_id: int) -> ReservationSchema:
        return to_schema(await self._load(reservation_id))

    async def list_reservations(
        self,
        status: Optional[ReservationStatus] = None,
        limit: Optional[int] = None,
    ) -> list[ReservationListItem]:
        """
        Admin list, newest first; rows without a creation time sort last.

        Rows with no stored status match the Pending filter.
        """
        stmt = select(Reservation)
        if status is not None:
            requested = ReservationStatus(status)
            if requested == ReservationStatus.PENDING:
                stmt = stmt.where(or_(Reservation.status == requested.value, Reservation.status.is_(None)))
            else:
                stmt = stmt.where(Reservation.status == requested.value)
        stmt = stmt.order_by(
            Reservation.created_at.is_(None),
            Reservation.created_at.desc(),
            Reservation.id.desc(),
        )
        if limit:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return [to_list_item(r) for r in result.unique().scalars()]

    async def dashboard_summary(self) -> DashboardSummary:
        total = await self.db.scalar(select(func.count(Reservation.id)))
        pending = await self.db.scalar(
            select(func.count(Reservation.id)).where(
                or_(
                    Reservation.status == ReservationStatus.PENDING.value,
                    Reservation.status.is_(None),
                )
            )
        )
        today = self.clock.now_local().date()
        todays = await self.db.scalar(
            select(func.count(Reservation.id)).where(Reservation.transfer_date == today)
        )
        return DashboardSummary(
            total_reservations=total or 0,
            pending_reservations=pending or 0,
            todays_transfers=todays or 0,
            recent=await self.list_reservations(limit=RECENT_RESERVATIONS),
        )

    async def delete_reservation(self, reservation_id: int) -> None:
        reservation = await self._load(reservation_id)
        try:
            await self.db.delete(reservation)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise_persistence_error(e, {"operation": "delete_reservation", "reservation_id": reservation_id})

        logger.info("Reservation deleted", extra={"reservation_id": reservation_id})

    async def render_document(self, reservation_id: int, lang: Optional[str] = None) -> tuple[str, bytes]:
        """
        Itinerary PDF for download.

        Returns:
            (filename, content)
        """
        reservation = await self.get_reservation(reservation_id)
        lang = lang or reservation.language
        return document_filename(reservation.id, lang), self.documents.render(reservation, lang)
