"""Reservation model definition."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.clock import utcnow
from ..core.database import Base

if TYPE_CHECKING:
    from .region import Region
    from .vehicle import Vehicle


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class LocationType(str, Enum):
    """Kind of pickup or drop-off point."""
    AIRPORT = "Airport"
    HOTEL = "Hotel"
    ADDRESS = "Address"


# Admin-driven transitions; re-applying the current status is always allowed
ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

SUPPORTED_LANGUAGES = ("tr", "en", "de", "ru")
DEFAULT_LANGUAGE = "en"
DEFAULT_CURRENCY = "EUR"


def can_transition(current: ReservationStatus, requested: ReservationStatus) -> bool:
    return requested == current or requested in ALLOWED_TRANSITIONS[current]


class Reservation(Base):
    """
    Booking request.

    Most business columns are nullable so rows written before validation
    was tightened still load. Read them through the ``effective_*``
    properties, which apply the documented defaults.
    """

    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Customer
    customer_name: Mapped[str] = mapped_column(String(100), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(30), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(150), nullable=True)

    # Trip
    pickup_location_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pickup_location: Mapped[str] = mapped_column(String(300), nullable=False)
    pickup_location_detail: Mapped[str | None] = mapped_column(String(300), nullable=True)
    dropoff_location_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    dropoff_location: Mapped[str] = mapped_column(String(300), nullable=False)
    dropoff_location_detail: Mapped[str | None] = mapped_column(String(300), nullable=True)
    transfer_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    transfer_time: Mapped[str | None] = mapped_column(String(10), nullable=True)
    flight_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    airline_company: Mapped[str | None] = mapped_column(String(100), nullable=True)
    hotel_name: Mapped[str | None] = mapped_column(String(150), nullable=True)

    # Return leg
    is_return_transfer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    return_transfer_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    return_transfer_time: Mapped[str | None] = mapped_column(String(10), nullable=True)
    return_flight_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Passengers
    passenger_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_adults: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_children: Mapped[int | None] = mapped_column(Integer, nullable=True)
    child_seat_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    luggage_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    child_names: Mapped[str | None] = mapped_column(String(500), nullable=True)
    additional_passenger_names: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    language: Mapped[str | None] = mapped_column(String(5), nullable=True)

    # Commercial
    vehicle_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("vehicles.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )
    region_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("regions.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    estimated_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Lifecycle
    status: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=utcnow, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "estimated_price IS NULL OR estimated_price >= 0",
            name="ck_reservation_price_non_negative"
        ),
    )

    vehicle: Mapped["Vehicle | None"] = relationship("Vehicle", lazy="joined")
    region: Mapped["Region | None"] = relationship("Region", lazy="joined")

    @property
    def effective_status(self) -> ReservationStatus:
        if not self.status:
            return ReservationStatus.PENDING
        return ReservationStatus(self.status)

    @property
    def effective_language(self) -> str:
        lang = (self.language or DEFAULT_LANGUAGE).lower()
        return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE

    @property
    def effective_currency(self) -> str:
        return (self.currency or DEFAULT_CURRENCY).upper()

    @property
    def adults(self) -> int:
        if self.number_of_adults is not None:
            return self.number_of_adults
        return self.passenger_count if self.passenger_count is not None else 1

    @property
    def children(self) -> int:
        return self.number_of_children or 0

    @property
    def child_seats(self) -> int:
        return self.child_seat_count or 0

    @property
    def price(self) -> Decimal:
        return self.estimated_price if self.estimated_price is not None else Decimal("0")

    @property
    def has_return_leg(self) -> bool:
        """Return details are only meaningful when the flag and a return date are both set."""
        return bool(self.is_return_transfer) and self.return_transfer_date is not None

    @property
    def passenger_names(self) -> str:
        if self.additional_passenger_names:
            return f"{self.customer_name}, {self.additional_passenger_names}"
        return self.customer_name

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, customer='{self.customer_name}', "
            f"status={self.status}, transfer_date={self.transfer_date})>"
        )
