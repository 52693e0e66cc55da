"""Reservation-related Pydantic schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


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


class ReservationSource(str, Enum):
    """Entry point a reservation was created through."""
    PUBLIC = "public"
    ADMIN = "admin"


class CreateReservationRequest(BaseModel):
    """
    Booking form submission.

    Required fields are typed Optional; the service checks them together
    and reports every missing field at once.
    """

    customer_name: Optional[str] = Field(None, max_length=100)
    customer_phone: Optional[str] = Field(None, max_length=30)
    customer_email: Optional[str] = Field(None, max_length=150)

    pickup_location_type: Optional[LocationType] = None
    pickup_location: Optional[str] = Field(None, max_length=300)
    pickup_location_detail: Optional[str] = Field(None, max_length=300)
    dropoff_location_type: Optional[LocationType] = None
    dropoff_location: Optional[str] = Field(None, max_length=300)
    dropoff_location_detail: Optional[str] = Field(None, max_length=300)

    transfer_date: Optional[date] = None
    transfer_time: Optional[str] = Field(None, max_length=10, description="HH:mm")
    flight_number: Optional[str] = Field(None, max_length=20)
    airline_company: Optional[str] = Field(None, max_length=100)
    hotel_name: Optional[str] = Field(None, max_length=150)

    is_return_transfer: bool = False
    return_transfer_date: Optional[date] = None
    return_transfer_time: Optional[str] = Field(None, max_length=10)
    return_flight_number: Optional[str] = Field(None, max_length=20)

    number_of_adults: Optional[int] = Field(None, ge=0, le=99)
    number_of_children: Optional[int] = Field(None, ge=0, le=99)
    child_seat_count: Optional[int] = Field(None, ge=0, le=99)
    luggage_count: Optional[int] = Field(None, ge=0, le=99)
    child_names: Optional[str] = Field(None, max_length=500)
    additional_passenger_names: Optional[str] = Field(None, max_length=1000)
    language: Optional[str] = Field(None, max_length=5)

    vehicle_id: Optional[int] = None
    region_id: Optional[int] = None
    distance_km: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    estimated_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[str] = Field(None, max_length=3)
    notes: Optional[str] = None
    admin_notes: Optional[str] = None


class UpdateStatusRequest(BaseModel):
    """Admin status change."""

    status: ReservationStatus = Field(..., description="Target status")
    admin_notes: Optional[str] = Field(None, description="Replaces the stored note when non-empty")


class Reservation(BaseModel):
    """Reservation response schema."""

    id: int
    customer_name: str
    customer_phone: str
    customer_email: str = ""
    pickup_location_type: Optional[str] = None
    pickup_location: str
    pickup_location_detail: str = ""
    dropoff_location_type: Optional[str] = None
    dropoff_location: str
    dropoff_location_detail: str = ""
    transfer_date: Optional[date] = None
    transfer_time: Optional[str] = None
    flight_number: str = ""
    airline_company: Optional[str] = None
    hotel_name: Optional[str] = None
    is_return_transfer: bool = False
    return_transfer_date: Optional[date] = None
    return_transfer_time: Optional[str] = None
    return_flight_number: Optional[str] = None
    passenger_count: int
    number_of_adults: int
    number_of_children: int
    child_seat_count: int
    luggage_count: int = 0
    child_names: str = ""
    additional_passenger_names: str = ""
    language: str
    vehicle_id: Optional[int] = None
    vehicle_name: Optional[str] = None
    region_id: Optional[int] = None
    region_name: Optional[str] = None
    distance_km: float = 0.0
    estimated_price: float = 0.0
    currency: str
    notes: str = ""
    status: ReservationStatus
    admin_notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None


class ReservationCreated(BaseModel):
    """Response to a successful booking submission."""

    id: int = Field(..., description="New reservation ID")
    status: ReservationStatus
    confirmation_url: str = Field(..., description="Where to fetch the confirmation view")


class ReservationListItem(BaseModel):
    """Row of the admin reservation list."""

    id: int
    customer_name: str
    customer_phone: str
    pickup_location: str
    dropoff_location: str
    transfer_date: Optional[date] = None
    transfer_time: Optional[str] = None
    vehicle_name: Optional[str] = None
    estimated_price: float = 0.0
    currency: str
    status: ReservationStatus
    created_at: Optional[datetime] = None


class DashboardSummary(BaseModel):
    """Admin dashboard counters."""

    total_reservations: int
    pending_reservations: int
    todays_transfers: int
    recent: list[ReservationListItem]


class PriceQuote(BaseModel):
    """Result of the public price calculation."""

    success: bool
    message: Optional[str] = None
    price: Optional[float] = Field(None, description="Flat usage fee in EUR")
    distance_km: Optional[float] = None
    vehicle_name: Optional[str] = None
    currency: str = "EUR"
    prices: dict[str, float] = Field(default_factory=dict, description="Fee converted per currency")


class PriceCalculationRequest(BaseModel):
    """Public price calculation input."""

    vehicle_id: Optional[int] = Field(None, description="Selected vehicle")
    distance_km: Optional[float] = Field(None, description="Route distance; must be positive")
