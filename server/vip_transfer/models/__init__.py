"""Models module exporting all database models."""

from .currency_rate import CurrencyRate
from .region import Region
from .reservation import (
    ALLOWED_TRANSITIONS,
    LocationType,
    Reservation,
    ReservationStatus,
    can_transition,
)
from .site_setting import HeroSlide, SiteSetting
from .vehicle import Vehicle, VehicleImage

__all__ = [
    # Catalog
    "Vehicle",
    "VehicleImage",
    "Region",
    "HeroSlide",

    # Reservations
    "Reservation",
    "ReservationStatus",
    "LocationType",
    "ALLOWED_TRANSITIONS",
    "can_transition",

    # Configuration data
    "CurrencyRate",
    "SiteSetting",
]
