"""Catalog snapshot schemas for vehicles, regions and hero slides.

Instances are frozen: the in-process cache hands the same object to every
request, so nothing downstream may mutate it.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class VehicleImage(BaseModel):
    """Gallery image of a vehicle."""

    id: int
    image_url: str
    sort_order: int = 0

    class Config:
        from_attributes = True
        frozen = True


class Vehicle(BaseModel):
    """Vehicle snapshot."""

    id: int = Field(..., description="Vehicle ID")
    name: str = Field(..., description="Display name")
    type: str = Field("", description="Sedan, SUV, VAN, ...")
    brand: str = ""
    model: str = ""
    passenger_capacity: Optional[int] = None
    luggage_capacity: Optional[int] = None
    description: str = ""
    features: str = ""
    image_url: str = ""
    minimum_price: float = Field(..., ge=0, description="Flat usage fee in EUR")
    currency: str = "EUR"
    active: bool = Field(..., description="Shown on public pages")
    sort_order: Optional[int] = None
    images: tuple[VehicleImage, ...] = ()

    class Config:
        from_attributes = True
        frozen = True


class Region(BaseModel):
    """Region snapshot."""

    id: int = Field(..., description="Region ID")
    name: str
    name_en: str = ""
    description: Optional[str] = None
    description_en: Optional[str] = None
    image_url: str = ""
    price: float = Field(..., ge=0, description="Price in EUR")
    currency: str = "EUR"
    start_point: str = "Antalya Airport"
    start_point_en: str = "Antalya Airport"
    distance_km: float = 0.0
    estimated_duration_minutes: int = 0
    sort_order: int = 0
    active: bool

    class Config:
        from_attributes = True
        frozen = True


class HeroSlide(BaseModel):
    """Homepage hero slide snapshot."""

    id: int
    image_url: str
    sort_order: int = 0
    active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        frozen = True


class Homepage(BaseModel):
    """Everything the homepage needs in one payload."""

    hero: tuple[HeroSlide, ...]
    vehicles: tuple[Vehicle, ...]
    regions: tuple[Region, ...]
    settings: dict[str, str]
    rates: dict[str, float]


class VehicleRequest(BaseModel):
    """Create or replace a vehicle."""

    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field("", max_length=50)
    brand: str = Field("", max_length=50)
    model: str = Field("", max_length=50)
    passenger_capacity: Optional[int] = Field(None, ge=0)
    luggage_capacity: Optional[int] = Field(None, ge=0)
    description: str = ""
    features: str = ""
    image_url: str = Field("", max_length=500)
    minimum_price: float = Field(0, ge=0, description="Flat usage fee in EUR")
    minimum_price_usd: float = Field(0, ge=0)
    minimum_price_try: float = Field(0, ge=0)
    price_per_km: float = Field(0, ge=0, description="Stored for compatibility, not used for pricing")
    price_per_km_usd: float = Field(0, ge=0)
    price_per_km_try: float = Field(0, ge=0)
    currency: Optional[str] = Field(None, max_length=3)
    is_active: bool = True
    sort_order: int = 0
    images: list[str] = Field(default_factory=list, description="Gallery image URLs in display order")


class RegionRequest(BaseModel):
    """Create or replace a region."""

    name: str = Field(..., min_length=1, max_length=100)
    name_en: str = Field("", max_length=100)
    description: Optional[str] = None
    description_en: Optional[str] = None
    image_url: str = Field("", max_length=500)
    price: float = Field(..., ge=0, le=10000, description="Price in EUR")
    currency: str = Field("EUR", max_length=3)
    start_point: str = Field("Antalya Airport", max_length=200)
    start_point_en: str = Field("Antalya Airport", max_length=200)
    distance_km: float = Field(0, ge=0)
    estimated_duration_minutes: int = Field(0, ge=0)
    sort_order: int = 0
    is_active: bool = True


class HeroSlideRequest(BaseModel):
    """Create or replace a hero slide."""

    image_url: str = Field(..., min_length=1, max_length=500)
    sort_order: int = 0
    is_active: bool = True


class SettingsUpdateRequest(BaseModel):
    """Upsert site settings."""

    values: dict[str, str] = Field(..., description="Setting key to value")
