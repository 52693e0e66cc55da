"""Vehicle and VehicleImage model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.clock import utcnow
from ..core.database import Base


class Vehicle(Base):
    """
    Bookable vehicle.

    ``minimum_price`` is the flat usage fee in EUR and the only price used
    for quoting. The per-km columns and the USD/TRY snapshots are retained
    for compatibility with existing data and are never read by pricing.
    """

    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    brand: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    model: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    passenger_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    luggage_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    features: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # Pricing
    minimum_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    minimum_price_usd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    minimum_price_try: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    price_per_km: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    price_per_km_usd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    price_per_km_try: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")

    is_active: Mapped[int | None] = mapped_column(Integer, nullable=True, default=1, index=True)
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=utcnow)

    images: Mapped[list["VehicleImage"]] = relationship(
        "VehicleImage",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        order_by="VehicleImage.sort_order",
        lazy="selectin",
        passive_deletes=True,
    )

    @property
    def active(self) -> bool:
        return self.is_active == 1

    @property
    def has_any_image(self) -> bool:
        """True when the vehicle has a primary image or at least one gallery image."""
        return bool(self.image_url) or bool(self.images)

    def __repr__(self) -> str:
        return f"<Vehicle(id={self.id}, name='{self.name}', active={self.is_active})>"


class VehicleImage(Base):
    """Additional gallery image owned by a vehicle."""

    __tablename__ = "vehicle_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    image_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="images")

    def __repr__(self) -> str:
        return f"<VehicleImage(id={self.id}, vehicle_id={self.vehicle_id}, url='{self.image_url}')>"
