"""Region model definition."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.clock import utcnow
from ..core.database import Base


class Region(Base):
    """Bookable destination with bilingual (TR/EN) copy and a EUR price."""

    __tablename__ = "regions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name_en: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")

    start_point: Mapped[str] = mapped_column(String(200), nullable=False, default="Antalya Airport")
    start_point_en: Mapped[str] = mapped_column(String(200), nullable=False, default="Antalya Airport")
    distance_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    estimated_duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[int] = mapped_column(Integer, nullable=False, default=1, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("price >= 0 AND price <= 10000", name="ck_region_price_range"),
    )

    @property
    def active(self) -> bool:
        return self.is_active == 1

    def display_name(self, lang: str) -> str:
        """English name for non-Turkish visitors when one is set."""
        if lang != "tr" and self.name_en:
            return self.name_en
        return self.name

    def __repr__(self) -> str:
        return f"<Region(id={self.id}, name='{self.name}', active={self.is_active})>"
