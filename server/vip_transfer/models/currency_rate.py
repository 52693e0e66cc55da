"""CurrencyRate model definition."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class CurrencyRate(Base):
    """One row per non-EUR currency: 1 EUR = ``rate`` units of ``currency_code``."""

    __tablename__ = "currency_rates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False, unique=True, index=True)
    rate: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("rate > 0", name="ck_currency_rate_positive"),
    )

    def __repr__(self) -> str:
        return f"<CurrencyRate(code='{self.currency_code}', rate={self.rate})>"
