"""Currency rate store: EUR-based rates behind a short-lived cache."""

import logging
import math
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import MemoryCache
from ..core.clock import Clock, system_clock
from ..core.config import settings
from ..core.exceptions import ValidationError, raise_persistence_error
from ..models.currency_rate import CurrencyRate
from .cache_invalidation import CacheInvalidator

logger = logging.getLogger(__name__)

BASE_CURRENCY = "EUR"
STORED_CURRENCIES = ("TRY", "USD", "GBP")
CANONICAL_CURRENCIES = (BASE_CURRENCY,) + STORED_CURRENCIES
RATE_CACHE_KEY = "currency_rates"


def default_rates() -> dict[str, float]:
    return {
        "TRY": settings.default_rate_try,
        "USD": settings.default_rate_usd,
        "GBP": settings.default_rate_gbp,
    }


def build_rate_table(
    stored: Mapping[str, Decimal | float | None],
    defaults: Mapping[str, float],
) -> dict[str, float]:
    """
    Merge stored rates over defaults.

    Only the canonical currencies are ever present in the result; unknown
    stored codes are dropped and a missing or non-positive stored rate falls
    back to its default. EUR is always 1.
    """
    table = {BASE_CURRENCY: 1.0}
    for code in STORED_CURRENCIES:
        value = stored.get(code)
        if value is not None and value > 0:
            table[code] = float(value)
        else:
            table[code] = float(defaults[code])
    return table


def parse_rate(raw: str | float | int | None) -> float:
    """
    Parse an admin-entered rate.

    Accepts a decimal comma ("38,27") as well as a point.

    Raises:
        ValueError: If the value is empty, not numeric or not positive
    """
    if raw is None:
        raise ValueError("Rate is required")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = raw.strip().replace(",", ".")
        if not text:
            raise ValueError("Rate is required")
        try:
            value = float(text)
        except ValueError:
            raise ValueError(f"'{raw}' is not a valid number") from None
    if not math.isfinite(value) or value <= 0:
        raise ValueError("Rate must be greater than zero")
    return value


def parse_rate_inputs(try_raw, usd_raw, gbp_raw) -> tuple[float, float, float]:
    """Parse all three admin inputs, reporting every invalid field together."""
    errors: dict[str, str] = {}
    parsed: dict[str, float] = {}
    for code, raw in (("TRY", try_raw), ("USD", usd_raw), ("GBP", gbp_raw)):
        try:
            parsed[code] = parse_rate(raw)
        except ValueError as e:
            errors[code] = str(e)
    if errors:
        raise ValidationError(detail="Currency rates are invalid", errors=errors)
    return parsed["TRY"], parsed["USD"], parsed["GBP"]


class RateService:
    """Service for reading and saving exchange rates."""

    def __init__(
        self,
        db: AsyncSession,
        cache: MemoryCache,
        clock: Optional[Clock] = None,
        invalidator: Optional[CacheInvalidator] = None,
    ):
        self.db = db
        self.cache = cache
        self.clock = clock or system_clock
        self.invalidator = invalidator

    async def get_rates(self) -> dict[str, float]:
        """
        Return {EUR: 1, TRY, USD, GBP}.

        Served from the cache for up to ``rate_cache_ttl_seconds``; a miss
        reads the table and fills gaps from the configured defaults.

        Returns:
            A fresh dict the caller may modify
        """
        cached = await self.cache.get_or_create(
            RATE_CACHE_KEY,
            settings.rate_cache_ttl_seconds,
            self._load_rates,
        )
        return dict(cached)

    async def _load_rates(self) -> tuple[tuple[str, float], ...]:
        stmt = select(CurrencyRate).where(CurrencyRate.currency_code.in_(STORED_CURRENCIES))
        result = await self.db.execute(stmt)
        stored = {row.currency_code: row.rate for row in result.scalars()}

        missing = [code for code in STORED_CURRENCIES if code not in stored]
        if missing:
            logger.info(
                "Currency rates missing, using defaults",
                extra={"missing": missing}
            )

        table = build_rate_table(stored, default_rates())
        return tuple(table.items())

    async def save_rates(self, try_rate: float, usd_rate: float, gbp_rate: float) -> dict[str, float]:
        """
        Upsert the three stored rates in one transaction and evict the cache.

        Args:
            try_rate: 1 EUR in TRY
            usd_rate: 1 EUR in USD
            gbp_rate: 1 EUR in GBP

        Returns:
            The rate table as it will be read next

        Raises:
            ValidationError: If any rate is not positive
            PersistenceError: If the write fails
        """
        values = {"TRY": try_rate, "USD": usd_rate, "GBP": gbp_rate}
        invalid = {code: "Rate must be greater than zero" for code, v in values.items() if not v > 0}
        if invalid:
            raise ValidationError(detail="Currency rates are invalid", errors=invalid)

        now = self.clock.now_utc()
        try:
            result = await self.db.execute(
                select(CurrencyRate).where(CurrencyRate.currency_code.in_(STORED_CURRENCIES))
            )
            existing = {row.currency_code: row for row in result.scalars()}

            for code, value in values.items():
                rate = Decimal(str(value))
                row = existing.get(code)
                if row is None:
                    self.db.add(CurrencyRate(currency_code=code, rate=rate, updated_at=now))
                else:
                    row.rate = rate
                    row.updated_at = now

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise_persistence_error(e, {"operation": "save_rates"})

        self.cache.remove(RATE_CACHE_KEY)
        if self.invalidator is not None:
            await self.invalidator.invalidate_rates()

        logger.info(
            "Currency rates saved",
            extra={"try": try_rate, "usd": usd_rate, "gbp": gbp_rate}
        )
        return build_rate_table(values, default_rates())

    async def last_updated(self) -> Optional[datetime]:
        result = await self.db.execute(select(func.max(CurrencyRate.updated_at)))
        return result.scalar_one_or_none()

    async def convert(self, amount_eur: float, currency: str) -> float:
        """
        Convert a EUR amount into currency at the current rate.

        Raises:
            ValidationError: If currency is not one of the canonical codes
        """
        code = (currency or "").upper()
        rates = await self.get_rates()
        if code not in rates:
            raise ValidationError(
                detail=f"Unsupported currency '{currency}'",
                errors={"currency": f"Must be one of {', '.join(CANONICAL_CURRENCIES)}"}
            )
        return round(float(amount_eur) * rates[code], 2)

    async def convert_all(self, amount_eur: float) -> dict[str, float]:
        rates = await self.get_rates()
        return {code: round(float(amount_eur) * rate, 2) for code, rate in rates.items()}
