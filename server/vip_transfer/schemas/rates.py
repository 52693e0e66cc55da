"""Currency rate schemas."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field


class Rates(BaseModel):
    """Current EUR-based exchange rates."""

    base: str = Field("EUR", description="Canonical currency")
    rates: dict[str, float] = Field(..., description="1 EUR = rate units of each currency")
    updated_at: Optional[datetime] = Field(None, description="Most recent stored update")


class SaveRatesRequest(BaseModel):
    """
    Admin rate update.

    Values arrive as typed in the admin form, so both ``38,27`` and
    ``38.27`` are accepted.
    """

    try_rate: Union[str, float] = Field(..., alias="TRY")
    usd_rate: Union[str, float] = Field(..., alias="USD")
    gbp_rate: Union[str, float] = Field(..., alias="GBP")

    model_config = {"populate_by_name": True}
