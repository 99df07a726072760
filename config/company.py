"""
Configuration objects passed explicitly into the rental engine.

Pricing, conversion and settlement never read process-wide state: callers hand
them a ``CompanyConfig`` (and, for booking validation, ``RentalRules``).
"""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CompanyConfig(BaseModel):
    """Company-level rates used by the engine"""

    model_config = ConfigDict(frozen=True)

    name: str = "Rental Management Corp"
    tax_rate: Decimal = Field(default=Decimal("18"), ge=0, le=100)
    security_deposit_percent: Decimal = Field(default=Decimal("25"), ge=0, le=100)
    late_fee_per_day: Decimal = Field(default=Decimal("500"), ge=0)
    currency: str = "INR"
    quotation_validity_days: int = Field(default=7, ge=0)
    invoice_due_days: int = Field(default=7, ge=0)


class RentalRules(BaseModel):
    """Booking rules configured by the company (which periods, how long, how far ahead)"""

    model_config = ConfigDict(frozen=True)

    allow_hourly: bool = True
    allow_daily: bool = True
    allow_weekly: bool = True
    min_rental_hours: int = Field(default=2, ge=0)
    max_rental_days: int = Field(default=90, ge=1)
    advance_booking_days: int = Field(default=60, ge=0)
