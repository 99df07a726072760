from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, Text
from sqlalchemy.sql import func
from database.base import Base
from decimal import Decimal
import enum


class RentalPeriod(enum.Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Product(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    vendor_id = Column(String(64), nullable=True, index=True)

    # Rate table, one rate per billing period
    rate_hourly = Column(Numeric(12, 2), nullable=False, default=0)
    rate_daily = Column(Numeric(12, 2), nullable=False, default=0)
    rate_weekly = Column(Numeric(12, 2), nullable=False, default=0)
    rate_monthly = Column(Numeric(12, 2), nullable=False, default=0)
    rate_yearly = Column(Numeric(12, 2), nullable=False, default=0)

    # Stock
    quantity_on_hand = Column(Integer, nullable=False, default=0)
    quantity_with_customer = Column(Integer, nullable=False, default=0)

    is_rentable = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, available={self.available_quantity})>"

    @property
    def rental_prices(self) -> dict:
        return {period: self.rate_for(period) for period in RentalPeriod}

    def rate_for(self, period: RentalPeriod) -> Decimal:
        rate = getattr(self, f"rate_{period.value}")
        return Decimal(str(rate or 0))

    @property
    def available_quantity(self) -> int:
        return (self.quantity_on_hand or 0) - (self.quantity_with_customer or 0)
