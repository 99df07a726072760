from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric
from sqlalchemy.sql import func
from database.base import Base
from config.company import CompanyConfig, RentalRules

# Both tables hold a single row under this key
SETTINGS_ROW_ID = 1


class CompanySettings(Base):
    __tablename__ = "company_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID, index=True)

    # Company profile
    name = Column(String(255), default="Rental Management Corp", nullable=False)
    gstin = Column(String(15), nullable=True)
    address = Column(String(500), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)

    # Rates used by pricing and settlement
    tax_rate = Column(Numeric(5, 2), default=18, nullable=False)
    security_deposit_percent = Column(Numeric(5, 2), default=25, nullable=False)
    late_fee_per_day = Column(Numeric(12, 2), default=500, nullable=False)
    currency = Column(String(3), default="INR", nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    def __repr__(self):
        return f"<CompanySettings(id={self.id}, company={self.name})>"

    def to_config(self, quotation_validity_days: int = 7, invoice_due_days: int = 7) -> CompanyConfig:
        return CompanyConfig(
            name=self.name,
            tax_rate=self.tax_rate,
            security_deposit_percent=self.security_deposit_percent,
            late_fee_per_day=self.late_fee_per_day,
            currency=self.currency,
            quotation_validity_days=quotation_validity_days,
            invoice_due_days=invoice_due_days,
        )


class RentalSettings(Base):
    __tablename__ = "rental_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID, index=True)

    # Which short periods can be booked
    allow_hourly = Column(Boolean, default=True, nullable=False)
    allow_daily = Column(Boolean, default=True, nullable=False)
    allow_weekly = Column(Boolean, default=True, nullable=False)

    # Booking limits
    min_rental_hours = Column(Integer, default=2, nullable=False)
    max_rental_days = Column(Integer, default=90, nullable=False)
    advance_booking_days = Column(Integer, default=60, nullable=False)

    updated_at = Column(DateTime, onupdate=func.now())

    def __repr__(self):
        return f"<RentalSettings(id={self.id}, max_rental_days={self.max_rental_days})>"

    def to_rules(self) -> RentalRules:
        return RentalRules(
            allow_hourly=self.allow_hourly,
            allow_daily=self.allow_daily,
            allow_weekly=self.allow_weekly,
            min_rental_hours=self.min_rental_hours,
            max_rental_days=self.max_rental_days,
            advance_booking_days=self.advance_booking_days,
        )
