from sqlalchemy import Column, String, DateTime, Enum, Numeric, Text
from sqlalchemy.orm import relationship
from database.base import Base
import enum


class OrderStatus(enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    CONFIRMED = "confirmed"     # Booked, waiting for pickup
    ACTIVE = "active"           # Out with the customer
    COMPLETED = "completed"     # Returned and settled
    CANCELLED = "cancelled"


class RentalOrder(Base):
    __tablename__ = "rental_orders"

    id = Column(String(64), primary_key=True, index=True)
    quotation_id = Column(String(64), unique=True, nullable=True)

    # Parties
    customer_id = Column(String(64), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    vendor_id = Column(String(64), nullable=True, index=True)

    status = Column(Enum(OrderStatus), default=OrderStatus.DRAFT, nullable=False)

    # Amounts
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    security_deposit = Column(Numeric(12, 2), nullable=False, default=0)
    late_fee = Column(Numeric(12, 2), nullable=False, default=0)

    # Schedule
    pickup_date = Column(DateTime, nullable=True)
    return_date = Column(DateTime, nullable=True)
    actual_return_date = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    lines = relationship(
        "RentalOrderLine",
        back_populates="order",
        order_by="RentalOrderLine.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<RentalOrder(id={self.id}, customer_id={self.customer_id}, status={self.status.value})>"

    @property
    def is_active(self) -> bool:
        return self.status == OrderStatus.ACTIVE

    @property
    def is_settled(self) -> bool:
        return self.status == OrderStatus.COMPLETED
