from sqlalchemy import Column, String, DateTime, Enum, Numeric, Text
from sqlalchemy.orm import relationship
from database.base import Base
import enum


class QuotationStatus(enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Quotation(Base):
    __tablename__ = "quotations"

    id = Column(String(64), primary_key=True, index=True)

    customer_id = Column(String(64), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)

    status = Column(Enum(QuotationStatus), default=QuotationStatus.DRAFT, nullable=False)

    # Amounts, derived from the lines when the quotation is issued
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)

    valid_until = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=False, default="")

    # Set once, when the quotation is converted
    order_id = Column(String(64), unique=True, nullable=True)

    created_at = Column(DateTime, nullable=False)

    lines = relationship(
        "RentalOrderLine",
        back_populates="quotation",
        order_by="RentalOrderLine.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Quotation(id={self.id}, customer_id={self.customer_id}, status={self.status.value})>"

    def is_expired(self, now) -> bool:
        return now > self.valid_until

    @property
    def is_converted(self) -> bool:
        return self.status == QuotationStatus.ACCEPTED
