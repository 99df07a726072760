from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from database.base import Base
import enum


class PaymentMethod(enum.Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"


class PaymentRecord(Base):
    """One payment applied to an invoice; the invoice keeps the running totals"""
    __tablename__ = "payment_records"

    id = Column(String(64), primary_key=True, index=True)
    invoice_id = Column(String(64), ForeignKey("invoices.id"), nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(Enum(PaymentMethod), nullable=False)
    paid_at = Column(DateTime, nullable=False)

    invoice = relationship("Invoice", back_populates="payments")

    def __repr__(self):
        return f"<PaymentRecord(id={self.id}, amount={self.amount}, method={self.method.value})>"
