from sqlalchemy import Column, String, DateTime, Enum, Numeric, JSON
from sqlalchemy.orm import relationship
from database.base import Base
from database.models.payment import PaymentMethod
import enum


class InvoiceStatus(enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PARTIAL = "partial"     # Partly paid
    PAID = "paid"           # Nothing left to pay
    OVERDUE = "overdue"     # Due date passed with a balance


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(64), primary_key=True, index=True)

    # One invoice per order; order_id is the idempotency key for creation
    order_id = Column(String(64), unique=True, nullable=False, index=True)
    customer_id = Column(String(64), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)

    # Snapshot of the order lines at billing time
    items = Column(JSON, nullable=False, default=list)

    # Amounts
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    security_deposit = Column(Numeric(12, 2), nullable=False, default=0)
    late_fee = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    amount_due = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(Enum(InvoiceStatus), default=InvoiceStatus.DRAFT, nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=True)

    due_date = Column(DateTime, nullable=False)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)

    payments = relationship(
        "PaymentRecord",
        back_populates="invoice",
        order_by="PaymentRecord.paid_at",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Invoice(id={self.id}, order_id={self.order_id}, status={self.status.value})>"

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID
