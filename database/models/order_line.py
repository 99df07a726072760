from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from database.base import Base
from database.models.product import RentalPeriod


class RentalOrderLine(Base):
    """Priced rental line. Belongs to exactly one quotation or one order."""
    __tablename__ = "rental_order_lines"

    id = Column(String(64), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)

    # Owner: one of the two is set
    quotation_id = Column(String(64), ForeignKey("quotations.id"), nullable=True, index=True)
    order_id = Column(String(64), ForeignKey("rental_orders.id"), nullable=True, index=True)

    product_id = Column(String(64), ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255), nullable=False)

    quantity = Column(Integer, nullable=False)
    rental_period = Column(Enum(RentalPeriod), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    # price_per_period is rate x billed duration, before quantity
    price_per_period = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    quotation = relationship("Quotation", back_populates="lines")
    order = relationship("RentalOrder", back_populates="lines")

    def __repr__(self):
        return f"<RentalOrderLine(id={self.id}, product_id={self.product_id}, total={self.total_price})>"

    def copy(self, line_id: str) -> "RentalOrderLine":
        """Fresh line with the same pricing snapshot and no owner"""
        return RentalOrderLine(
            id=line_id,
            position=self.position,
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            rental_period=self.rental_period,
            start_date=self.start_date,
            end_date=self.end_date,
            price_per_period=self.price_per_period,
            total_price=self.total_price,
        )

    def to_snapshot(self) -> dict:
        """JSON-safe representation stored on invoices"""
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "rental_period": self.rental_period.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "price_per_period": str(self.price_per_period),
            "total_price": str(self.total_price),
        }
