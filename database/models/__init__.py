from .product import Product, RentalPeriod
from .order_line import RentalOrderLine
from .quotation import Quotation, QuotationStatus
from .rental import RentalOrder, OrderStatus
from .payment import PaymentRecord, PaymentMethod
from .invoice import Invoice, InvoiceStatus
from .settings import CompanySettings, RentalSettings

__all__ = [
    "Product", "RentalPeriod",
    "RentalOrderLine",
    "Quotation", "QuotationStatus",
    "RentalOrder", "OrderStatus",
    "PaymentRecord", "PaymentMethod",
    "Invoice", "InvoiceStatus",
    "CompanySettings", "RentalSettings"
]
