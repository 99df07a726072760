"""
Typed failures raised by the rental engine.

Every operation either returns its result or raises one of these; callers
decide what to show the user. Nothing here is retried automatically.
"""


class RentalError(Exception):
    """Base class for all rental engine errors"""


class InvalidPeriod(RentalError, ValueError):
    """Unknown rental period tag"""

    def __init__(self, period):
        self.period = period
        super().__init__(f"Unknown rental period: {period!r}")


class InvalidRange(RentalError, ValueError):
    """End of a rental range lies before its start"""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Rental ends before it starts: {start} > {end}")


class InvalidQuantity(RentalError, ValueError):
    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__(f"Quantity must be at least 1, got {quantity}")


class InvalidPayment(RentalError, ValueError):
    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Payment amount must be positive, got {amount}")


class InvalidPaymentMethod(RentalError, ValueError):
    def __init__(self, method):
        self.method = method
        super().__init__(f"Unknown payment method: {method!r}")


class BookingNotAllowed(RentalError, ValueError):
    """Booking violates the company's rental rules"""


class InvalidTransition(RentalError):
    """Status change not permitted from the current status"""

    def __init__(self, entity: str, current, target, reason: str = None):
        self.entity = entity
        self.current = current
        self.target = target
        message = f"{entity} cannot move from {_label(current)} to {_label(target)}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotFound(RentalError, LookupError):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class AlreadyConverted(RentalError):
    """Quotation was already turned into an order"""

    def __init__(self, quotation_id, order_id=None):
        self.quotation_id = quotation_id
        self.order_id = order_id
        super().__init__(f"Quotation {quotation_id} was already converted (order {order_id})")


class EmptyCart(RentalError):
    def __init__(self):
        super().__init__("Cannot create a quotation from an empty cart")


class InsufficientStock(RentalError):
    def __init__(self, product_id, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Product {product_id}: requested {requested}, only {available} available"
        )


def _label(status) -> str:
    return getattr(status, "value", status)
