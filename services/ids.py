import uuid
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def generate_id(prefix: str) -> str:
    """Opaque identifier such as ``order-3f2b...``"""
    return f"{prefix}-{uuid.uuid4().hex}"


def money(value) -> Decimal:
    """Quantize an amount to cents"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
