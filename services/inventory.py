from loguru import logger

from database.models.product import Product
from services.exceptions import InsufficientStock, InvalidQuantity


def check_out(product: Product, quantity: int) -> Product:
    """Hand ``quantity`` units to a customer"""
    if quantity < 1:
        raise InvalidQuantity(quantity)
    available = product.available_quantity
    if quantity > available:
        raise InsufficientStock(product.id, quantity, available)
    product.quantity_with_customer = (product.quantity_with_customer or 0) + quantity
    logger.debug(f"Product {product.id}: {quantity} out, {product.available_quantity} left")
    return product


def check_in(product: Product, quantity: int) -> Product:
    """Take returned units back into stock"""
    if quantity < 1:
        raise InvalidQuantity(quantity)
    out = product.quantity_with_customer or 0
    if quantity > out:
        logger.warning(f"Product {product.id}: {quantity} returned but only {out} were out")
    product.quantity_with_customer = max(0, out - quantity)
    return product
