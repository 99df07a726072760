"""Transition tables for quotation, order and invoice statuses"""
from typing import Dict, FrozenSet

from database.models.invoice import InvoiceStatus
from database.models.quotation import QuotationStatus
from database.models.rental import OrderStatus
from services.exceptions import InvalidTransition

QUOTATION_TRANSITIONS: Dict[QuotationStatus, FrozenSet[QuotationStatus]] = {
    QuotationStatus.DRAFT: frozenset({QuotationStatus.SENT}),
    QuotationStatus.SENT: frozenset({
        QuotationStatus.ACCEPTED,
        QuotationStatus.REJECTED,
        QuotationStatus.EXPIRED,
    }),
    QuotationStatus.ACCEPTED: frozenset(),
    QuotationStatus.REJECTED: frozenset(),
    QuotationStatus.EXPIRED: frozenset(),
}

ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.DRAFT: frozenset({OrderStatus.SENT, OrderStatus.CANCELLED}),
    OrderStatus.SENT: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.ACTIVE, OrderStatus.CANCELLED}),
    OrderStatus.ACTIVE: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# paid is terminal: an invoice never goes back to partial
INVOICE_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT}),
    InvoiceStatus.SENT: frozenset({
        InvoiceStatus.PAID,
        InvoiceStatus.PARTIAL,
        InvoiceStatus.OVERDUE,
    }),
    InvoiceStatus.PARTIAL: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE}),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PARTIAL, InvoiceStatus.PAID}),
    InvoiceStatus.PAID: frozenset(),
}

_TABLES = {
    QuotationStatus: ("Quotation", QUOTATION_TRANSITIONS),
    OrderStatus: ("Order", ORDER_TRANSITIONS),
    InvoiceStatus: ("Invoice", INVOICE_TRANSITIONS),
}


def allowed_transitions(status) -> FrozenSet:
    """Statuses reachable in one step from ``status``"""
    _, table = _TABLES[type(status)]
    return table[status]


def check_transition(current, target) -> None:
    """Raise ``InvalidTransition`` unless ``current -> target`` is in the table"""
    entity, table = _TABLES[type(current)]
    if type(target) is not type(current) or target not in table[current]:
        raise InvalidTransition(entity, current, target)
