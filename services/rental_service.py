"""
Persistence-backed entry point for the rental workflow.

Each public method is one unit of work on one record (plus the stock it
moves). Order status changes and invoice creation are separate commits;
``ensure_invoice`` is idempotent on the order id so an order left without an
invoice can always be billed again.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from config.company import CompanyConfig
from database.base import async_session_factory
from database.models.invoice import Invoice, InvoiceStatus
from database.models.product import Product
from database.models.quotation import Quotation, QuotationStatus
from database.models.rental import OrderStatus, RentalOrder
from services import inventory, invoice_payment, order_lifecycle, settlement
from services.exceptions import AlreadyConverted, NotFound
from services.ids import generate_id
from services.settings_service import SettingsService


class RentalService:
    """Quotations, orders and invoices stored through SQLAlchemy"""

    def __init__(
        self,
        session_factory=async_session_factory,
        config: CompanyConfig = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[str], str] = generate_id,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.id_factory = id_factory
        self._config = config
        self._settings_service = SettingsService(session_factory)

    async def get_config(self) -> CompanyConfig:
        """Explicit configuration if one was given, otherwise the stored company settings"""
        if self._config is not None:
            return self._config
        return await self._settings_service.get_company_config()

    @asynccontextmanager
    async def _transaction(self):
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    # ---------------------------
    # Loading
    # ---------------------------

    async def _load_quotation(self, session, quotation_id: str) -> Quotation:
        result = await session.execute(
            select(Quotation)
            .options(selectinload(Quotation.lines))
            .where(Quotation.id == quotation_id)
        )
        quotation = result.scalar_one_or_none()
        if not quotation:
            raise NotFound("Quotation", quotation_id)
        return quotation

    async def _load_order(self, session, order_id: str) -> RentalOrder:
        result = await session.execute(
            select(RentalOrder)
            .options(selectinload(RentalOrder.lines))
            .where(RentalOrder.id == order_id)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFound("Order", order_id)
        return order

    async def _find_invoice_for_order(self, session, order_id: str) -> Optional[Invoice]:
        result = await session.execute(
            select(Invoice)
            .options(selectinload(Invoice.payments))
            .where(Invoice.order_id == order_id)
        )
        return result.scalar_one_or_none()

    async def _load_invoice(self, session, invoice_id: str) -> Invoice:
        result = await session.execute(
            select(Invoice)
            .options(selectinload(Invoice.payments))
            .where(Invoice.id == invoice_id)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise NotFound("Invoice", invoice_id)
        return invoice

    async def _load_products(self, session, product_ids) -> dict:
        product_ids = sorted(set(product_ids))
        result = await session.execute(select(Product).where(Product.id.in_(product_ids)))
        products = {product.id: product for product in result.scalars().all()}
        missing = set(product_ids) - set(products)
        if missing:
            raise NotFound("Product", ", ".join(sorted(missing)))
        return products

    async def get_quotation(self, quotation_id: str) -> Quotation:
        async with self.session_factory() as session:
            return await self._load_quotation(session, quotation_id)

    async def get_order(self, order_id: str) -> RentalOrder:
        async with self.session_factory() as session:
            return await self._load_order(session, order_id)

    async def get_invoice(self, invoice_id: str) -> Invoice:
        async with self.session_factory() as session:
            return await self._load_invoice(session, invoice_id)

    async def get_invoice_for_order(self, order_id: str) -> Invoice:
        async with self.session_factory() as session:
            invoice = await self._find_invoice_for_order(session, order_id)
            if not invoice:
                raise NotFound("Invoice for order", order_id)
            return invoice

    # ---------------------------
    # Catalog
    # ---------------------------

    async def add_product(self, product: Product) -> Product:
        async with self._transaction() as session:
            session.add(product)
        logger.info(f"Product {product.id} added ({product.quantity_on_hand} on hand)")
        return product

    async def get_product(self, product_id: str) -> Product:
        async with self.session_factory() as session:
            product = await session.get(Product, product_id)
            if not product:
                raise NotFound("Product", product_id)
            return product

    # ---------------------------
    # Quotations
    # ---------------------------

    async def save_quotation(self, quotation: Quotation) -> Quotation:
        async with self._transaction() as session:
            session.add(quotation)
        logger.info(f"Quotation {quotation.id} saved ({quotation.status.value})")
        return quotation

    async def send_quotation(self, quotation_id: str) -> Quotation:
        async with self._transaction() as session:
            quotation = await self._load_quotation(session, quotation_id)
            order_lifecycle.send_quotation(quotation)
        return quotation

    async def reject_quotation(self, quotation_id: str) -> Quotation:
        async with self._transaction() as session:
            quotation = await self._load_quotation(session, quotation_id)
            order_lifecycle.reject_quotation(quotation)
        return quotation

    async def expire_quotations(self) -> List[str]:
        """Expire every sent quotation past its validity; returns their ids"""
        now = self.clock()
        async with self._transaction() as session:
            result = await session.execute(
                select(Quotation).where(
                    Quotation.status == QuotationStatus.SENT,
                    Quotation.valid_until < now,
                )
            )
            expired = [q.id for q in result.scalars().all() if order_lifecycle.expire_quotation(q, now)]
        if expired:
            logger.info(f"Expired {len(expired)} quotation(s)")
        return expired

    async def convert_quotation(self, quotation_id: str) -> RentalOrder:
        """Create the order for a sent quotation, at most once"""
        config = await self.get_config()
        try:
            async with self._transaction() as session:
                quotation = await self._load_quotation(session, quotation_id)
                vendor_id = None
                if quotation.lines:
                    products = await self._load_products(session, [line.product_id for line in quotation.lines])
                    vendor_id = products[quotation.lines[0].product_id].vendor_id

                order = order_lifecycle.convert_quotation_to_order(
                    quotation,
                    config,
                    self.clock(),
                    vendor_id=vendor_id,
                    id_factory=self.id_factory,
                )
                session.add(order)
        except IntegrityError:
            # another writer converted it first; the unique quotation_id caught it
            logger.warning(f"Quotation {quotation_id} was converted concurrently")
            raise AlreadyConverted(quotation_id) from None
        return order

    # ---------------------------
    # Orders
    # ---------------------------

    async def change_order_status(self, order_id: str, status) -> RentalOrder:
        """
        Move an order along its lifecycle.

        Pickup (``active``) takes the stock and is followed by invoice
        creation in a second commit; ``completed`` is a return settled now.
        """
        status = OrderStatus(status)
        if status == OrderStatus.COMPLETED:
            return await self.process_return(order_id)

        now = self.clock()
        async with self._transaction() as session:
            order = await self._load_order(session, order_id)
            if status == OrderStatus.ACTIVE:
                order_lifecycle.check_order_transition(order, status)
                products = await self._load_products(session, [line.product_id for line in order.lines])
                for line in order.lines:
                    inventory.check_out(products[line.product_id], line.quantity)
            order_lifecycle.transition_order(order, status, now)

        if status == OrderStatus.ACTIVE:
            await self.ensure_invoice(order_id)
        return order

    async def pickup(self, order_id: str) -> RentalOrder:
        return await self.change_order_status(order_id, OrderStatus.ACTIVE)

    async def cancel_order(self, order_id: str) -> RentalOrder:
        return await self.change_order_status(order_id, OrderStatus.CANCELLED)

    async def ensure_invoice(self, order_id: str) -> Invoice:
        """Return the order's invoice, creating it if it does not exist yet"""
        config = await self.get_config()
        try:
            async with self._transaction() as session:
                existing = await self._find_invoice_for_order(session, order_id)
                if existing:
                    return existing
                order = await self._load_order(session, order_id)
                invoice = order_lifecycle.create_invoice(
                    order, config, self.clock(), id_factory=self.id_factory
                )
                session.add(invoice)
        except IntegrityError:
            logger.warning(f"Invoice for order {order_id} was created concurrently")
            return await self.get_invoice_for_order(order_id)
        return invoice

    async def recover_missing_invoices(self) -> List[Invoice]:
        """Bill picked-up orders that have no invoice (crash between the two commits)"""
        async with self.session_factory() as session:
            result = await session.execute(
                select(RentalOrder.id)
                .outerjoin(Invoice, Invoice.order_id == RentalOrder.id)
                .where(
                    RentalOrder.status.in_([OrderStatus.ACTIVE, OrderStatus.COMPLETED]),
                    Invoice.id.is_(None),
                )
            )
            order_ids = list(result.scalars().all())

        invoices = []
        for order_id in order_ids:
            logger.warning(f"Order {order_id} has no invoice, creating it")
            invoices.append(await self.ensure_invoice(order_id))
        return invoices

    async def process_return(self, order_id: str, actual_return_date: datetime = None) -> RentalOrder:
        """Settle a return: late fee, completion, stock back; the late fee then goes on the invoice"""
        config = await self.get_config()
        now = self.clock()
        when = actual_return_date or now

        async with self._transaction() as session:
            order = await self._load_order(session, order_id)
            order_lifecycle.check_order_transition(order, OrderStatus.COMPLETED)
            products = await self._load_products(session, [line.product_id for line in order.lines])
            result = settlement.settle(order, when, config, now=now)
            for line in order.lines:
                inventory.check_in(products[line.product_id], line.quantity)

        if result.late_fee > 0:
            async with self._transaction() as session:
                invoice = await self._find_invoice_for_order(session, order_id)
                if invoice is None:
                    logger.warning(f"Order {order_id} has no invoice yet; the late fee is billed when it is created")
                elif invoice.is_paid:
                    logger.warning(f"Invoice {invoice.id} is already paid; late fee {result.late_fee} stays on order {order_id}")
                else:
                    invoice_payment.charge_late_fee(invoice, result.late_fee)
        return order

    async def get_return_reminders(self, within_days: int = 3) -> Tuple[List[RentalOrder], List[RentalOrder]]:
        """Active orders due back soon, and those already overdue"""
        now = self.clock()
        async with self.session_factory() as session:
            result = await session.execute(
                select(RentalOrder).where(RentalOrder.status == OrderStatus.ACTIVE)
            )
            active = list(result.scalars().all())
        return (
            settlement.pending_returns(active, now, within_days),
            settlement.overdue_returns(active, now),
        )

    # ---------------------------
    # Invoices
    # ---------------------------

    async def record_payment(self, invoice_id: str, amount, method) -> Invoice:
        async with self._transaction() as session:
            invoice = await self._load_invoice(session, invoice_id)
            invoice_payment.apply_payment(
                invoice, amount, method, self.clock(), id_factory=self.id_factory
            )
        return invoice

    async def mark_overdue_invoices(self) -> List[str]:
        now = self.clock()
        async with self._transaction() as session:
            result = await session.execute(
                select(Invoice).where(
                    Invoice.status.in_([InvoiceStatus.SENT, InvoiceStatus.PARTIAL]),
                    Invoice.due_date < now,
                )
            )
            overdue = [inv.id for inv in result.scalars().all() if invoice_payment.mark_overdue(inv, now)]
        return overdue
