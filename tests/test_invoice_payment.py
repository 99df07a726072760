import unittest
from datetime import datetime, timedelta
from decimal import Decimal

from database.models.invoice import InvoiceStatus
from database.models.payment import PaymentMethod
from services import invoice_payment
from services.exceptions import InvalidPayment, InvalidPaymentMethod, InvalidTransition
from services.transitions import allowed_transitions, check_transition
from tests.helpers import SequentialIds, make_invoice


class InvoicePaymentTestCase(unittest.TestCase):
    def setUp(self):
        self.now = datetime(2024, 6, 3, 15, 0)
        self.ids = SequentialIds()

    def pay(self, invoice, amount, method="card"):
        return invoice_payment.apply_payment(invoice, Decimal(amount), method, self.now, id_factory=self.ids)

    def test_paying_the_balance(self):
        invoice = make_invoice(total="16800", amount_paid="5000")
        self.pay(invoice, "11800")

        self.assertEqual(invoice.amount_paid, Decimal("16800.00"))
        self.assertEqual(invoice.amount_due, Decimal("0.00"))
        self.assertEqual(invoice.status, InvoiceStatus.PAID)
        self.assertEqual(invoice.paid_at, self.now)
        self.assertEqual(invoice.payment_method, PaymentMethod.CARD)

    def test_overpayment_clamps_balance(self):
        invoice = make_invoice(total="1100", amount_paid="1000")
        self.assertEqual(invoice.amount_due, Decimal("100"))
        self.pay(invoice, "150", "cash")

        self.assertEqual(invoice.amount_due, Decimal("0.00"))
        self.assertEqual(invoice.amount_paid, Decimal("1150.00"))
        self.assertEqual(invoice.status, InvoiceStatus.PAID)

    def test_partial_payment(self):
        invoice = make_invoice(total="16800", amount_paid="5000")
        self.pay(invoice, "1800", PaymentMethod.UPI)

        self.assertEqual(invoice.amount_due, Decimal("10000.00"))
        self.assertEqual(invoice.status, InvoiceStatus.PARTIAL)
        self.assertEqual(invoice.payment_method, PaymentMethod.UPI)
        self.assertIsNone(invoice.paid_at)

    def test_balance_never_negative_and_paid_never_regresses(self):
        invoice = make_invoice(total="1000", amount_paid="0", status=InvoiceStatus.SENT)
        seen_paid = False
        for amount in ("300", "300", "500", "10", "0.01", "1000"):
            self.pay(invoice, amount)
            self.assertGreaterEqual(invoice.amount_due, 0)
            if seen_paid:
                self.assertEqual(invoice.status, InvoiceStatus.PAID)
            seen_paid = seen_paid or invoice.status == InvoiceStatus.PAID
        self.assertTrue(seen_paid)

    def test_paid_at_is_stamped_once(self):
        invoice = make_invoice(total="100", amount_paid="0", status=InvoiceStatus.SENT)
        self.pay(invoice, "100")
        first_paid_at = invoice.paid_at
        self.now = self.now + timedelta(days=1)
        self.pay(invoice, "5")
        self.assertEqual(invoice.paid_at, first_paid_at)

    def test_non_positive_amounts_are_rejected(self):
        invoice = make_invoice()
        for amount in ("0", "-50"):
            with self.assertRaises(InvalidPayment):
                self.pay(invoice, amount)
        self.assertEqual(invoice.amount_paid, Decimal("5000"))
        self.assertEqual(invoice.payments, [])

    def test_unknown_method(self):
        invoice = make_invoice()
        with self.assertRaises(InvalidPaymentMethod) as ctx:
            self.pay(invoice, "10", "cheque")
        self.assertEqual(ctx.exception.method, "cheque")
        self.assertEqual(invoice.amount_paid, Decimal("5000"))
        self.assertEqual(invoice.payments, [])

    def test_draft_invoice_takes_no_payment(self):
        invoice = make_invoice(status=InvoiceStatus.DRAFT)
        with self.assertRaises(InvalidTransition):
            self.pay(invoice, "100")
        self.assertEqual(invoice.amount_paid, Decimal("5000"))

    def test_each_payment_is_recorded(self):
        invoice = make_invoice(total="16800", amount_paid="5000")
        self.pay(invoice, "1800", "upi")
        self.pay(invoice, "10000", "bank_transfer")

        self.assertEqual([p.id for p in invoice.payments], ["pay-1", "pay-2"])
        self.assertEqual([p.method for p in invoice.payments], [PaymentMethod.UPI, PaymentMethod.BANK_TRANSFER])
        self.assertEqual(invoice_payment.ledger_total(invoice), Decimal("11800.00"))
        # deposit + ledger == running total
        self.assertEqual(invoice.security_deposit + invoice_payment.ledger_total(invoice), invoice.amount_paid)

    # ---------- status changes ----------

    def test_invoice_transition_table(self):
        self.assertEqual(allowed_transitions(InvoiceStatus.PAID), set())
        self.assertIn(InvoiceStatus.PAID, allowed_transitions(InvoiceStatus.PARTIAL))
        with self.assertRaises(InvalidTransition):
            check_transition(InvoiceStatus.PAID, InvoiceStatus.PARTIAL)

    def test_send_invoice(self):
        invoice = make_invoice(status=InvoiceStatus.DRAFT)
        invoice_payment.send_invoice(invoice)
        self.assertEqual(invoice.status, InvoiceStatus.SENT)

    def test_overdue_then_paid(self):
        invoice = make_invoice(total="16800", amount_paid="5000", due_date=datetime(2024, 6, 8))

        self.assertFalse(invoice_payment.mark_overdue(invoice, datetime(2024, 6, 8)))
        self.assertTrue(invoice_payment.mark_overdue(invoice, datetime(2024, 6, 9)))
        self.assertEqual(invoice.status, InvoiceStatus.OVERDUE)

        self.pay(invoice, "800")
        self.assertEqual(invoice.status, InvoiceStatus.PARTIAL)
        self.pay(invoice, "11000")
        self.assertEqual(invoice.status, InvoiceStatus.PAID)

    def test_paid_invoice_is_never_overdue(self):
        invoice = make_invoice(total="100", amount_paid="100", status=InvoiceStatus.PAID)
        self.assertFalse(invoice_payment.mark_overdue(invoice, datetime(2030, 1, 1)))
        self.assertEqual(invoice.status, InvoiceStatus.PAID)

    # ---------- late fees ----------

    def test_late_fee_goes_on_open_invoice(self):
        invoice = make_invoice(total="16800", amount_paid="5000")
        invoice_payment.charge_late_fee(invoice, Decimal("500"))
        self.assertEqual(invoice.late_fee, Decimal("500.00"))
        self.assertEqual(invoice.total, Decimal("17300.00"))
        self.assertEqual(invoice.amount_due, Decimal("12300.00"))
        self.assertEqual(invoice.status, InvoiceStatus.PARTIAL)

    def test_late_fee_does_not_reopen_paid_invoice(self):
        invoice = make_invoice(total="100", amount_paid="100", status=InvoiceStatus.PAID)
        with self.assertRaises(InvalidTransition):
            invoice_payment.charge_late_fee(invoice, Decimal("500"))
        self.assertEqual(invoice.total, Decimal("100"))

    def test_zero_late_fee_is_a_no_op(self):
        invoice = make_invoice(total="100", amount_paid="100", status=InvoiceStatus.PAID)
        invoice_payment.charge_late_fee(invoice, Decimal("0"))
        self.assertEqual(invoice.total, Decimal("100"))


if __name__ == "__main__":
    unittest.main()
