from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.utils import timezone

from checkout.models import Invoice, InvoiceStatus, Order, OrderStatus
from checkout.services import api, invoices

from .helpers import CheckoutTestCase, make_product, make_zone, place_order


class InvoiceTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        make_zone(fee="15.00", threshold="100.00")
        self.product = make_product(price="30.00")
        self.order = place_order([(self.product, 2)], notes="Side gate")

    def test_generate_snapshots_order_totals(self):
        invoice = invoices.generate_from_order(self.order)
        today = timezone.localdate()

        self.assertEqual(invoice.invoice_number, f"INV-{today:%Y%m}-0001")
        self.assertEqual((invoice.subtotal, invoice.delivery_fee, invoice.total), (Decimal("60.00"), Decimal("15.00"), Decimal("75.00")))
        self.assertEqual(invoice.status, InvoiceStatus.PENDING)
        self.assertEqual(invoice.due_date, today + timedelta(days=30))
        self.assertEqual(invoice.notes, "Side gate")

    def test_generate_is_idempotent(self):
        first = invoices.generate_from_order(self.order)
        second = invoices.generate_from_order(self.order)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Invoice.objects.count(), 1)

    def test_numbers_increment_within_month(self):
        invoices.generate_from_order(self.order)
        other = invoices.generate_from_order(place_order([(self.product, 1)]))
        self.assertTrue(other.invoice_number.endswith("-0002"))

    def test_sequence_restarts_each_month(self):
        self.assertEqual(invoices.next_invoice_number(date(2026, 9, 30)), "INV-202609-0001")
        invoices.generate_from_order(self.order)
        self.assertEqual(invoices.next_invoice_number(date(2030, 1, 2)), "INV-203001-0001")

    @override_settings(CHECKOUT_INVOICE_DUE_DAYS=7)
    def test_due_days_setting(self):
        invoice = invoices.generate_from_order(self.order)
        self.assertEqual(invoice.days_until_due, 7)

    def test_mark_paid(self):
        invoice = invoices.mark_paid(invoices.generate_from_order(self.order))
        self.assertTrue(invoice.is_paid)
        self.assertIsNotNone(invoice.paid_at)

        paid_at = invoice.paid_at
        invoices.mark_paid(invoice, paid_at=paid_at + timedelta(days=1))
        self.assertEqual(invoice.paid_at, paid_at)

    def test_overdue(self):
        invoice = invoices.generate_from_order(self.order)
        invoice.due_date = timezone.localdate() - timedelta(days=1)
        invoice.save()
        self.assertTrue(invoice.is_overdue)

        invoices.update_overdue_status(invoice)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, InvoiceStatus.OVERDUE)

    def test_paid_invoice_is_never_overdue(self):
        invoice = invoices.mark_paid(invoices.generate_from_order(self.order))
        invoice.due_date = timezone.localdate() - timedelta(days=10)
        invoices.update_overdue_status(invoice)
        self.assertFalse(invoice.is_overdue)
        self.assertEqual(invoice.status, InvoiceStatus.PAID)

    def test_summary(self):
        user = get_user_model().objects.create_user("amara", "amara@example.com", "pw", first_name="Amara", last_name="Moyo")
        self.order.user = user
        self.order.save()
        data = invoices.summary(invoices.generate_from_order(self.order))
        self.assertEqual(data["customer_name"], "Amara Moyo")
        self.assertEqual(data["customer_email"], "amara@example.com")
        self.assertEqual(data["total"], "75.00")
        self.assertFalse(data["is_overdue"])

    def test_summary_for_guest(self):
        data = invoices.summary(invoices.generate_from_order(self.order))
        self.assertIsNone(data["customer_name"])
        self.assertEqual(data["order_number"], self.order.order_number)


class InvoiceNumberingTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        make_zone()
        self.product = make_product(stock=50)
        self.today = timezone.localdate()
        self.prefix = f"INV-{self.today:%Y%m}-"

    def issue(self, number):
        order = place_order([(self.product, 1)])
        return Invoice.objects.create(
            order=order,
            invoice_number=number,
            subtotal=order.subtotal,
            total=order.total,
            issue_date=self.today,
            due_date=self.today,
        )

    def test_sequence_is_numeric_past_9999(self):
        self.issue(f"{self.prefix}9999")
        self.issue(f"{self.prefix}10000")
        self.assertEqual(invoices.next_invoice_number(self.today), f"{self.prefix}10001")

        invoice = invoices.generate_from_order(place_order([(self.product, 1)]))
        self.assertEqual(invoice.invoice_number, f"{self.prefix}10001")

    def test_taken_number_is_retried(self):
        taken = self.issue(f"{self.prefix}0001").invoice_number
        order = place_order([(self.product, 1)])
        with mock.patch.object(invoices, "next_invoice_number", side_effect=[taken, f"{self.prefix}0002"]):
            with self.assertLogs("checkout.services.invoices", level="WARNING"):
                invoice = invoices.generate_from_order(order)
        self.assertEqual(invoice.invoice_number, f"{self.prefix}0002")
        self.assertEqual(invoice.order, order)

    def test_numbering_exhausted_is_reported_not_raised(self):
        taken = self.issue(f"{self.prefix}0001").invoice_number
        order = place_order([(self.product, 1)])
        Order.objects.filter(pk=order.pk).update(status=OrderStatus.CONFIRMED)

        with mock.patch.object(invoices, "next_invoice_number", return_value=taken) as numbering:
            with self.assertLogs("checkout.services.api", level="ERROR"):
                result = api.get_invoice(order.pk)

        self.assertEqual(numbering.call_count, invoices.NUMBERING_ATTEMPTS)
        self.assertFalse(result["success"])
        self.assertEqual(result["error"]["code"], "persistence_error")
        self.assertFalse(Invoice.objects.filter(order=order).exists())
