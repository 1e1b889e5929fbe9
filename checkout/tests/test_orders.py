from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from checkout.errors import InvalidTransitionError
from checkout.models import InvoiceStatus, OrderStatus, Payment, PaymentStatus, ReservationStatus, StockReservation
from checkout.services import invoices, orders
from checkout.services.stock_reservation import reservations

from .helpers import CheckoutTestCase, make_product, make_zone, place_order


def paid(order):
    Payment.objects.create(
        order=order,
        gateway="stripe",
        amount=order.total,
        status=PaymentStatus.COMPLETED,
        paid_at=timezone.now(),
    )
    return order


class OrderStatusTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        make_zone()
        self.product = make_product(stock=10, price="25.00")
        self.order = place_order([(self.product, 3)])

    def test_forward_moves_may_skip_steps(self):
        order = orders.update_status(paid(self.order), OrderStatus.CONFIRMED)
        order = orders.update_status(order, OrderStatus.READY, notes="Packed")
        self.assertEqual(order.status, OrderStatus.READY)
        self.assertEqual(
            list(order.status_history.values_list("status", flat=True)),
            ["pending", "confirmed", "ready"],
        )
        self.assertEqual(order.status_history.last().notes, "Packed")

    def test_unpaid_order_cannot_leave_pending(self):
        for status in (OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.DELIVERED):
            with self.assertRaises(InvalidTransitionError):
                orders.update_status(self.order, status)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)
        self.assertEqual(self.order.status_history.count(), 1)

    def test_failed_payment_does_not_unlock_fulfilment(self):
        Payment.objects.create(order=self.order, gateway="stripe", amount=self.order.total, status=PaymentStatus.FAILED)
        with self.assertRaises(InvalidTransitionError):
            orders.update_status(self.order, OrderStatus.PROCESSING)

    def test_fulfilment_stock_survives_reconcile(self):
        orders.update_status(paid(self.order), OrderStatus.PROCESSING)
        self.assertEqual(StockReservation.objects.get(order=self.order).status, ReservationStatus.CONFIRMED)

        expired = reservations.reconcile_expired(now=timezone.now() + timedelta(minutes=30))
        self.assertEqual(expired, 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 7)

    def test_backward_move_is_rejected(self):
        order = orders.update_status(paid(self.order), OrderStatus.PROCESSING)
        with self.assertRaises(InvalidTransitionError) as ctx:
            orders.update_status(order, OrderStatus.CONFIRMED)
        self.assertEqual(ctx.exception.status, 409)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PROCESSING)

    def test_same_status_is_rejected(self):
        with self.assertRaises(InvalidTransitionError):
            orders.update_status(self.order, OrderStatus.PENDING)

    def test_history_records_actor(self):
        staff = get_user_model().objects.create_user("staff", "staff@example.com", "pw")
        orders.update_status(paid(self.order), OrderStatus.CONFIRMED, changed_by=staff)
        self.assertEqual(self.order.status_history.last().changed_by, staff)

    def test_cancel_releases_held_stock(self):
        order = orders.cancel_order(self.order, reason="Changed my mind")

        self.assertEqual(order.status, OrderStatus.CANCELLED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
        self.assertEqual(
            StockReservation.objects.get(order=order).status,
            ReservationStatus.RELEASED,
        )
        last = order.status_history.last()
        self.assertEqual((last.status, last.notes), ("cancelled", "Changed my mind"))

    def test_cancel_after_confirm_keeps_stock_sold(self):
        order = orders.update_status(paid(self.order), OrderStatus.CONFIRMED)
        self.assertEqual(reservations.confirm_order(order), 0)

        orders.cancel_order(order)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 7)

    def test_terminal_orders_cannot_be_cancelled(self):
        order = orders.update_status(paid(self.order), OrderStatus.DELIVERED)
        self.assertFalse(order.can_be_cancelled)
        with self.assertRaises(InvalidTransitionError):
            orders.cancel_order(order)

        cancelled = orders.cancel_order(place_order([(self.product, 1)]))
        with self.assertRaises(InvalidTransitionError):
            orders.update_status(cancelled, OrderStatus.CONFIRMED)

    def test_cancel_cancels_invoice(self):
        order = orders.update_status(paid(self.order), OrderStatus.CONFIRMED)
        invoice = invoices.generate_from_order(order)
        self.assertEqual(invoice.total, Decimal("90.00"))

        orders.cancel_order(order)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, InvoiceStatus.CANCELLED)
