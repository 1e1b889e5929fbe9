from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.utils import timezone

from checkout.models import ReservationStatus, StockReservation

from .helpers import CheckoutTestCase, make_product, make_zone, place_order


class ReconcileReservationsCommandTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        make_zone()
        self.product = make_product(stock=10)

    def run_command(self):
        out = StringIO()
        call_command("reconcile_reservations", stdout=out)
        return out.getvalue()

    def test_nothing_to_do(self):
        place_order([(self.product, 2)])
        self.assertIn("Expired 0 reservation(s).", self.run_command())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 8)

    def test_expires_lapsed_holds(self):
        order = place_order([(self.product, 2)])
        StockReservation.objects.filter(order=order).update(expires_at=timezone.now() - timedelta(minutes=1))

        self.assertIn("Expired 1 reservation(s).", self.run_command())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
        self.assertEqual(StockReservation.objects.get(order=order).status, ReservationStatus.EXPIRED)

        self.assertIn("Expired 0 reservation(s).", self.run_command())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
