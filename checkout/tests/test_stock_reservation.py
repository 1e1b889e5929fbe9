"""
Stock reservation manager: reserve / release / confirm accounting, the cache
mirror and the reconciliation pass for lapsed holds.
"""

import sys
from datetime import timedelta
from unittest import mock

from django.core.cache import cache
from django.db import DatabaseError
from django.utils import timezone

from checkout.models import ReservationStatus, StockReservation
from checkout.services.stock_reservation import StockReservationService, cache_key

from .helpers import CheckoutTestCase, make_order, make_product


class ReserveReleaseTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        self.svc = StockReservationService()
        self.product = make_product(stock=10)
        self.o1 = make_order()
        self.o2 = make_order()

    def stock(self):
        self.product.refresh_from_db()
        return self.product.stock

    def test_full_hold_blocks_other_orders_until_released(self):
        self.assertTrue(self.svc.reserve(self.product.pk, 10, self.o1.pk))
        self.assertEqual(self.stock(), 0)

        self.assertFalse(self.svc.reserve(self.product.pk, 1, self.o2.pk))
        self.assertEqual(self.stock(), 0)

        self.assertTrue(self.svc.release(self.product.pk, self.o1.pk))
        self.assertEqual(self.stock(), 10)

    def test_reserve_succeeds_iff_enough_stock(self):
        self.assertFalse(self.svc.reserve(self.product.pk, 11, self.o1.pk))
        self.assertEqual(self.stock(), 10)
        self.assertTrue(self.svc.reserve(self.product.pk, 4, self.o1.pk))
        self.assertEqual(self.svc.get_available_stock(self.product.pk), 6)

    def test_reserve_then_release_restores_stock_exactly(self):
        self.assertTrue(self.svc.reserve(self.product.pk, 5, self.o1.pk))
        self.assertTrue(self.svc.release(self.product.pk, self.o1.pk))
        self.assertEqual(self.stock(), 10)

    def test_second_release_is_a_noop(self):
        self.svc.reserve(self.product.pk, 3, self.o1.pk)
        self.assertTrue(self.svc.release(self.product.pk, self.o1.pk))
        self.assertFalse(self.svc.release(self.product.pk, self.o1.pk))
        self.assertEqual(self.stock(), 10)

    def test_release_without_reservation_returns_false(self):
        self.assertFalse(self.svc.release(self.product.pk, self.o1.pk))
        self.assertEqual(self.stock(), 10)

    def test_second_reserve_for_same_pair_is_rejected(self):
        self.assertTrue(self.svc.reserve(self.product.pk, 2, self.o1.pk))
        self.assertFalse(self.svc.reserve(self.product.pk, 2, self.o1.pk))
        self.assertEqual(self.stock(), 8)
        self.assertEqual(StockReservation.objects.held().count(), 1)

    def test_non_positive_quantity_is_rejected(self):
        self.assertFalse(self.svc.reserve(self.product.pk, 0, self.o1.pk))
        self.assertFalse(self.svc.reserve(self.product.pk, -2, self.o1.pk))
        self.assertEqual(self.stock(), 10)

    def test_missing_product_is_rejected(self):
        self.assertFalse(self.svc.reserve(999999, 1, self.o1.pk))
        self.assertEqual(self.svc.get_available_stock(999999), 0)
        self.assertFalse(self.svc.has_stock(999999, 1))

    def test_untracked_product_is_exempt(self):
        unlimited = make_product(stock=None)
        self.assertTrue(self.svc.reserve(unlimited.pk, 500, self.o1.pk))
        unlimited.refresh_from_db()
        self.assertIsNone(unlimited.stock)
        self.assertFalse(StockReservation.objects.filter(product=unlimited).exists())
        self.assertEqual(self.svc.get_available_stock(unlimited.pk), sys.maxsize)
        self.assertTrue(self.svc.has_stock(unlimited.pk, 10**6))


class ConfirmTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        self.svc = StockReservationService()
        self.product = make_product(stock=10)
        self.order = make_order()

    def stock(self):
        self.product.refresh_from_db()
        return self.product.stock

    def test_confirm_keeps_decrement_and_is_idempotent(self):
        self.svc.reserve(self.product.pk, 3, self.order.pk)
        self.assertTrue(self.svc.confirm(self.product.pk, self.order.pk))
        self.assertEqual(self.stock(), 7)
        self.assertTrue(self.svc.confirm(self.product.pk, self.order.pk))
        self.assertEqual(self.stock(), 7)
        self.assertEqual(
            StockReservation.objects.get(product=self.product, order=self.order).status,
            ReservationStatus.CONFIRMED,
        )

    def test_confirm_without_any_reservation_returns_true(self):
        self.assertTrue(self.svc.confirm(self.product.pk, self.order.pk))
        self.assertEqual(self.stock(), 10)

    def test_confirm_after_release_is_benign_and_logged(self):
        self.svc.reserve(self.product.pk, 3, self.order.pk)
        self.svc.release(self.product.pk, self.order.pk)
        with self.assertLogs("checkout.services.stock_reservation", level="WARNING") as logs:
            self.assertTrue(self.svc.confirm(self.product.pk, self.order.pk))
        self.assertIn("released_or_expired", logs.output[0])
        self.assertEqual(self.stock(), 10)

    def test_release_after_confirm_returns_false(self):
        self.svc.reserve(self.product.pk, 3, self.order.pk)
        self.svc.confirm(self.product.pk, self.order.pk)
        self.assertFalse(self.svc.release(self.product.pk, self.order.pk))
        self.assertEqual(self.stock(), 7)

    def test_confirm_and_release_order_helpers(self):
        other = make_product(stock=5)
        self.svc.reserve(self.product.pk, 2, self.order.pk)
        self.svc.reserve(other.pk, 1, self.order.pk)
        self.assertEqual(self.svc.release_order(self.order), 2)
        self.assertEqual(self.stock(), 10)
        other.refresh_from_db()
        self.assertEqual(other.stock, 5)

        order2 = make_order()
        self.svc.reserve(self.product.pk, 2, order2.pk)
        self.assertEqual(self.svc.confirm_order(order2), 1)
        self.assertEqual(self.stock(), 8)


class CacheMirrorTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        self.svc = StockReservationService()
        self.product = make_product(stock=10)
        self.order = make_order()
        self.key = cache_key(self.product.pk, self.order.pk)

    def test_key_layout(self):
        self.assertEqual(self.key, f"stock_reservation:{self.product.pk}:{self.order.pk}")

    def test_mirror_written_on_commit_and_removed_on_release(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.svc.reserve(self.product.pk, 4, self.order.pk)
        payload = cache.get(self.key)
        self.assertEqual(payload["product_id"], self.product.pk)
        self.assertEqual(payload["order_id"], self.order.pk)
        self.assertEqual(payload["quantity"], 4)
        self.assertIn("expires_at", payload)

        with self.captureOnCommitCallbacks(execute=True):
            self.svc.release(self.product.pk, self.order.pk)
        self.assertIsNone(cache.get(self.key))

    def test_mirror_not_written_when_reserve_fails(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            self.svc.reserve(self.product.pk, 50, self.order.pk)
        self.assertEqual(callbacks, [])
        self.assertIsNone(cache.get(self.key))

    def test_get_reservation_falls_back_to_held_row(self):
        self.svc.reserve(self.product.pk, 2, self.order.pk)  # callbacks not run: no mirror
        self.assertIsNone(cache.get(self.key))
        payload = self.svc.get_reservation(self.product.pk, self.order.pk)
        self.assertEqual(payload["quantity"], 2)

        self.svc.release(self.product.pk, self.order.pk)
        self.assertIsNone(self.svc.get_reservation(self.product.pk, self.order.pk))


class FailureHandlingTests(CheckoutTestCase):
    def test_database_error_returns_false_and_rolls_back_decrement(self):
        svc = StockReservationService()
        product = make_product(stock=10)
        order = make_order()
        with mock.patch.object(StockReservation.objects, "create", side_effect=DatabaseError("disk full")):
            with self.assertLogs("checkout.services.stock_reservation", level="ERROR") as logs:
                self.assertFalse(svc.reserve(product.pk, 3, order.pk))
        self.assertIn(f"product_id={product.pk}", logs.output[0])
        self.assertIn("quantity=3", logs.output[0])
        product.refresh_from_db()
        self.assertEqual(product.stock, 10)


class ReconcileTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        self.svc = StockReservationService()
        self.product = make_product(stock=10)
        self.order = make_order()

    def expire_all(self):
        StockReservation.objects.held().update(expires_at=timezone.now() - timedelta(minutes=1))

    def test_expired_holds_restore_stock_exactly_once(self):
        self.svc.reserve(self.product.pk, 4, self.order.pk)
        self.expire_all()

        self.assertEqual(self.svc.reconcile_expired(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
        self.assertEqual(StockReservation.objects.get().status, ReservationStatus.EXPIRED)

        self.assertEqual(self.svc.reconcile_expired(), 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

        # Nothing left to release.
        self.assertFalse(self.svc.release(self.product.pk, self.order.pk))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

    def test_unexpired_holds_are_left_alone(self):
        self.svc.reserve(self.product.pk, 4, self.order.pk)
        self.assertEqual(self.svc.reconcile_expired(), 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 6)

    def test_reconcile_accepts_explicit_clock(self):
        self.svc.reserve(self.product.pk, 4, self.order.pk)
        later = timezone.now() + timedelta(minutes=16)
        self.assertEqual(self.svc.reconcile_expired(now=later), 1)

    def test_hold_window_comes_from_settings(self):
        with self.settings(CHECKOUT_RESERVATION_MINUTES=5):
            self.svc.reserve(self.product.pk, 1, self.order.pk)
        held = StockReservation.objects.get()
        window = held.expires_at - held.created_at
        self.assertAlmostEqual(window.total_seconds(), 300, delta=5)
