"""
checkout.services.stock_reservation

Holds inventory for a candidate order during the checkout window.

Storage
-------
- StockReservation rows are the source of truth (status held/confirmed/released/expired).
- A cache entry `stock_reservation:{product_id}:{order_id}` mirrors each held row
  with a TTL equal to its expiry. It is written/deleted via transaction.on_commit
  so a rolled-back order never leaves a mirror behind.

Stock accounting
----------------
- reserve:   product.stock -= quantity (conditional UPDATE, never below zero)
- release:   product.stock += quantity (held → released)
- confirm:   no stock change           (held → confirmed)
- reconcile: product.stock += quantity (held → expired, once expires_at passed)

Products with stock = NULL are untracked: reserve() succeeds without a row and
no other call touches them.

None of the public methods raise on database errors; they log with full
context and return False.
"""

from __future__ import annotations

import logging
import sys
from datetime import timedelta
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from checkout.models import Product, ReservationStatus, StockReservation

log = logging.getLogger(__name__)

CACHE_PREFIX = "stock_reservation"


def cache_key(product_id: int, order_id: int) -> str:
    return f"{CACHE_PREFIX}:{product_id}:{order_id}"


class StockReservationService:
    def __init__(self, minutes: Optional[int] = None):
        self.minutes = minutes

    @property
    def hold_minutes(self) -> int:
        if self.minutes is not None:
            return int(self.minutes)
        return int(getattr(settings, "CHECKOUT_RESERVATION_MINUTES", 15))

    # ------------------------------------------------------------------ reserve

    def reserve(self, product_id: int, quantity: int, order_id: int) -> bool:
        """
        Decrement stock and record a hold for (product, order).

        Returns False when the product is missing, stock is short, the pair
        already holds stock, quantity is not positive, or the DB write fails.
        """
        if quantity is None or int(quantity) <= 0:
            log.warning("Reserve rejected product_id=%s order_id=%s quantity=%s reason=non_positive", product_id, order_id, quantity)
            return False
        quantity = int(quantity)

        try:
            with transaction.atomic():
                product = Product.objects.select_for_update().filter(pk=product_id).first()
                if product is None:
                    log.warning("Reserve rejected product_id=%s order_id=%s reason=missing_product", product_id, order_id)
                    return False

                if product.stock is None:
                    log.debug("Reserve skipped product_id=%s order_id=%s reason=untracked", product_id, order_id)
                    return True

                if StockReservation.objects.held().filter(product_id=product_id, order_id=order_id).exists():
                    log.warning("Reserve rejected product_id=%s order_id=%s reason=already_held", product_id, order_id)
                    return False

                # Compare-and-decrement: zero rows updated means not enough stock.
                updated = (
                    Product.objects
                    .filter(pk=product_id, stock__gte=quantity)
                    .update(stock=F("stock") - quantity)
                )
                if not updated:
                    log.info(
                        "Reserve rejected product_id=%s order_id=%s quantity=%s available=%s reason=insufficient_stock",
                        product_id, order_id, quantity, max(0, product.stock),
                    )
                    return False

                expires_at = timezone.now() + timedelta(minutes=self.hold_minutes)
                reservation = StockReservation.objects.create(
                    product_id=product_id,
                    order_id=order_id,
                    quantity=quantity,
                    expires_at=expires_at,
                )
                payload = reservation.cache_payload()
                ttl = self.hold_minutes * 60
                key = cache_key(product_id, order_id)
                transaction.on_commit(lambda: cache.set(key, payload, timeout=ttl))
        except DatabaseError:
            log.exception(
                "Stock reservation failed product_id=%s order_id=%s quantity=%s",
                product_id, order_id, quantity,
            )
            return False

        log.info(
            "Stock reserved product_id=%s order_id=%s quantity=%s expires_at=%s",
            product_id, order_id, quantity, expires_at.isoformat(),
        )
        return True

    # ------------------------------------------------------------------ release / confirm

    def release(self, product_id: int, order_id: int) -> bool:
        """
        Restore held stock. Returns False when nothing is held for the pair
        (already released, confirmed, expired or never reserved).
        """
        try:
            with transaction.atomic():
                reservation = (
                    StockReservation.objects
                    .held()
                    .select_for_update()
                    .filter(product_id=product_id, order_id=order_id)
                    .first()
                )
                if reservation is None:
                    log.debug("Release skipped product_id=%s order_id=%s reason=not_held", product_id, order_id)
                    return False

                self._restore_stock(reservation)
                self._resolve(reservation, ReservationStatus.RELEASED)
        except DatabaseError:
            log.exception("Stock release failed product_id=%s order_id=%s", product_id, order_id)
            return False

        log.info(
            "Stock released product_id=%s order_id=%s quantity=%s",
            product_id, order_id, reservation.quantity,
        )
        return True

    def confirm(self, product_id: int, order_id: int) -> bool:
        """
        Make the decrement permanent. No held row counts as already confirmed
        (True); a lone released/expired row is logged since stock was restored.
        """
        try:
            with transaction.atomic():
                reservation = (
                    StockReservation.objects
                    .held()
                    .select_for_update()
                    .filter(product_id=product_id, order_id=order_id)
                    .first()
                )
                if reservation is None:
                    statuses = set(
                        StockReservation.objects
                        .filter(product_id=product_id, order_id=order_id)
                        .values_list("status", flat=True)
                    )
                    if statuses and ReservationStatus.CONFIRMED.value not in statuses:
                        log.warning(
                            "Confirm without hold product_id=%s order_id=%s reason=released_or_expired",
                            product_id, order_id,
                        )
                    return True

                self._resolve(reservation, ReservationStatus.CONFIRMED)
        except DatabaseError:
            log.exception("Stock confirm failed product_id=%s order_id=%s", product_id, order_id)
            return False

        log.info(
            "Stock confirmed product_id=%s order_id=%s quantity=%s",
            product_id, order_id, reservation.quantity,
        )
        return True

    # ------------------------------------------------------------------ per-order helpers

    def release_order(self, order) -> int:
        """Release every held reservation of an order, newest first."""
        product_ids = list(
            StockReservation.objects.held()
            .filter(order_id=order.pk)
            .order_by("-id")
            .values_list("product_id", flat=True)
        )
        return sum(1 for pid in product_ids if self.release(pid, order.pk))

    def confirm_order(self, order) -> int:
        product_ids = list(
            StockReservation.objects.held()
            .filter(order_id=order.pk)
            .order_by("id")
            .values_list("product_id", flat=True)
        )
        return sum(1 for pid in product_ids if self.confirm(pid, order.pk))

    def has_active_hold(self, product_id: int, order_id: int) -> bool:
        """Held or already confirmed; used before taking payment."""
        return StockReservation.objects.filter(
            product_id=product_id,
            order_id=order_id,
            status__in=[ReservationStatus.HELD, ReservationStatus.CONFIRMED],
        ).exists()

    # ------------------------------------------------------------------ reads

    def get_reservation(self, product_id: int, order_id: int) -> Optional[Dict[str, Any]]:
        payload = cache.get(cache_key(product_id, order_id))
        if payload is not None:
            return payload
        reservation = StockReservation.objects.held().filter(product_id=product_id, order_id=order_id).first()
        return reservation.cache_payload() if reservation else None

    def get_available_stock(self, product_id: int) -> int:
        row = Product.objects.filter(pk=product_id).values("stock").first()
        if row is None:
            return 0
        if row["stock"] is None:
            return sys.maxsize
        return max(0, row["stock"])

    def has_stock(self, product_id: int, quantity: int) -> bool:
        return self.get_available_stock(product_id) >= quantity

    # ------------------------------------------------------------------ reconciliation

    def reconcile_expired(self, now=None) -> int:
        """
        Restore stock for held reservations past expires_at and mark them expired.
        Each row is handled in its own transaction; returns how many were expired.
        """
        now = now or timezone.now()
        ids = list(StockReservation.objects.lapsed(now).order_by("id").values_list("id", flat=True))
        expired = 0
        for reservation_id in ids:
            try:
                with transaction.atomic():
                    reservation = (
                        StockReservation.objects
                        .lapsed(now)
                        .select_for_update()
                        .filter(pk=reservation_id)
                        .first()
                    )
                    if reservation is None:
                        # Released or confirmed since the scan.
                        continue
                    self._restore_stock(reservation)
                    self._resolve(reservation, ReservationStatus.EXPIRED, now=now)
            except DatabaseError:
                log.exception("Reservation reconcile failed reservation_id=%s", reservation_id)
                continue

            expired += 1
            log.info(
                "Stock reservation expired product_id=%s order_id=%s quantity=%s expires_at=%s",
                reservation.product_id, reservation.order_id, reservation.quantity,
                reservation.expires_at.isoformat(),
            )

        if ids:
            log.info("Reservation reconcile finished scanned=%s expired=%s", len(ids), expired)
        return expired

    # ------------------------------------------------------------------ internals

    @staticmethod
    def _restore_stock(reservation: StockReservation) -> None:
        Product.objects.filter(pk=reservation.product_id, stock__isnull=False).update(
            stock=F("stock") + reservation.quantity
        )

    @staticmethod
    def _resolve(reservation: StockReservation, status: str, now=None) -> None:
        reservation.status = status
        reservation.resolved_at = now or timezone.now()
        reservation.save(update_fields=["status", "resolved_at"])
        key = cache_key(reservation.product_id, reservation.order_id)
        transaction.on_commit(lambda: cache.delete(key))


reservations = StockReservationService()
