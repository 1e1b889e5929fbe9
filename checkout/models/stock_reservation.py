"""
checkout.models.stock_reservation

Durable record of a stock hold for one (product, order) pair.

Lifecycle:
  held → confirmed   (payment succeeded; the decrement becomes permanent)
  held → released    (order cancelled / assembly rolled back; stock restored)
  held → expired     (reconciliation pass after expires_at; stock restored)

At most one `held` row exists per (product, order). Rows are never deleted so
that the reconciliation pass can always find holds whose cache mirror lapsed.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone


class ReservationStatus(models.TextChoices):
    HELD = "held", "Held"
    CONFIRMED = "confirmed", "Confirmed"
    RELEASED = "released", "Released"
    EXPIRED = "expired", "Expired"


class StockReservationQuerySet(models.QuerySet):
    def held(self):
        return self.filter(status=ReservationStatus.HELD)

    def lapsed(self, now=None):
        return self.held().filter(expires_at__lte=now or timezone.now())


class StockReservation(models.Model):
    product = models.ForeignKey("checkout.Product", on_delete=models.CASCADE, related_name="reservations")
    order = models.ForeignKey("checkout.Order", on_delete=models.CASCADE, related_name="reservations")
    quantity = models.PositiveIntegerField()
    status = models.CharField(
        max_length=12,
        choices=ReservationStatus.choices,
        default=ReservationStatus.HELD,
        db_index=True,
    )
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    resolved_at = models.DateTimeField(null=True, blank=True)

    objects = StockReservationQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "order"],
                condition=models.Q(status="held"),
                name="checkout_one_held_reservation_per_product_order",
            ),
        ]

    def __str__(self) -> str:
        return f"Reservation(p={self.product_id}, o={self.order_id}, q={self.quantity})<{self.status}>"

    def cache_payload(self) -> dict:
        return {
            "product_id": self.product_id,
            "order_id": self.order_id,
            "quantity": self.quantity,
            "expires_at": self.expires_at.isoformat(),
        }
