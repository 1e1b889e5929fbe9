"""
checkout.models.order

Order + line item snapshots + status history.

Status flow:
  pending → confirmed → processing → ready → out_for_delivery → delivered
  any non-terminal status → cancelled
delivered and cancelled are terminal. Orders are never deleted, only cancelled.

OrderItem rows snapshot name/price at creation time so historical orders stay
accurate after catalog edits.
"""

from __future__ import annotations

import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PROCESSING = "processing", "Processing"
    READY = "ready", "Ready"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out for delivery"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


# Forward order of the fulfilment pipeline (cancelled sits outside it).
STATUS_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]
TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class PaymentMethod(models.TextChoices):
    CARD = "card", "Credit/Debit Card"
    WALLET = "wallet", "PayPal"
    DEFERRED = "deferred", "Afterpay"
    CASH_ON_DELIVERY = "cash_on_delivery", "Cash on Delivery"


# Unambiguous alphabet for order number suffixes (no 0/1/I/O).
_SUFFIX_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"


def generate_order_number() -> str:
    """
    Example:
      ZM-20261019-7K4Q
    """
    date = timezone.localdate().strftime("%Y%m%d")
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(4))
    return f"ZM-{date}-{suffix}"


class Order(models.Model):
    order_number = models.CharField(max_length=32, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    address = models.ForeignKey(
        "checkout.Address",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    delivery_zone = models.ForeignKey(
        "checkout.DeliveryZone",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)

    # ---- monetary snapshot ----
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="AUD")

    promotion_code = models.CharField(max_length=40, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    delivery_instructions = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["status", "created_at"], name="checkout_order_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Order({self.order_number})<{self.status}>"

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = generate_order_number()
            while Order.objects.filter(order_number=self.order_number).exists():
                self.order_number = generate_order_number()
        super().save(*args, **kwargs)

    @property
    def is_active(self) -> bool:
        return self.status not in TERMINAL_STATUSES

    @property
    def can_be_cancelled(self) -> bool:
        return self.is_active

    def can_transition_to(self, status: str) -> bool:
        """
        Forward-only moves along STATUS_FLOW; cancelled from any non-terminal status.
        """
        if self.status in TERMINAL_STATUSES or status == self.status:
            return False
        if status == OrderStatus.CANCELLED:
            return True
        if status not in STATUS_FLOW:
            return False
        return STATUS_FLOW.index(status) > STATUS_FLOW.index(self.status)


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "checkout.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    product_sku = models.CharField(max_length=64, blank=True, default="")
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity}"


class OrderStatusHistory(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=20, choices=OrderStatus.choices)
    notes = models.TextField(blank=True, null=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "order status history"

    def __str__(self) -> str:
        return f"{self.order_id} → {self.status}"
