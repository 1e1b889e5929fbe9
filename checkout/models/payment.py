from __future__ import annotations

from django.db import models


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class Payment(models.Model):
    """One payment attempt record per order; retries update it in place."""

    order = models.OneToOneField("checkout.Order", on_delete=models.CASCADE, related_name="payment")
    gateway = models.CharField(max_length=32)
    status = models.CharField(
        max_length=12,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="AUD")
    transaction_id = models.CharField(max_length=128, blank=True, null=True, db_index=True)
    gateway_response = models.JSONField(default=dict, blank=True)
    attempts = models.PositiveIntegerField(default=1)

    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Payment({self.gateway}, {self.amount} {self.currency})<{self.status}>"

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED
