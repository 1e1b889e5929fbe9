"""
checkout.models.promotion

Promo code rules. Codes are stored upper-case so lookups are case-insensitive.
NULL start/end dates leave that side of the validity window open.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.db import models

CENTS = Decimal("0.01")


class PromotionType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"


class Promotion(models.Model):
    name = models.CharField(max_length=120, blank=True, default="")
    code = models.CharField(max_length=40, unique=True)
    type = models.CharField(max_length=16, choices=PromotionType.choices, default=PromotionType.PERCENTAGE)
    value = models.DecimalField(max_digits=10, decimal_places=2)
    min_order = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    # NULL means unlimited uses.
    max_uses = models.PositiveIntegerField(null=True, blank=True)
    uses_count = models.PositiveIntegerField(default=0)

    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]

    def __str__(self) -> str:
        return self.code

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.uses_count >= self.max_uses

    def calculate_discount(self, subtotal: Decimal) -> Decimal:
        """
        Percentage → subtotal * value / 100 (half-up to cents).
        Fixed      → value, clamped so it never exceeds the subtotal.
        """
        subtotal = Decimal(subtotal)
        if self.type == PromotionType.PERCENTAGE:
            return (subtotal * self.value / Decimal("100")).quantize(CENTS, rounding=ROUND_HALF_UP)
        return min(self.value, subtotal).quantize(CENTS, rounding=ROUND_HALF_UP)
