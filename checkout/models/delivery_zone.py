"""
checkout.models.delivery_zone

Named delivery area with its own fee schedule.

Matching data:
- suburbs:   list of suburb names (matched case-insensitively)
- postcodes: list of exact postcodes ("2000") or inclusive ranges ("2000-2599")
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models


class DeliveryZone(models.Model):
    name = models.CharField(max_length=120)
    suburbs = models.JSONField(default=list, blank=True)
    postcodes = models.JSONField(default=list, blank=True)

    delivery_fee = models.DecimalField(max_digits=8, decimal_places=2)
    # NULL means no free-delivery offer in this zone.
    free_delivery_threshold = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    estimated_days = models.PositiveSmallIntegerField(default=1)
    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name

    def is_free_delivery(self, subtotal: Decimal) -> bool:
        if self.free_delivery_threshold is None:
            return False
        return Decimal(subtotal) >= self.free_delivery_threshold

    def delivery_fee_for(self, subtotal: Decimal) -> Decimal:
        if self.is_free_delivery(subtotal):
            return Decimal("0.00")
        return self.delivery_fee

    @property
    def estimated_label(self) -> str:
        if self.estimated_days == 0:
            return "Same day"
        if self.estimated_days == 1:
            return "Next day"
        return f"{self.estimated_days} business days"

    def covers_suburb(self, suburb: str) -> bool:
        wanted = (suburb or "").strip().lower()
        if not wanted:
            return False
        return any(wanted == str(s).strip().lower() for s in (self.suburbs or []))

    def covers_postcode(self, postcode: str) -> bool:
        code = (postcode or "").strip()
        if not code:
            return False
        for entry in self.postcodes or []:
            entry = str(entry).strip()
            if "-" in entry:
                low, _, high = entry.partition("-")
                if code.isdigit() and low.strip().isdigit() and high.strip().isdigit():
                    if int(low) <= int(code) <= int(high):
                        return True
            elif entry == code:
                return True
        return False
