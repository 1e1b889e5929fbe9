"""
checkout.services.delivery

Delivery zone resolution + fee quotes.

Matching rules (documented tie-break):
- only active zones, scanned in ascending id order, first match wins
- suburb match first (case-insensitive, trimmed)
- then postcode match (exact or "2000-2599" inclusive range)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from checkout.models import DeliveryZone
from checkout.utils.money import ZERO, to_decimal

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryQuote:
    fee: Decimal
    is_free: bool
    estimated_days: int
    estimated_label: str
    free_delivery_threshold: Optional[Decimal] = None
    # How much more the shopper must add to qualify; None when no offer applies.
    amount_to_free_delivery: Optional[Decimal] = None


def active_zones():
    return DeliveryZone.objects.filter(is_active=True).order_by("id")


def resolve(postcode: Optional[str], suburb: Optional[str] = None) -> Optional[DeliveryZone]:
    zones = list(active_zones())

    if suburb and suburb.strip():
        for zone in zones:
            if zone.covers_suburb(suburb):
                return zone

    if postcode and str(postcode).strip():
        for zone in zones:
            if zone.covers_postcode(str(postcode)):
                return zone

    log.info("No delivery zone postcode=%s suburb=%s", postcode, suburb)
    return None


def calculate_fee(zone: DeliveryZone, subtotal) -> DeliveryQuote:
    subtotal = to_decimal(subtotal)
    is_free = zone.is_free_delivery(subtotal)
    fee = ZERO if is_free else to_decimal(zone.delivery_fee)

    threshold = zone.free_delivery_threshold
    remaining = None
    if threshold is not None and not is_free:
        remaining = to_decimal(threshold - subtotal)

    return DeliveryQuote(
        fee=fee,
        is_free=is_free,
        estimated_days=zone.estimated_days,
        estimated_label=zone.estimated_label,
        free_delivery_threshold=to_decimal(threshold) if threshold is not None else None,
        amount_to_free_delivery=remaining,
    )
