"""
checkout.services.promotions

Promo code validation. Checks run in a fixed order and the first failure wins:

  not_found → inactive → not_started / expired → below_minimum → exhausted

redeem() is the only place uses_count changes; it increments with a
conditional UPDATE so concurrent checkouts cannot push it past max_uses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.db.models import F, Q
from django.utils import timezone

from checkout.errors import PromoInvalidError
from checkout.models import Promotion
from checkout.utils.money import ZERO, format_money, to_decimal

log = logging.getLogger(__name__)

MESSAGES = {
    "not_found": "Invalid promo code.",
    "inactive": "This promo code is no longer active.",
    "not_started": "This promo code is not active yet.",
    "expired": "This promo code has expired.",
    "below_minimum": "Minimum order of {min_order} required for this promo code.",
    "exhausted": "This promo code has reached its usage limit.",
}


@dataclass
class PromoResult:
    valid: bool
    discount: Decimal = ZERO
    reason: Optional[str] = None
    message: str = ""
    promotion: Optional[Promotion] = None


def _invalid(reason: str, promotion: Optional[Promotion] = None, **fmt) -> PromoResult:
    return PromoResult(
        valid=False,
        reason=reason,
        message=MESSAGES[reason].format(**fmt),
        promotion=promotion,
    )


def validate(code: Optional[str], subtotal, today=None) -> PromoResult:
    code = (code or "").strip()
    subtotal = to_decimal(subtotal)
    today = today or timezone.localdate()

    promotion = Promotion.objects.filter(code__iexact=code).first() if code else None
    if promotion is None:
        return _invalid("not_found")

    if not promotion.is_active:
        return _invalid("inactive", promotion)

    if promotion.start_date and today < promotion.start_date:
        return _invalid("not_started", promotion)
    if promotion.end_date and today > promotion.end_date:
        return _invalid("expired", promotion)

    if subtotal < promotion.min_order:
        return _invalid("below_minimum", promotion, min_order=format_money(promotion.min_order))

    if promotion.is_exhausted:
        return _invalid("exhausted", promotion)

    discount = promotion.calculate_discount(subtotal)
    return PromoResult(
        valid=True,
        discount=discount,
        message=f"Promo code applied! You save {format_money(discount)}.",
        promotion=promotion,
    )


def validate_or_raise(code: str, subtotal) -> PromoResult:
    result = validate(code, subtotal)
    if not result.valid:
        raise PromoInvalidError(result.reason, result.message)
    return result


def redeem(promotion: Promotion) -> None:
    """Count one use. Raises PromoInvalidError(exhausted) if the cap was hit meanwhile."""
    updated = (
        Promotion.objects
        .filter(pk=promotion.pk)
        .filter(Q(max_uses__isnull=True) | Q(uses_count__lt=F("max_uses")))
        .update(uses_count=F("uses_count") + 1)
    )
    if not updated:
        log.info("Promo redeem rejected code=%s reason=exhausted", promotion.code)
        raise PromoInvalidError("exhausted", MESSAGES["exhausted"])
    promotion.refresh_from_db(fields=["uses_count"])
    log.info("Promo redeemed code=%s uses_count=%s", promotion.code, promotion.uses_count)
