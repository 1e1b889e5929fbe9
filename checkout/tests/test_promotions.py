from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from checkout.errors import PromoInvalidError
from checkout.services import promotions

from .helpers import CheckoutTestCase, make_promo


class PromoValidationTests(CheckoutTestCase):
    def test_exhausted_code_is_rejected(self):
        make_promo(code="SAVE10", value="10", min_order="50", max_uses=100, uses_count=100)
        result = promotions.validate("SAVE10", Decimal("100"))
        self.assertFalse(result.valid)
        self.assertEqual(result.reason, "exhausted")

    def test_unknown_code(self):
        result = promotions.validate("NOPE", Decimal("100"))
        self.assertFalse(result.valid)
        self.assertEqual(result.reason, "not_found")
        self.assertEqual(result.message, "Invalid promo code.")

    def test_lookup_is_case_insensitive(self):
        make_promo(code="save10")
        result = promotions.validate("Save10", Decimal("100"))
        self.assertTrue(result.valid)
        self.assertEqual(result.promotion.code, "SAVE10")

    def test_first_failing_check_wins(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        make_promo(code="OLD", is_active=False, end_date=yesterday, min_order="500", max_uses=1, uses_count=1)
        self.assertEqual(promotions.validate("OLD", Decimal("10")).reason, "inactive")

    def test_date_window(self):
        today = timezone.localdate()
        make_promo(code="SOON", start_date=today + timedelta(days=2))
        make_promo(code="GONE", end_date=today - timedelta(days=1))
        make_promo(code="LASTDAY", start_date=today - timedelta(days=5), end_date=today)
        self.assertEqual(promotions.validate("SOON", Decimal("10")).reason, "not_started")
        self.assertEqual(promotions.validate("GONE", Decimal("10")).reason, "expired")
        self.assertTrue(promotions.validate("LASTDAY", Decimal("10")).valid)

    def test_minimum_order(self):
        make_promo(code="BIG", min_order="50.00")
        below = promotions.validate("BIG", Decimal("49.99"))
        self.assertEqual(below.reason, "below_minimum")
        self.assertIn("$50.00", below.message)
        self.assertTrue(promotions.validate("BIG", Decimal("50.00")).valid)

    def test_percentage_discount_rounds_half_up(self):
        make_promo(code="PCT", type="percentage", value="12.5")
        self.assertEqual(promotions.validate("PCT", Decimal("10.05")).discount, Decimal("1.26"))

    def test_fixed_discount_never_exceeds_subtotal(self):
        make_promo(code="FIFTY", type="fixed", value="50")
        self.assertEqual(promotions.validate("FIFTY", Decimal("30.00")).discount, Decimal("30.00"))
        self.assertEqual(promotions.validate("FIFTY", Decimal("80.00")).discount, Decimal("50.00"))

    def test_validate_or_raise_carries_reason(self):
        make_promo(code="CAP", max_uses=1, uses_count=1)
        with self.assertRaises(PromoInvalidError) as ctx:
            promotions.validate_or_raise("CAP", Decimal("10"))
        self.assertEqual(ctx.exception.reason, "exhausted")
        self.assertEqual(ctx.exception.to_dict()["reason"], "exhausted")


class PromoRedeemTests(CheckoutTestCase):
    def test_redeem_counts_one_use(self):
        promo = make_promo(code="ONE", max_uses=2)
        promotions.redeem(promo)
        self.assertEqual(promo.uses_count, 1)

    def test_redeem_refuses_past_cap(self):
        promo = make_promo(code="CAPPED", max_uses=1)
        promotions.redeem(promo)
        with self.assertRaises(PromoInvalidError) as ctx:
            promotions.redeem(promo)
        self.assertEqual(ctx.exception.reason, "exhausted")
        promo.refresh_from_db()
        self.assertEqual(promo.uses_count, 1)

    def test_unlimited_promo_keeps_counting(self):
        promo = make_promo(code="FOREVER")
        for _ in range(3):
            promotions.redeem(promo)
        self.assertEqual(promo.uses_count, 3)
