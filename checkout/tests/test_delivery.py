from decimal import Decimal

from checkout.services import delivery

from .helpers import CheckoutTestCase, make_zone


class ResolveZoneTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        self.cbd = make_zone(name="CBD", suburbs=["Sydney", "Haymarket"], postcodes=["2000"])
        self.west = make_zone(name="Inner West", suburbs=["Newtown"], postcodes=["2037-2050"])

    def test_suburb_match_is_case_insensitive_and_trimmed(self):
        self.assertEqual(delivery.resolve("9999", "  newTOWN "), self.west)

    def test_postcode_exact_and_range(self):
        self.assertEqual(delivery.resolve("2000"), self.cbd)
        self.assertEqual(delivery.resolve("2042"), self.west)
        self.assertEqual(delivery.resolve("2050"), self.west)

    def test_suburb_beats_postcode(self):
        # Postcode points at CBD, suburb at Inner West.
        self.assertEqual(delivery.resolve("2000", "Newtown"), self.west)

    def test_unknown_location_returns_none(self):
        self.assertIsNone(delivery.resolve("3000", "Melbourne"))

    def test_inactive_zones_are_skipped(self):
        self.west.is_active = False
        self.west.save()
        self.assertIsNone(delivery.resolve("2042", "Newtown"))

    def test_overlapping_zones_resolve_to_lowest_id(self):
        overlap = make_zone(name="Overlap", suburbs=["Sydney"], postcodes=["2000"])
        self.assertGreater(overlap.pk, self.cbd.pk)
        self.assertEqual(delivery.resolve("2000", "Sydney"), self.cbd)


class DeliveryFeeTests(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        self.zone = make_zone(fee="15.00", threshold="100.00", estimated_days=1)

    def test_fee_waived_at_threshold(self):
        quote = delivery.calculate_fee(self.zone, Decimal("100.00"))
        self.assertEqual(quote.fee, Decimal("0.00"))
        self.assertTrue(quote.is_free)
        self.assertIsNone(quote.amount_to_free_delivery)

    def test_fee_charged_just_below_threshold(self):
        quote = delivery.calculate_fee(self.zone, Decimal("99.99"))
        self.assertEqual(quote.fee, Decimal("15.00"))
        self.assertFalse(quote.is_free)
        self.assertEqual(quote.amount_to_free_delivery, Decimal("0.01"))
        self.assertEqual(quote.free_delivery_threshold, Decimal("100.00"))

    def test_no_threshold_always_charges(self):
        zone = make_zone(name="Rural", fee="25.00", threshold=None)
        quote = delivery.calculate_fee(zone, Decimal("5000"))
        self.assertEqual(quote.fee, Decimal("25.00"))
        self.assertFalse(quote.is_free)
        self.assertIsNone(quote.free_delivery_threshold)

    def test_estimated_labels(self):
        for days, label in [(0, "Same day"), (1, "Next day"), (3, "3 business days")]:
            self.zone.estimated_days = days
            quote = delivery.calculate_fee(self.zone, Decimal("10"))
            self.assertEqual(quote.estimated_days, days)
            self.assertEqual(quote.estimated_label, label)
