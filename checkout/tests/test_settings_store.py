from decimal import Decimal

from django.core.cache import cache
from django.test import override_settings

from checkout.models import Setting
from checkout.services import settings_store

from .helpers import CheckoutTestCase


class SettingsStoreTests(CheckoutTestCase):
    def test_defaults_without_rows(self):
        self.assertTrue(settings_store.get_bool("payments.card_enabled"))
        self.assertEqual(settings_store.get_decimal("payments.cod_max_amount"), Decimal("500.00"))
        self.assertEqual(settings_store.get("unknown.key", "fallback"), "fallback")

    @override_settings(COD_MAX_AMOUNT=Decimal("250.00"))
    def test_default_follows_django_settings(self):
        self.assertEqual(settings_store.get_decimal("payments.cod_max_amount"), Decimal("250.00"))

    def test_rows_override_defaults(self):
        Setting.objects.create(key="payments.wallet_enabled", value=False, group="payments")
        self.assertFalse(settings_store.get_bool("payments.wallet_enabled"))

    def test_reads_are_cached(self):
        settings_store.set_value("store.name", "Zambezi Meats")
        self.assertEqual(settings_store.get("store.name"), "Zambezi Meats")
        with self.assertNumQueries(0):
            settings_store.get("store.name")
            settings_store.get("payments.card_enabled")

    def test_writes_invalidate_cache(self):
        settings_store.set_value("payments.cod_max_amount", "100.00", group="payments")
        self.assertEqual(settings_store.get_decimal("payments.cod_max_amount"), Decimal("100.00"))
        self.assertIsNotNone(cache.get(settings_store.CACHE_KEY))

        settings_store.set_value("payments.cod_max_amount", "80.00", group="payments")
        self.assertIsNone(cache.get(settings_store.CACHE_KEY))
        self.assertEqual(settings_store.get_decimal("payments.cod_max_amount"), Decimal("80.00"))

        Setting.objects.filter(key="payments.cod_max_amount").get().delete()
        self.assertEqual(settings_store.get_decimal("payments.cod_max_amount"), Decimal("500.00"))

    def test_string_booleans(self):
        settings_store.set_value("payments.deferred_enabled", "off")
        self.assertFalse(settings_store.get_bool("payments.deferred_enabled"))
        settings_store.set_value("payments.deferred_enabled", "Yes")
        self.assertTrue(settings_store.get_bool("payments.deferred_enabled"))
