from decimal import Decimal as D
from django.core.management.base import BaseCommand
from checkout.models import DeliveryZone, Product, Promotion, PromotionType, Setting


class Command(BaseCommand):
    help = "Seed checkout with delivery zones, sample products and promo codes. Idempotent."

    def handle(self, *args, **opts):
        # Delivery zones (Sydney)
        DeliveryZone.objects.get_or_create(
            name="Sydney CBD",
            defaults={
                "suburbs": ["Sydney", "Haymarket", "The Rocks", "Ultimo", "Pyrmont", "Surry Hills"],
                "postcodes": ["2000", "2007", "2009", "2010"],
                "delivery_fee": D("9.95"),
                "free_delivery_threshold": D("100.00"),
                "estimated_days": 0,
            },
        )
        DeliveryZone.objects.get_or_create(
            name="Inner West",
            defaults={
                "suburbs": ["Newtown", "Marrickville", "Leichhardt", "Annandale", "Glebe"],
                "postcodes": ["2037-2050", "2204"],
                "delivery_fee": D("12.95"),
                "free_delivery_threshold": D("120.00"),
                "estimated_days": 1,
            },
        )
        DeliveryZone.objects.get_or_create(
            name="Greater Sydney",
            defaults={
                "suburbs": [],
                "postcodes": ["2100-2234", "2555-2574", "2745-2770"],
                "delivery_fee": D("15.00"),
                "free_delivery_threshold": D("150.00"),
                "estimated_days": 2,
            },
        )

        # Products
        for name, slug, sku, price, sale, stock in [
            ("Beef Biltong 250g", "beef-biltong-250g", "BIL-250", D("18.50"), None, 120),
            ("Boerewors 1kg", "boerewors-1kg", "BOE-1000", D("24.00"), D("21.00"), 60),
            ("Lamb Chops 1kg", "lamb-chops-1kg", "LMB-1000", D("32.00"), None, 40),
            ("Peri-Peri Marinade", "peri-peri-marinade", "SAU-PP", D("7.50"), None, None),
        ]:
            Product.objects.get_or_create(
                slug=slug,
                defaults={"name": name, "sku": sku, "price": price, "sale_price": sale, "stock": stock},
            )

        # Promotions
        Promotion.objects.get_or_create(
            code="WELCOME10",
            defaults={"name": "Welcome 10%", "type": PromotionType.PERCENTAGE, "value": D("10"), "min_order": D("50")},
        )
        Promotion.objects.get_or_create(
            code="BRAAI15",
            defaults={"name": "$15 off braai packs", "type": PromotionType.FIXED, "value": D("15"),
                      "min_order": D("100"), "max_uses": 200},
        )

        # Payment switches
        for key, value in [
            ("payments.card_enabled", True),
            ("payments.wallet_enabled", True),
            ("payments.deferred_enabled", True),
            ("payments.cod_enabled", True),
        ]:
            Setting.objects.get_or_create(key=key, defaults={"value": value, "group": "payments"})

        self.stdout.write(self.style.SUCCESS("Checkout seed complete."))
