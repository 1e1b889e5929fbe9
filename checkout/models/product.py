"""
checkout.models.product

Catalog product as seen by checkout: pricing + stock counter.

Stock rules:
- stock = NULL means untracked (unlimited); such products are never reserved.
- stock >= 0 whenever tracked (DB check constraint).
- Only the stock reservation service mutates `stock`.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models


class Product(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    sku = models.CharField(max_length=64, blank=True, default="", db_index=True)

    price = models.DecimalField(max_digits=10, decimal_places=2)
    sale_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # NULL means unlimited / untracked.
    stock = models.IntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock__isnull=True) | models.Q(stock__gte=0),
                name="checkout_product_stock_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def tracks_stock(self) -> bool:
        return self.stock is not None

    @property
    def is_on_sale(self) -> bool:
        return self.sale_price is not None and self.sale_price < self.price

    @property
    def current_price(self) -> Decimal:
        return self.sale_price if self.is_on_sale else self.price
