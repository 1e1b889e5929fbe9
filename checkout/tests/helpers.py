"""Shared fixtures for the checkout test suite."""

from __future__ import annotations

import itertools
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase

from checkout.models import DeliveryZone, Order, Product, Promotion
from checkout.services import order_assembly

_seq = itertools.count(1)


class CheckoutTestCase(TestCase):
    """LocMem cache outlives the per-test DB rollback, so start every test clean."""

    def setUp(self):
        super().setUp()
        cache.clear()


def make_product(name=None, stock=10, price="20.00", sale_price=None, **extra) -> Product:
    n = next(_seq)
    name = name or f"Product {n}"
    return Product.objects.create(
        name=name,
        slug=f"product-{n}",
        sku=f"SKU-{n}",
        price=Decimal(price),
        sale_price=Decimal(sale_price) if sale_price is not None else None,
        stock=stock,
        **extra,
    )


def make_zone(name="Sydney Metro", fee="15.00", threshold="100.00", suburbs=None, postcodes=None, **extra) -> DeliveryZone:
    return DeliveryZone.objects.create(
        name=name,
        suburbs=suburbs if suburbs is not None else ["Sydney", "Surry Hills"],
        postcodes=postcodes if postcodes is not None else ["2000-2010"],
        delivery_fee=Decimal(fee),
        free_delivery_threshold=Decimal(threshold) if threshold is not None else None,
        **extra,
    )


def make_promo(code="SAVE10", type="percentage", value="10", min_order="0", **extra) -> Promotion:
    return Promotion.objects.create(
        code=code,
        type=type,
        value=Decimal(value),
        min_order=Decimal(min_order),
        **extra,
    )


def make_order(**extra) -> Order:
    """Bare pending order, for reservation tests that don't need assembly."""
    fields = {
        "payment_method": "card",
        "subtotal": Decimal("0.00"),
        "total": Decimal("0.00"),
    }
    fields.update(extra)
    return Order.objects.create(**fields)


SYDNEY_ADDRESS = {"street": "1 George St", "suburb": "Sydney", "state": "NSW", "postcode": "2000"}


def place_order(lines, payment_method="card", address=None, **kwargs) -> Order:
    """lines: iterable of (product, quantity)."""
    cart = [order_assembly.CartLine(product_id=p.pk, quantity=q) for p, q in lines]
    return order_assembly.create_order(cart, address or dict(SYDNEY_ADDRESS), payment_method, **kwargs)
