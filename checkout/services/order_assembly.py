"""
checkout.services.order_assembly

Turns a cart snapshot into a persisted pending order.

Steps
-----
1) cart must not be empty
2) address: existing address_id or inline fields
3) every line's product exists, is active and has stock (InsufficientStockError)
4) delivery zone + fee from the address (AddressNotDeliverableError)
5) promo re-validated against the current subtotal (PromoInvalidError)
6) total = max(0, subtotal + delivery_fee - discount)
7) one transaction: inline address, promo redemption, Order, OrderItems, history
8) reserve every line in cart order; on the first failure release what was
   reserved in reverse order and raise StockReservationError
9) return the pending order

Anything raised inside the transaction rolls back the whole order.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from django.conf import settings
from django.db import transaction

from checkout.errors import (
    AddressNotDeliverableError,
    EmptyCartError,
    InsufficientStockError,
    StockReservationError,
    ValidationError,
)
from checkout.models import Address, Order, OrderItem, OrderStatus, PaymentMethod, Product
from checkout.services import delivery, promotions
from checkout.services.orders import record_history
from checkout.services.stock_reservation import reservations
from checkout.utils.money import ZERO, to_decimal

log = logging.getLogger(__name__)

INLINE_ADDRESS_FIELDS = ("street", "suburb", "city", "state", "postcode")
REQUIRED_ADDRESS_FIELDS = ("street", "postcode")


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int


def normalize_cart(cart: Iterable[Union[CartLine, Mapping[str, Any]]]) -> List[CartLine]:
    """
    Accept CartLine objects or {"product_id", "quantity"} dicts. Repeated
    products are merged so each product gets a single reservation.
    """
    merged: "OrderedDict[int, int]" = OrderedDict()
    for raw in cart or []:
        if isinstance(raw, CartLine):
            product_id, quantity = raw.product_id, raw.quantity
        else:
            product_id, quantity = raw.get("product_id"), raw.get("quantity")
        try:
            product_id, quantity = int(product_id), int(quantity)
        except (TypeError, ValueError):
            raise ValidationError("Each cart line needs a product_id and a quantity.", fields={"cart": [str(raw)]})
        if quantity <= 0:
            raise ValidationError("Quantities must be at least 1.", fields={"cart": [f"product {product_id}"]})
        merged[product_id] = merged.get(product_id, 0) + quantity

    if not merged:
        raise EmptyCartError()
    return [CartLine(product_id=pid, quantity=qty) for pid, qty in merged.items()]


def _shortfall(product: Optional[Product], product_id: int, requested: int) -> Dict[str, Any]:
    return {
        "product_id": product_id,
        "name": product.name if product else None,
        "requested": requested,
        "available": reservations.get_available_stock(product_id) if product else 0,
    }


def _resolve_address(address: Union[int, Address, Mapping[str, Any], None], user=None) -> Address:
    """
    Returns an Address; inline addresses come back unsaved so they are only
    written inside the order transaction.
    """
    if address is None or address == {}:
        raise ValidationError("A delivery address is required.", fields={"address": ["This field is required."]})

    if isinstance(address, Address):
        return address

    address_id = address if isinstance(address, int) else address.get("address_id")
    if address_id:
        found = Address.objects.filter(pk=address_id).first()
        owner_id = getattr(user, "pk", None) if getattr(user, "is_authenticated", False) else None
        if found is None or (found.user_id and found.user_id != owner_id):
            raise ValidationError("Address not found.", fields={"address_id": ["Unknown address."]})
        return found

    missing = [f for f in REQUIRED_ADDRESS_FIELDS if not str(address.get(f) or "").strip()]
    if missing:
        raise ValidationError(
            "Address is incomplete.",
            fields={f: ["This field is required."] for f in missing},
        )
    fields = {f: str(address.get(f) or "").strip() for f in INLINE_ADDRESS_FIELDS}
    return Address(
        user=user if getattr(user, "is_authenticated", False) else None,
        label=str(address.get("label") or "Delivery Address"),
        **fields,
    )


def create_order(
    cart,
    address,
    payment_method: str,
    promo_code: Optional[str] = None,
    notes: Optional[str] = None,
    user=None,
    delivery_instructions: Optional[str] = None,
) -> Order:
    lines = normalize_cart(cart)

    if payment_method not in PaymentMethod.values:
        raise ValidationError(
            "Unsupported payment method.",
            fields={"payment_method": [f"Choose one of: {', '.join(PaymentMethod.values)}."]},
        )

    address_obj = _resolve_address(address, user)

    products = Product.objects.in_bulk([line.product_id for line in lines])
    shortfalls = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None or not product.is_active:
            shortfalls.append(_shortfall(product, line.product_id, line.quantity))
        elif not reservations.has_stock(line.product_id, line.quantity):
            shortfalls.append(_shortfall(product, line.product_id, line.quantity))
    if shortfalls:
        raise InsufficientStockError(shortfalls)

    zone = delivery.resolve(address_obj.postcode, address_obj.suburb)
    if zone is None:
        raise AddressNotDeliverableError(postcode=address_obj.postcode, suburb=address_obj.suburb)

    subtotal = sum((to_decimal(products[l.product_id].current_price) * l.quantity for l in lines), ZERO)
    quote = delivery.calculate_fee(zone, subtotal)

    promotion = None
    discount = ZERO
    if promo_code and promo_code.strip():
        result = promotions.validate_or_raise(promo_code, subtotal)
        promotion, discount = result.promotion, result.discount

    total = max(ZERO, subtotal + quote.fee - discount)
    customer = user if getattr(user, "is_authenticated", False) else None

    with transaction.atomic():
        if address_obj.pk is None:
            address_obj.save()
        if promotion is not None:
            promotions.redeem(promotion)

        order = Order.objects.create(
            user=customer,
            address=address_obj,
            delivery_zone=zone,
            status=OrderStatus.PENDING,
            payment_method=payment_method,
            subtotal=subtotal,
            delivery_fee=quote.fee,
            discount=discount,
            total=total,
            currency=getattr(settings, "CHECKOUT_CURRENCY", "AUD"),
            promotion_code=promotion.code if promotion else None,
            notes=notes or None,
            delivery_instructions=delivery_instructions or None,
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=products[line.product_id],
                product_name=products[line.product_id].name,
                product_sku=products[line.product_id].sku,
                quantity=line.quantity,
                unit_price=to_decimal(products[line.product_id].current_price),
                total_price=to_decimal(products[line.product_id].current_price) * line.quantity,
            )
            for line in lines
        ])
        record_history(order, OrderStatus.PENDING, changed_by=user, notes="Order placed")

        _reserve_lines(order, lines, products)

    log.info(
        "Order created order=%s items=%s subtotal=%s delivery_fee=%s discount=%s total=%s payment_method=%s",
        order.order_number, len(lines), subtotal, quote.fee, discount, total, payment_method,
    )
    return order


def _reserve_lines(order: Order, lines: List[CartLine], products: Dict[int, Product]) -> None:
    reserved: List[int] = []
    for line in lines:
        if reservations.reserve(line.product_id, line.quantity, order.pk):
            reserved.append(line.product_id)
            continue

        for product_id in reversed(reserved):
            reservations.release(product_id, order.pk)
        log.warning(
            "Order reservation rolled back order=%s failed_product_id=%s rolled_back=%s",
            order.order_number, line.product_id, reserved,
        )
        raise StockReservationError([_shortfall(products.get(line.product_id), line.product_id, line.quantity)])

