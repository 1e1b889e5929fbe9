"""
checkout.services.api

Checkout API surface consumed by the views. Every function returns a plain
dict and never raises checkout errors:

  success → {"success": True, ...}
  failure → {"success": False, "error": {"code", "message", "status", ...}}

Database errors are logged with their traceback and reported as a generic
persistence_error.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Dict, Optional

from django.db import DatabaseError

from checkout.errors import CheckoutError, NotFoundError, PersistenceError, ValidationError
from checkout.models import DeliveryZone, Invoice, Order, OrderStatus
from checkout.serializers import DeliveryZoneSerializer, InvoiceSerializer, OrderSerializer
from checkout.services import delivery, invoices, order_assembly, orders, payment_dispatch, promotions
from checkout.utils.money import format_money, to_decimal

log = logging.getLogger(__name__)


def failure(exc: CheckoutError) -> Dict[str, Any]:
    return {"success": False, "error": exc.to_dict()}


def checkout_boundary(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CheckoutError as exc:
            log.info("Checkout rejected op=%s code=%s message=%s", func.__name__, exc.code, exc.message)
            return failure(exc)
        except DatabaseError:
            log.exception("Checkout persistence error op=%s", func.__name__)
            return failure(PersistenceError())
    return wrapper


def _money(value) -> str:
    return str(to_decimal(value))


def _get_order(order_id) -> Order:
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        raise NotFoundError("Order not found.")
    return order


def _order_payload(order: Order) -> Dict[str, Any]:
    return OrderSerializer(Order.objects.get(pk=order.pk)).data


# ---------------------------------------------------------------------- delivery / promo

@checkout_boundary
def validate_address(postcode: str, suburb: Optional[str] = None) -> Dict[str, Any]:
    if not (postcode or "").strip() and not (suburb or "").strip():
        raise ValidationError("A postcode or suburb is required.", fields={"postcode": ["This field is required."]})

    zone = delivery.resolve(postcode, suburb)
    if zone is None:
        return {
            "success": True,
            "delivers": False,
            "message": "Sorry, we don't deliver to this area yet.",
        }
    return {
        "success": True,
        "delivers": True,
        "zone": DeliveryZoneSerializer(zone).data,
        "message": f"Great news! We deliver to {zone.name}.",
    }


@checkout_boundary
def calculate_delivery_fee(zone_id: int, subtotal) -> Dict[str, Any]:
    zone = DeliveryZone.objects.filter(pk=zone_id, is_active=True).first()
    if zone is None:
        raise NotFoundError("Delivery zone not found.")

    quote = delivery.calculate_fee(zone, subtotal)
    data: Dict[str, Any] = {
        "success": True,
        "zone_name": zone.name,
        "fee": _money(quote.fee),
        "fee_formatted": "FREE" if quote.is_free else format_money(quote.fee),
        "is_free": quote.is_free,
        "estimated_days": quote.estimated_days,
        "estimated_label": quote.estimated_label,
    }
    if quote.free_delivery_threshold is not None:
        data["free_delivery_threshold"] = _money(quote.free_delivery_threshold)
    if quote.is_free:
        data["message"] = "You qualify for free delivery!"
    elif quote.amount_to_free_delivery is not None:
        data["amount_to_free_delivery"] = _money(quote.amount_to_free_delivery)
        data["message"] = f"Add {format_money(quote.amount_to_free_delivery)} more for free delivery."
    return data


@checkout_boundary
def validate_promo_code(code: str, subtotal) -> Dict[str, Any]:
    result = promotions.validate(code, subtotal)
    if not result.valid:
        return {"success": True, "valid": False, "reason": result.reason, "message": result.message}
    return {
        "success": True,
        "valid": True,
        "code": result.promotion.code,
        "discount": _money(result.discount),
        "discount_formatted": format_money(result.discount),
        "message": result.message,
    }


# ---------------------------------------------------------------------- orders

@checkout_boundary
def create_order(
    cart_snapshot,
    address,
    payment_method: str,
    promo_code: Optional[str] = None,
    notes: Optional[str] = None,
    user=None,
    delivery_instructions: Optional[str] = None,
) -> Dict[str, Any]:
    order = order_assembly.create_order(
        cart_snapshot,
        address,
        payment_method,
        promo_code=promo_code,
        notes=notes,
        user=user,
        delivery_instructions=delivery_instructions,
    )
    return {"success": True, "order": _order_payload(order)}


@checkout_boundary
def cancel_order(order_id, changed_by=None, reason: Optional[str] = None) -> Dict[str, Any]:
    order = orders.cancel_order(_get_order(order_id), changed_by=changed_by, reason=reason)
    return {"success": True, "order": _order_payload(order), "message": "Order cancelled."}


# ---------------------------------------------------------------------- payments

@checkout_boundary
def process_payment(order_id) -> Dict[str, Any]:
    outcome = payment_dispatch.process_payment(_get_order(order_id))
    data: Dict[str, Any] = {
        "success": True,
        "status": outcome.status,
        "message": outcome.message,
        "order": _order_payload(outcome.order),
    }
    data.update(outcome.continuation)
    return data


@checkout_boundary
def confirm_payment(order_id, gateway_confirmation: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    outcome = payment_dispatch.confirm_payment(_get_order(order_id), gateway_confirmation or {})
    return {
        "success": True,
        "status": outcome.status,
        "message": outcome.message,
        "order": _order_payload(outcome.order),
    }


# ---------------------------------------------------------------------- invoices

@checkout_boundary
def get_invoice(order_id) -> Dict[str, Any]:
    order = _get_order(order_id)
    invoice = Invoice.objects.filter(order=order).first()
    if invoice is None:
        if order.status in (OrderStatus.PENDING, OrderStatus.CANCELLED):
            raise NotFoundError("An invoice is available once the order is confirmed.")
        invoice = invoices.generate_from_order(order)
    invoice = invoices.update_overdue_status(invoice)
    return {"success": True, "invoice": InvoiceSerializer(invoice).data}
