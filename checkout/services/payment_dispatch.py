"""
checkout.services.payment_dispatch

Routes a pending order to the gateway for its payment method and applies the
gateway's answer to the order.

  completed → payment completed, holds confirmed, order confirmed, invoice paid
  pending   → continuation token returned (client_secret / approval_url / redirect_url);
              holds stay in place until confirm_payment or the Stripe webhook
  failed    → payment failed, order stays pending, PaymentGatewayError raised

A cancelled order cannot be confirmed. A Stripe success that still arrives for
one is recorded as completed with needs_refund set, and no invoice is issued.

Gateway calls run outside any transaction so no row lock is held while the
provider is waiting on the network.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from django.db import transaction
from django.utils import timezone

from checkout.errors import (
    InsufficientStockError,
    NotFoundError,
    PaymentGatewayError,
    ValidationError,
)
from checkout.models import Order, OrderStatus, Payment, PaymentStatus
from checkout.services import invoices, orders
from checkout.services.payments import COMPLETED, FAILED, PENDING, REFUNDED, GatewayResult, StripeGateway, get_gateway
from checkout.services.stock_reservation import reservations

log = logging.getLogger(__name__)


@dataclass
class PaymentOutcome:
    order: Order
    payment: Payment
    status: str
    message: str = ""
    continuation: Dict[str, str] = field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.status == COMPLETED


def _load_order(order: Union[Order, int]) -> Order:
    if isinstance(order, Order):
        return order
    found = Order.objects.filter(pk=order).first()
    if found is None:
        raise NotFoundError("Order not found.")
    return found


def _payment_for(order: Order, gateway_name: str) -> Payment:
    payment, created = Payment.objects.get_or_create(
        order=order,
        defaults={
            "gateway": gateway_name,
            "amount": order.total,
            "currency": order.currency,
            "status": PaymentStatus.PENDING,
        },
    )
    if not created and payment.status != PaymentStatus.COMPLETED:
        # Retry after a failure: reuse the row under a new attempt number.
        payment.gateway = gateway_name
        payment.attempts += 1
        payment.amount = order.total
        payment.currency = order.currency
        payment.status = PaymentStatus.PENDING
        payment.save(update_fields=["gateway", "amount", "currency", "status", "attempts", "updated_at"])
    return payment


def _mark_failed(payment: Payment, detail: Dict[str, Any]) -> None:
    payment.status = PaymentStatus.FAILED
    payment.gateway_response = {**(payment.gateway_response or {}), **detail}
    payment.save(update_fields=["status", "gateway_response", "updated_at"])
    log.warning("Payment failed order_id=%s gateway=%s detail=%s", payment.order_id, payment.gateway, detail)


def _renew_lapsed_holds(order: Order) -> int:
    """
    Re-reserve items whose hold lapsed (released by reconciliation) before
    money is taken. Raises InsufficientStockError when stock is gone.
    """
    renewed = []
    shortfalls = []
    for item in order.items.select_related("product"):
        product = item.product
        if product is None or product.stock is None:
            continue
        if reservations.has_active_hold(product.pk, order.pk):
            continue
        if reservations.reserve(product.pk, item.quantity, order.pk):
            renewed.append(product.pk)
        else:
            shortfalls.append({
                "product_id": product.pk,
                "name": item.product_name,
                "requested": item.quantity,
                "available": reservations.get_available_stock(product.pk),
            })

    if shortfalls:
        for product_id in reversed(renewed):
            reservations.release(product_id, order.pk)
        log.warning("Payment blocked order=%s reason=stock_lapsed products=%s", order.order_number, shortfalls)
        raise InsufficientStockError(shortfalls)

    if renewed:
        log.info("Reservations renewed order=%s products=%s", order.order_number, renewed)
    return len(renewed)


def _finalize(payment: Payment, result: GatewayResult) -> Order:
    """Idempotent: a payment already completed is left untouched."""
    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        order = Order.objects.select_for_update().get(pk=payment.order_id)
        if payment.status == PaymentStatus.COMPLETED:
            return order

        cancelled = order.status == OrderStatus.CANCELLED
        payment.status = PaymentStatus.COMPLETED
        payment.paid_at = timezone.now()
        payment.transaction_id = result.transaction_id or payment.transaction_id
        payment.gateway_response = {**(payment.gateway_response or {}), **result.response}
        if cancelled:
            payment.gateway_response["needs_refund"] = True
        payment.save(update_fields=["status", "paid_at", "transaction_id", "gateway_response", "updated_at"])

        if cancelled:
            # Money taken after cancellation; stock is already back on sale.
            log.warning(
                "Payment completed for cancelled order=%s gateway=%s transaction_id=%s needs_refund=true",
                order.order_number, payment.gateway, payment.transaction_id,
            )
            return order

        reservations.confirm_order(order)

        if order.status == OrderStatus.PENDING:
            order = orders.update_status(order, OrderStatus.CONFIRMED, notes=f"Payment received via {payment.gateway}")
        else:
            log.warning("Payment completed for non-pending order=%s status=%s", order.order_number, order.status)

        invoice = invoices.generate_from_order(order)
        invoices.mark_paid(invoice, paid_at=payment.paid_at)

    log.info(
        "Payment completed order=%s gateway=%s transaction_id=%s amount=%s",
        order.order_number, payment.gateway, payment.transaction_id, payment.amount,
    )
    return order


# ---------------------------------------------------------------------- public API

def process_payment(order: Union[Order, int]) -> PaymentOutcome:
    order = _load_order(order)
    if order.status != OrderStatus.PENDING:
        raise ValidationError(f"Order {order.order_number} is {order.status} and cannot be paid.")

    gateway = get_gateway(order.payment_method)
    if not gateway.is_enabled():
        raise PaymentGatewayError("This payment method is currently unavailable.", gateway=gateway.name, retryable=False)
    reason = gateway.unavailable_reason(order)
    if reason:
        raise PaymentGatewayError(reason, gateway=gateway.name, retryable=False)

    _renew_lapsed_holds(order)
    payment = _payment_for(order, gateway.name)

    try:
        result = gateway.initiate(order)
    except PaymentGatewayError as exc:
        _mark_failed(payment, {"error": exc.message})
        raise

    if result.status == FAILED:
        _mark_failed(payment, result.response or {"error": result.message})
        raise PaymentGatewayError(result.message or None, gateway=gateway.name)

    payment.transaction_id = result.transaction_id
    payment.gateway_response = result.response
    payment.save(update_fields=["transaction_id", "gateway_response", "updated_at"])

    if result.status == COMPLETED:
        order = _finalize(payment, result)
        payment.refresh_from_db()
    else:
        log.info("Payment initiated order=%s gateway=%s transaction_id=%s", order.order_number, gateway.name, result.transaction_id)

    return PaymentOutcome(
        order=order,
        payment=payment,
        status=result.status,
        message=result.message,
        continuation=result.continuation,
    )


def confirm_payment(order: Union[Order, int], confirmation: Optional[Dict[str, Any]] = None) -> PaymentOutcome:
    order = _load_order(order)
    payment = Payment.objects.filter(order=order).first()
    if payment is None:
        raise NotFoundError("No payment has been started for this order.")
    if payment.status == PaymentStatus.COMPLETED:
        return PaymentOutcome(order=order, payment=payment, status=COMPLETED, message="Payment already completed.")
    if order.status == OrderStatus.CANCELLED:
        raise ValidationError(f"Order {order.order_number} was cancelled and can no longer be paid.")

    gateway = get_gateway(order.payment_method)
    try:
        result = gateway.confirm(payment, confirmation or {})
    except PaymentGatewayError as exc:
        _mark_failed(payment, {"error": exc.message})
        raise

    if result.status == COMPLETED:
        order = _finalize(payment, result)
        payment.refresh_from_db()
        return PaymentOutcome(order=order, payment=payment, status=COMPLETED, message=result.message or "Payment completed.")

    if result.status == PENDING:
        return PaymentOutcome(order=order, payment=payment, status=PENDING, message="Payment not yet completed.")

    _mark_failed(payment, result.response or {"error": result.message})
    raise PaymentGatewayError(result.message or None, gateway=gateway.name)


def handle_stripe_webhook(payload: bytes, signature: str) -> Dict[str, Any]:
    event = StripeGateway().parse_webhook(payload, signature)
    event_type = event["type"]
    intent = event["data"]["object"]
    intent_id = intent["id"]

    if event_type not in ("payment_intent.succeeded", "payment_intent.payment_failed"):
        log.info("Stripe webhook ignored type=%s", event_type)
        return {"received": True, "handled": False, "type": event_type}

    payment = Payment.objects.filter(gateway=StripeGateway.name, transaction_id=intent_id).first()
    if payment is None:
        log.warning("Stripe webhook for unknown intent=%s type=%s", intent_id, event_type)
        return {"received": True, "handled": False, "type": event_type}

    if event_type == "payment_intent.succeeded":
        _finalize(payment, GatewayResult(
            status=COMPLETED,
            transaction_id=intent_id,
            response={"webhook_event_id": event.get("id"), "status": intent.get("status")},
        ))
    elif payment.status != PaymentStatus.COMPLETED:
        error = (intent.get("last_payment_error") or {}).get("message") or "payment_failed"
        _mark_failed(payment, {"webhook_event_id": event.get("id"), "error": error})

    return {"received": True, "handled": True, "type": event_type}


def refund(order: Union[Order, int], amount=None) -> PaymentOutcome:
    order = _load_order(order)
    payment = Payment.objects.filter(order=order).first()
    if payment is None or payment.status != PaymentStatus.COMPLETED:
        raise ValidationError("Only completed payments can be refunded.")

    gateway = get_gateway(order.payment_method)
    result = gateway.refund(payment, amount)
    if result.status != REFUNDED:
        raise PaymentGatewayError(result.message or "Refund could not be processed.", gateway=gateway.name)

    payment.status = PaymentStatus.REFUNDED
    payment.gateway_response = {**(payment.gateway_response or {}), "refund": result.response}
    payment.save(update_fields=["status", "gateway_response", "updated_at"])
    log.info("Payment refunded order=%s gateway=%s amount=%s", order.order_number, payment.gateway, amount or payment.amount)
    return PaymentOutcome(order=order, payment=payment, status=REFUNDED, message=result.message or "Payment refunded.")
