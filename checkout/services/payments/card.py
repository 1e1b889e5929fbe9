"""
checkout.services.payments.card

Card payments through Stripe PaymentIntents.

- initiate → PaymentIntent (pending) + client_secret for Stripe.js
- confirm  → retrieve the intent and map its status
- webhook  → signature verified with stripe.Webhook.construct_event

Without STRIPE_SECRET_KEY the gateway runs in mock mode with deterministic
ids derived from the order number.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Dict

import stripe
from django.conf import settings

from checkout.errors import PaymentGatewayError, ValidationError
from checkout.models import Payment
from checkout.utils.money import to_minor_units

from .base import COMPLETED, FAILED, PENDING, REFUNDED, GatewayResult, PaymentGateway

log = logging.getLogger(__name__)

_STATUS_MAP = {
    "succeeded": COMPLETED,
    "canceled": FAILED,
}


@functools.lru_cache(maxsize=None)
def _install_http_client(timeout: float) -> None:
    # stripe keeps one process-wide client; rebuild it only when the timeout changes.
    stripe.default_http_client = stripe.RequestsClient(timeout=timeout)


def _attempt(order) -> int:
    """Each payment attempt gets its own Stripe idempotency key."""
    return Payment.objects.filter(order=order).values_list("attempts", flat=True).first() or 1


class StripeGateway(PaymentGateway):
    name = "stripe"
    enabled_setting = "payments.card_enabled"

    def __init__(self):
        self.secret_key = getattr(settings, "STRIPE_SECRET_KEY", "") or ""
        self.publishable_key = getattr(settings, "STRIPE_PUBLISHABLE_KEY", "") or ""
        self.webhook_secret = getattr(settings, "STRIPE_WEBHOOK_SECRET", "") or ""

    def is_configured(self) -> bool:
        return bool(self.secret_key)

    def _configure(self) -> None:
        stripe.api_key = self.secret_key
        _install_http_client(self.timeout)

    # ---------------------------------------------------------------- initiate

    def initiate(self, order) -> GatewayResult:
        if self.mock:
            intent_id = f"pi_mock_{order.order_number}"
            client_secret = f"{intent_id}_secret_mock"
            log.info("Stripe mock intent order=%s intent=%s", order.order_number, intent_id)
            return GatewayResult(
                status=PENDING,
                transaction_id=intent_id,
                client_secret=client_secret,
                message="Complete your card payment.",
                response={"payment_intent_id": intent_id, "client_secret": client_secret, "mock": True},
            )

        self._configure()
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_minor_units(order.total),
                currency=order.currency.lower(),
                automatic_payment_methods={"enabled": True},
                metadata={"order_id": str(order.pk), "order_number": order.order_number},
                idempotency_key=f"order-{order.order_number}-{_attempt(order)}",
            )
        except stripe.StripeError as exc:
            log.error("Stripe intent failed order=%s error=%s", order.order_number, exc)
            raise PaymentGatewayError(gateway=self.name)

        log.info("Stripe intent created order=%s intent=%s", order.order_number, intent["id"])
        return GatewayResult(
            status=PENDING,
            transaction_id=intent["id"],
            client_secret=intent["client_secret"],
            message="Complete your card payment.",
            response={"payment_intent_id": intent["id"], "status": intent["status"]},
        )

    # ---------------------------------------------------------------- confirm / refund

    def confirm(self, payment, data: Dict[str, Any]) -> GatewayResult:
        intent_id = data.get("payment_intent_id") or payment.transaction_id
        if self.mock:
            return GatewayResult(
                status=COMPLETED,
                transaction_id=intent_id,
                message="Payment completed.",
                response={"payment_intent_id": intent_id, "mock": True},
            )

        self._configure()
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id)
        except stripe.StripeError as exc:
            log.error("Stripe retrieve failed intent=%s error=%s", intent_id, exc)
            raise PaymentGatewayError(gateway=self.name)

        status = _STATUS_MAP.get(intent["status"], PENDING)
        return GatewayResult(
            status=status,
            transaction_id=intent["id"],
            message="Payment completed." if status == COMPLETED else "Payment not yet completed.",
            response={"payment_intent_id": intent["id"], "status": intent["status"]},
        )

    def refund(self, payment, amount=None) -> GatewayResult:
        if self.mock:
            return GatewayResult(
                status=REFUNDED,
                transaction_id=f"re_mock_{payment.transaction_id}",
                response={"mock": True, "amount": str(amount or payment.amount)},
            )

        self._configure()
        params = {"payment_intent": payment.transaction_id}
        if amount is not None:
            params["amount"] = to_minor_units(amount)
        try:
            refund = stripe.Refund.create(**params)
        except stripe.StripeError as exc:
            log.error("Stripe refund failed intent=%s error=%s", payment.transaction_id, exc)
            raise PaymentGatewayError("Refund could not be processed.", gateway=self.name)

        return GatewayResult(
            status=REFUNDED,
            transaction_id=refund["id"],
            response={"refund_id": refund["id"], "status": refund["status"]},
        )

    # ---------------------------------------------------------------- webhooks

    def parse_webhook(self, payload: bytes, signature: str):
        if not self.webhook_secret:
            raise PaymentGatewayError("Stripe webhooks are not configured.", gateway=self.name, retryable=False)
        try:
            return stripe.Webhook.construct_event(payload=payload, sig_header=signature, secret=self.webhook_secret)
        except ValueError:
            raise ValidationError("Invalid webhook payload.")
        except stripe.SignatureVerificationError:
            log.warning("Stripe webhook rejected reason=bad_signature")
            raise ValidationError("Invalid webhook signature.")
