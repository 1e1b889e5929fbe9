"""
checkout.services.payments.deferred

Afterpay (pay in 4) over the v2 REST API.

Restrictions: AUD only, order total between MIN_AMOUNT and MAX_AMOUNT.
"""

from __future__ import annotations

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from checkout.errors import PaymentGatewayError
from checkout.utils.money import CENTS, format_money, to_decimal

from .base import COMPLETED, FAILED, PENDING, REFUNDED, GatewayResult, PaymentGateway

log = logging.getLogger(__name__)

SANDBOX_URL = "https://global-api-sandbox.afterpay.com"
LIVE_URL = "https://global-api.afterpay.com"

MIN_AMOUNT = Decimal("35.00")
MAX_AMOUNT = Decimal("2000.00")
INSTALLMENTS = 4


def calculate_installments(total) -> Dict[str, Any]:
    total = to_decimal(total)
    installment = (total / INSTALLMENTS).quantize(CENTS, rounding=ROUND_HALF_UP)
    return {
        "total": str(total),
        "installment_count": INSTALLMENTS,
        "installment_amount": str(installment),
        "installment_formatted": format_money(installment),
        "frequency": "fortnightly",
    }


class AfterpayGateway(PaymentGateway):
    name = "afterpay"
    enabled_setting = "payments.deferred_enabled"

    def __init__(self):
        self.merchant_id = getattr(settings, "AFTERPAY_MERCHANT_ID", "") or ""
        self.secret = getattr(settings, "AFTERPAY_SECRET", "") or ""
        mode = (getattr(settings, "AFTERPAY_MODE", "sandbox") or "sandbox").lower()
        self.base_url = LIVE_URL if mode == "live" else SANDBOX_URL

    def is_configured(self) -> bool:
        return bool(self.merchant_id and self.secret)

    def unavailable_reason(self, order) -> Optional[str]:
        if order.currency != "AUD":
            return "Afterpay is only available for AUD payments."
        if not (MIN_AMOUNT <= to_decimal(order.total) <= MAX_AMOUNT):
            return (
                f"Afterpay is available for orders between {format_money(MIN_AMOUNT)} "
                f"and {format_money(MAX_AMOUNT)}."
            )
        return None

    def _post(self, path: str, json: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = requests.post(
                f"{self.base_url}{path}",
                json=json,
                auth=(self.merchant_id, self.secret),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            log.error("Afterpay request failed path=%s error=%s", path, exc)
            raise PaymentGatewayError(gateway=self.name)

    def initiate(self, order) -> GatewayResult:
        installments = calculate_installments(order.total)
        confirm_url = f"{self.storefront_url}/checkout/confirm?gateway=afterpay&order={order.pk}"
        cancel_url = f"{self.storefront_url}/checkout/payment?order={order.pk}"

        if self.mock:
            token = f"AP_MOCK_{order.order_number}"
            return GatewayResult(
                status=PENDING,
                transaction_id=token,
                redirect_url=f"{confirm_url}&orderToken={token}",
                message="Continue to Afterpay to complete your order.",
                response={"checkout_token": token, "installments": installments, "mock": True},
            )

        user = order.user
        full_name = (user.get_full_name() if user else "") or "Customer"
        given, _, surname = full_name.partition(" ")
        data = self._post("/v2/checkouts", {
            "amount": {"amount": f"{to_decimal(order.total):.2f}", "currency": "AUD"},
            "consumer": {
                "email": user.email if user else "",
                "givenNames": given or "Customer",
                "surname": surname or "Customer",
            },
            "merchant": {"redirectConfirmUrl": confirm_url, "redirectCancelUrl": cancel_url},
            "merchantReference": order.order_number,
            "items": [
                {
                    "name": item.product_name,
                    "sku": item.product_sku or "N/A",
                    "quantity": item.quantity,
                    "price": {"amount": f"{item.unit_price:.2f}", "currency": "AUD"},
                }
                for item in order.items.all()
            ],
        })
        log.info("Afterpay checkout created order=%s token=%s", order.order_number, data.get("token"))
        return GatewayResult(
            status=PENDING,
            transaction_id=data.get("token"),
            redirect_url=data.get("redirectCheckoutUrl"),
            message="Continue to Afterpay to complete your order.",
            response={"checkout_token": data.get("token"), "expires": data.get("expires"), "installments": installments},
        )

    def confirm(self, payment, data: Dict[str, Any]) -> GatewayResult:
        token = data.get("orderToken") or data.get("token") or payment.transaction_id
        if self.mock:
            return GatewayResult(
                status=COMPLETED,
                transaction_id=f"{token}_CAPTURED",
                message="Afterpay payment confirmed.",
                response={"checkout_token": token, "afterpay_order_id": f"{token}_CAPTURED", "mock": True},
            )

        capture = self._post("/v2/payments/capture", {
            "token": token,
            "merchantReference": payment.order.order_number,
        })
        status = capture.get("status")
        result_status = COMPLETED if status == "APPROVED" else FAILED
        return GatewayResult(
            status=result_status,
            transaction_id=capture.get("id") or token,
            message="Afterpay payment confirmed." if result_status == COMPLETED else "Afterpay payment was not approved.",
            response={"checkout_token": token, "afterpay_order_id": capture.get("id"), "status": status},
        )

    def refund(self, payment, amount=None) -> GatewayResult:
        amount = to_decimal(amount if amount is not None else payment.amount)
        if self.mock:
            return GatewayResult(
                status=REFUNDED,
                transaction_id=f"AP_REFUND_MOCK_{payment.transaction_id}",
                response={"mock": True, "amount": str(amount)},
            )
        data = self._post(f"/v2/payments/{payment.transaction_id}/refund", {
            "requestId": uuid.uuid4().hex,
            "amount": {"amount": f"{amount:.2f}", "currency": payment.currency},
            "merchantReference": payment.order.order_number,
        })
        return GatewayResult(
            status=REFUNDED,
            transaction_id=data.get("refundId"),
            response={"refund_id": data.get("refundId"), "amount": str(amount)},
        )
