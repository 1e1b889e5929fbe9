"""
checkout.services.payments.wallet

PayPal Orders v2 over plain REST (requests).

  initiate → POST /v2/checkout/orders            → approval_url (pending)
  confirm  → POST /v2/checkout/orders/{id}/capture
  refund   → POST /v2/payments/captures/{id}/refund
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from checkout.errors import PaymentGatewayError
from checkout.utils.money import to_decimal

from .base import COMPLETED, FAILED, PENDING, REFUNDED, GatewayResult, PaymentGateway

log = logging.getLogger(__name__)

SANDBOX_URL = "https://api-m.sandbox.paypal.com"
LIVE_URL = "https://api-m.paypal.com"


class PayPalGateway(PaymentGateway):
    name = "paypal"
    enabled_setting = "payments.wallet_enabled"

    def __init__(self):
        self.client_id = getattr(settings, "PAYPAL_CLIENT_ID", "") or ""
        self.secret = getattr(settings, "PAYPAL_SECRET", "") or ""
        mode = (getattr(settings, "PAYPAL_MODE", "sandbox") or "sandbox").lower()
        self.base_url = LIVE_URL if mode == "live" else SANDBOX_URL

    def is_configured(self) -> bool:
        return bool(self.client_id and self.secret)

    # ---------------------------------------------------------------- HTTP

    def _access_token(self) -> str:
        try:
            resp = requests.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self.client_id, self.secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()["access_token"]
        except (requests.RequestException, KeyError, ValueError) as exc:
            log.error("PayPal token request failed error=%s", exc)
            raise PaymentGatewayError(gateway=self.name)

    def _post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        token = self._access_token()
        try:
            resp = requests.post(
                f"{self.base_url}{path}",
                json=json or {},
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            log.error("PayPal request failed path=%s error=%s", path, exc)
            raise PaymentGatewayError(gateway=self.name)

    # ---------------------------------------------------------------- contract

    def initiate(self, order) -> GatewayResult:
        return_url = f"{self.storefront_url}/checkout/confirm?gateway=paypal&order={order.pk}"
        cancel_url = f"{self.storefront_url}/checkout/payment?order={order.pk}"

        if self.mock:
            paypal_order_id = f"PP_MOCK_{order.order_number}"
            approval_url = f"{return_url}&token={paypal_order_id}"
            return GatewayResult(
                status=PENDING,
                transaction_id=paypal_order_id,
                approval_url=approval_url,
                message="Continue to PayPal to approve the payment.",
                response={"paypal_order_id": paypal_order_id, "mock": True},
            )

        data = self._post("/v2/checkout/orders", {
            "intent": "CAPTURE",
            "purchase_units": [{
                "reference_id": order.order_number,
                "description": f"Zambezi Meats order {order.order_number}",
                "amount": {"currency_code": order.currency, "value": f"{to_decimal(order.total):.2f}"},
            }],
            "application_context": {
                "brand_name": "Zambezi Meats",
                "return_url": return_url,
                "cancel_url": cancel_url,
                "user_action": "PAY_NOW",
            },
        })
        approval_url = next((l.get("href") for l in data.get("links", []) if l.get("rel") in ("approve", "payer-action")), None)
        log.info("PayPal order created order=%s paypal_order=%s", order.order_number, data.get("id"))
        return GatewayResult(
            status=PENDING,
            transaction_id=data.get("id"),
            approval_url=approval_url,
            message="Continue to PayPal to approve the payment.",
            response={"paypal_order_id": data.get("id"), "status": data.get("status")},
        )

    def confirm(self, payment, data: Dict[str, Any]) -> GatewayResult:
        paypal_order_id = data.get("paypal_order_id") or data.get("token") or payment.transaction_id
        if self.mock:
            return GatewayResult(
                status=COMPLETED,
                transaction_id=paypal_order_id,
                message="Payment completed.",
                response={"paypal_order_id": paypal_order_id, "capture_id": f"CAP_MOCK_{paypal_order_id}", "mock": True},
            )

        capture = self._post(f"/v2/checkout/orders/{paypal_order_id}/capture")
        status = capture.get("status")
        capture_id = None
        try:
            capture_id = capture["purchase_units"][0]["payments"]["captures"][0]["id"]
        except (KeyError, IndexError, TypeError):
            pass

        if status == "COMPLETED":
            result_status = COMPLETED
        elif status in ("VOIDED", "DECLINED"):
            result_status = FAILED
        else:
            result_status = PENDING
        return GatewayResult(
            status=result_status,
            transaction_id=paypal_order_id,
            message="Payment completed." if result_status == COMPLETED else "PayPal payment was not completed.",
            response={"paypal_order_id": paypal_order_id, "capture_id": capture_id, "status": status},
        )

    def refund(self, payment, amount=None) -> GatewayResult:
        capture_id = (payment.gateway_response or {}).get("capture_id")
        if self.mock:
            return GatewayResult(
                status=REFUNDED,
                transaction_id=f"RF_MOCK_{payment.transaction_id}",
                response={"mock": True, "amount": str(amount or payment.amount)},
            )
        if not capture_id:
            raise PaymentGatewayError("No PayPal capture to refund.", gateway=self.name, retryable=False)

        body = {}
        if amount is not None:
            body["amount"] = {"value": f"{to_decimal(amount):.2f}", "currency_code": payment.currency}
        data = self._post(f"/v2/payments/captures/{capture_id}/refund", body)
        return GatewayResult(
            status=REFUNDED,
            transaction_id=data.get("id"),
            response={"refund_id": data.get("id"), "status": data.get("status")},
        )
