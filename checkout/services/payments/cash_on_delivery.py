"""
checkout.services.payments.cash_on_delivery

Cash on delivery completes as soon as it is chosen; the cash itself is
collected by the driver. AUD orders only, capped at payments.cod_max_amount.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from checkout.services import settings_store
from checkout.utils.money import format_money, to_decimal

from .base import COMPLETED, REFUNDED, GatewayResult, PaymentGateway

log = logging.getLogger(__name__)


class CashOnDeliveryGateway(PaymentGateway):
    name = "cash_on_delivery"
    enabled_setting = "payments.cod_enabled"

    def is_configured(self) -> bool:
        return True

    @property
    def max_amount(self):
        return settings_store.get_decimal("payments.cod_max_amount", "500.00")

    def unavailable_reason(self, order) -> Optional[str]:
        if order.currency != "AUD":
            return "Cash on Delivery is only available for Australian orders."
        if to_decimal(order.total) > self.max_amount:
            return f"Cash on Delivery is not available for orders over {format_money(self.max_amount)}."
        return None

    def initiate(self, order) -> GatewayResult:
        log.info("COD accepted order=%s total=%s", order.order_number, order.total)
        return GatewayResult(
            status=COMPLETED,
            transaction_id=f"COD_{order.order_number}",
            message=f"Your order has been placed. Please have {format_money(order.total)} ready upon delivery.",
            response={"type": "cash_on_delivery", "collect_on_delivery": True},
        )

    def confirm(self, payment, data: Dict[str, Any]) -> GatewayResult:
        return GatewayResult(status=COMPLETED, transaction_id=payment.transaction_id, message="Payment completed.")

    def refund(self, payment, amount=None) -> GatewayResult:
        return GatewayResult(
            status=REFUNDED,
            transaction_id=payment.transaction_id,
            message="Cash refunds are handled by staff.",
            response={"amount": str(amount if amount is not None else payment.amount), "manual": True},
        )
