"""
Payment method → gateway adapter.

  card             → StripeGateway
  wallet           → PayPalGateway
  deferred         → AfterpayGateway
  cash_on_delivery → CashOnDeliveryGateway
"""

from checkout.errors import ValidationError

from .base import COMPLETED, FAILED, PENDING, REFUNDED, GatewayResult, PaymentGateway
from .card import StripeGateway
from .cash_on_delivery import CashOnDeliveryGateway
from .deferred import AfterpayGateway
from .wallet import PayPalGateway

GATEWAYS = {
    "card": StripeGateway,
    "wallet": PayPalGateway,
    "deferred": AfterpayGateway,
    "cash_on_delivery": CashOnDeliveryGateway,
}


def get_gateway(payment_method: str) -> PaymentGateway:
    try:
        return GATEWAYS[payment_method]()
    except KeyError:
        raise ValidationError(
            "Unsupported payment method.",
            fields={"payment_method": [f"Choose one of: {', '.join(GATEWAYS)}."]},
        )


__all__ = [
    "AfterpayGateway",
    "CashOnDeliveryGateway",
    "COMPLETED",
    "FAILED",
    "GATEWAYS",
    "GatewayResult",
    "PayPalGateway",
    "PaymentGateway",
    "PENDING",
    "REFUNDED",
    "StripeGateway",
    "get_gateway",
]
