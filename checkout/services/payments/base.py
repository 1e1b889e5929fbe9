"""
checkout.services.payments.base

Common contract for the four payment-method adapters.

A gateway never touches order status or stock; it only talks to the provider
and reports back a GatewayResult. checkout.services.payment_dispatch decides
what that result means for the order.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from django.conf import settings

from checkout.services import settings_store

log = logging.getLogger(__name__)

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"
REFUNDED = "refunded"


@dataclass
class GatewayResult:
    status: str
    transaction_id: Optional[str] = None
    message: str = ""
    # Client-side continuation tokens; at most one is set per gateway.
    client_secret: Optional[str] = None
    approval_url: Optional[str] = None
    redirect_url: Optional[str] = None
    response: Dict[str, Any] = field(default_factory=dict)

    @property
    def continuation(self) -> Dict[str, str]:
        tokens = {
            "client_secret": self.client_secret,
            "approval_url": self.approval_url,
            "redirect_url": self.redirect_url,
        }
        return {k: v for k, v in tokens.items() if v}


class PaymentGateway(abc.ABC):
    #: value stored on Payment.gateway
    name: str = ""
    #: settings-store switch, e.g. payments.card_enabled
    enabled_setting: str = ""

    @property
    def timeout(self) -> float:
        return float(getattr(settings, "PAYMENT_GATEWAY_TIMEOUT_SECONDS", 20))

    @property
    def storefront_url(self) -> str:
        return str(getattr(settings, "STOREFRONT_BASE_URL", "http://localhost:5173")).rstrip("/")

    @abc.abstractmethod
    def is_configured(self) -> bool:
        """True when live credentials are present; otherwise the gateway runs in mock mode."""

    @property
    def mock(self) -> bool:
        return not self.is_configured()

    def is_enabled(self) -> bool:
        return settings_store.get_bool(self.enabled_setting, True) if self.enabled_setting else True

    def unavailable_reason(self, order) -> Optional[str]:
        """Per-order restrictions (currency, amount limits). None means available."""
        return None

    @abc.abstractmethod
    def initiate(self, order) -> GatewayResult:
        ...

    @abc.abstractmethod
    def confirm(self, payment, data: Dict[str, Any]) -> GatewayResult:
        ...

    @abc.abstractmethod
    def refund(self, payment, amount=None) -> GatewayResult:
        ...
