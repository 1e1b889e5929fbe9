"""
checkout.errors

Error taxonomy for the checkout flow. Services raise these; the API facade
(checkout.services.api) converts them into {"success": False, "error": {...}}.

Every error carries:
  - code:    stable machine-readable identifier
  - message: safe to show to the shopper
  - status:  HTTP-equivalent status used by the views
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional


class CheckoutError(Exception):
    code = "checkout_error"
    status = 400
    default_message = "Checkout failed."

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "message": self.message, "status": self.status}
        data.update({k: v for k, v in self.context.items() if v is not None})
        return data


class ValidationError(CheckoutError):
    code = "validation_error"
    default_message = "The request contains invalid data."

    def __init__(self, message: Optional[str] = None, fields: Optional[Dict[str, Any]] = None):
        super().__init__(message, fields=fields)
        self.fields = fields or {}


class EmptyCartError(CheckoutError):
    code = "empty_cart"
    default_message = "Your cart is empty."


class InsufficientStockError(CheckoutError):
    code = "insufficient_stock"
    status = 409
    default_message = "Some items in your cart are no longer available in the requested quantity."

    def __init__(self, products: Iterable[Dict[str, Any]] = (), message: Optional[str] = None):
        self.products: List[Dict[str, Any]] = list(products)
        if message is None and self.products:
            names = ", ".join(str(p.get("name") or p.get("product_id")) for p in self.products)
            message = f"Insufficient stock for: {names}"
        super().__init__(message, products=self.products)


class StockReservationError(InsufficientStockError):
    code = "stock_reservation_failed"


class AddressNotDeliverableError(CheckoutError):
    code = "address_not_deliverable"
    status = 422
    default_message = "Sorry, we don't deliver to this area yet."

    def __init__(self, message: Optional[str] = None, postcode: Optional[str] = None, suburb: Optional[str] = None):
        super().__init__(message, postcode=postcode, suburb=suburb)


class PromoInvalidError(CheckoutError):
    code = "promo_invalid"
    status = 422
    default_message = "This promo code is not valid."

    REASONS = ("not_found", "inactive", "not_started", "expired", "below_minimum", "exhausted")

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message, reason=reason)


class PaymentGatewayError(CheckoutError):
    code = "payment_failed"
    status = 402
    default_message = "Payment could not be processed. Your order is saved, please try again."

    def __init__(self, message: Optional[str] = None, gateway: Optional[str] = None, retryable: bool = True):
        self.gateway = gateway
        self.retryable = retryable
        super().__init__(message, gateway=gateway, retryable=retryable)


class NotFoundError(CheckoutError):
    code = "not_found"
    status = 404
    default_message = "Not found."


class InvalidTransitionError(CheckoutError):
    code = "invalid_transition"
    status = 409
    default_message = "The order cannot move to that status."


class PersistenceError(CheckoutError):
    code = "persistence_error"
    status = 500
    default_message = "Something went wrong while saving your order. Please try again."

    def __init__(self, message: Optional[str] = None):
        # Never surface driver/DB detail to the caller.
        super().__init__(message)
