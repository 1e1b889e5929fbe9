"""
Concrete checkout models.
Django imports this package as `checkout.models`.
"""
from .product import Product
from .address import Address
from .delivery_zone import DeliveryZone
from .promotion import Promotion, PromotionType
from .order import Order, OrderItem, OrderStatus, OrderStatusHistory, PaymentMethod
from .stock_reservation import ReservationStatus, StockReservation
from .payment import Payment, PaymentStatus
from .invoice import Invoice, InvoiceStatus
from .setting import Setting

__all__ = [
    "Product",
    "Address",
    "DeliveryZone",
    "Promotion",
    "PromotionType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStatusHistory",
    "PaymentMethod",
    "ReservationStatus",
    "StockReservation",
    "Payment",
    "PaymentStatus",
    "Invoice",
    "InvoiceStatus",
    "Setting",
]
