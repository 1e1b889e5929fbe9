from django.urls import path

from checkout.views.delivery_view import DeliveryFeeView, ValidateAddressView
from checkout.views.order_view import (
    CancelOrderView,
    ConfirmPaymentView,
    CreateOrderView,
    InvoiceView,
    ProcessPaymentView,
)
from checkout.views.promo_view import ValidatePromoView
from checkout.views.webhook_view import stripe_webhook

app_name = "checkout"

urlpatterns = [
    path("validate-address/", ValidateAddressView.as_view(), name="validate-address"),
    path("delivery-fee/", DeliveryFeeView.as_view(), name="delivery-fee"),
    path("validate-promo/", ValidatePromoView.as_view(), name="validate-promo"),
    path("orders/", CreateOrderView.as_view(), name="order-create"),
    path("orders/<int:order_id>/pay/", ProcessPaymentView.as_view(), name="order-pay"),
    path("orders/<int:order_id>/confirm-payment/", ConfirmPaymentView.as_view(), name="order-confirm-payment"),
    path("orders/<int:order_id>/cancel/", CancelOrderView.as_view(), name="order-cancel"),
    path("orders/<int:order_id>/invoice/", InvoiceView.as_view(), name="order-invoice"),
    path("webhooks/stripe/", stripe_webhook, name="stripe-webhook"),
]
