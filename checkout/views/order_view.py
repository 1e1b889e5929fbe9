"""
checkout.views.order_view

/api/v1/checkout/orders/                          POST  create order (201)
/api/v1/checkout/orders/<id>/pay/                 POST  start payment
/api/v1/checkout/orders/<id>/confirm-payment/     POST  gateway return / confirmation
/api/v1/checkout/orders/<id>/cancel/              POST  cancel + release holds
/api/v1/checkout/orders/<id>/invoice/             GET   invoice (created on first request)
"""

from rest_framework import status

from checkout.serializers import CancelOrderInput, ConfirmPaymentInput, CreateOrderInput
from checkout.services import api

from .base import CheckoutAPIView


class CreateOrderView(CheckoutAPIView):
    input_serializer = CreateOrderInput

    def post(self, request):
        data = self.validated(request.data)
        result = api.create_order(
            [dict(line) for line in data["items"]],
            dict(data["address"]),
            data["payment_method"],
            promo_code=data.get("promo_code"),
            notes=data.get("notes"),
            user=self.current_user,
            delivery_instructions=data.get("delivery_instructions"),
        )
        return self.respond(result, success_status=status.HTTP_201_CREATED)


class ProcessPaymentView(CheckoutAPIView):
    def post(self, request, order_id: int):
        return self.respond(api.process_payment(order_id))


class ConfirmPaymentView(CheckoutAPIView):
    input_serializer = ConfirmPaymentInput

    def post(self, request, order_id: int):
        data = self.validated(request.data)
        return self.respond(api.confirm_payment(order_id, dict(data)))


class CancelOrderView(CheckoutAPIView):
    input_serializer = CancelOrderInput

    def post(self, request, order_id: int):
        data = self.validated(request.data)
        return self.respond(api.cancel_order(order_id, changed_by=self.current_user, reason=data.get("reason")))


class InvoiceView(CheckoutAPIView):
    def get(self, request, order_id: int):
        return self.respond(api.get_invoice(order_id))
