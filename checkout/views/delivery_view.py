"""
/api/v1/checkout/validate-address/   POST {postcode, suburb?}
/api/v1/checkout/delivery-fee/       POST {zone_id, subtotal}
"""

from checkout.serializers import DeliveryFeeInput, ValidateAddressInput
from checkout.services import api

from .base import CheckoutAPIView


class ValidateAddressView(CheckoutAPIView):
    input_serializer = ValidateAddressInput

    def post(self, request):
        data = self.validated(request.data)
        return self.respond(api.validate_address(data["postcode"], data.get("suburb")))


class DeliveryFeeView(CheckoutAPIView):
    input_serializer = DeliveryFeeInput

    def post(self, request):
        data = self.validated(request.data)
        return self.respond(api.calculate_delivery_fee(data["zone_id"], data["subtotal"]))
