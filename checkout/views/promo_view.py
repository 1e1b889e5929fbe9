from checkout.serializers import ValidatePromoInput
from checkout.services import api

from .base import CheckoutAPIView


class ValidatePromoView(CheckoutAPIView):
    """/api/v1/checkout/validate-promo/  POST {code, subtotal}"""
    input_serializer = ValidatePromoInput

    def post(self, request):
        data = self.validated(request.data)
        return self.respond(api.validate_promo_code(data["code"], data["subtotal"]))
