"""
checkout.views.webhook_view

Stripe posts PaymentIntent events here. The raw body is needed for signature
verification, so this is a plain Django view rather than a DRF one.
"""

import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from checkout.errors import CheckoutError
from checkout.services import payment_dispatch

log = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request):
    signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")
    try:
        result = payment_dispatch.handle_stripe_webhook(request.body, signature)
    except CheckoutError as exc:
        log.warning("Stripe webhook rejected code=%s message=%s", exc.code, exc.message)
        return JsonResponse({"received": False, "error": exc.to_dict()}, status=400)
    return JsonResponse(result)
