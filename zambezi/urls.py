# /zambezi/urls.py
"""
CHANGE LOG
----------
2026-10-12
- ADD: /api/v1/checkout/ include (checkout core endpoints + Stripe webhook).
- ADD: Inline /health/ readiness endpoint placed before includes.
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health_view(request):
    """Liveness probe."""
    return JsonResponse({"ok": True})


urlpatterns = [
    path("health/", health_view, name="health"),
    path("admin/", admin.site.urls),
    path("api/v1/checkout/", include("checkout.urls", namespace="checkout")),
]
