"""checkout.views.base"""

from __future__ import annotations

from typing import Any, Dict

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.errors import ValidationError
from checkout.services.api import failure


class CheckoutAPIView(APIView):
    """
    Thin wrapper: validate with a DRF serializer, call the facade, map the
    result envelope onto an HTTP status.
    """
    permission_classes = [AllowAny]
    input_serializer = None

    def validated(self, data) -> Dict[str, Any]:
        ser = self.input_serializer(data=data)
        if not ser.is_valid():
            raise _InputInvalid(ser.errors)
        return ser.validated_data

    def respond(self, result: Dict[str, Any], success_status: int = status.HTTP_200_OK) -> Response:
        if result.get("success"):
            return Response(result, status=success_status)
        return Response(result, status=result["error"].get("status", status.HTTP_400_BAD_REQUEST))

    def handle_exception(self, exc):
        if isinstance(exc, _InputInvalid):
            return self.respond(failure(ValidationError(fields=exc.errors)))
        return super().handle_exception(exc)

    @property
    def current_user(self):
        user = getattr(self.request, "user", None)
        return user if getattr(user, "is_authenticated", False) else None


class _InputInvalid(Exception):
    def __init__(self, errors):
        self.errors = errors
        super().__init__("invalid input")
