"""
checkout.serializers

Input serializers validate request bodies for the checkout views; output
serializers shape the models the facade returns.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from checkout.models import (
    DeliveryZone,
    Invoice,
    Order,
    OrderItem,
    OrderStatusHistory,
    Payment,
    PaymentMethod,
)
from checkout.utils.money import format_money

MONEY = dict(max_digits=10, decimal_places=2, min_value=Decimal("0.00"))


# ============================== inputs ==============================

class ValidateAddressInput(serializers.Serializer):
    postcode = serializers.CharField(max_length=16)
    suburb = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)


class DeliveryFeeInput(serializers.Serializer):
    zone_id = serializers.IntegerField(min_value=1)
    subtotal = serializers.DecimalField(**MONEY)


class ValidatePromoInput(serializers.Serializer):
    code = serializers.CharField(max_length=40)
    subtotal = serializers.DecimalField(**MONEY)


class CartLineInput(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class AddressInput(serializers.Serializer):
    address_id = serializers.IntegerField(min_value=1, required=False)
    label = serializers.CharField(max_length=64, required=False, allow_blank=True)
    street = serializers.CharField(max_length=255, required=False, allow_blank=True)
    suburb = serializers.CharField(max_length=120, required=False, allow_blank=True)
    city = serializers.CharField(max_length=120, required=False, allow_blank=True)
    state = serializers.CharField(max_length=64, required=False, allow_blank=True)
    postcode = serializers.CharField(max_length=16, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get("address_id") and not (attrs.get("street") and attrs.get("postcode")):
            raise serializers.ValidationError("Provide an address_id or street and postcode.")
        return attrs


class CreateOrderInput(serializers.Serializer):
    items = CartLineInput(many=True, allow_empty=True)
    address = AddressInput()
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    promo_code = serializers.CharField(max_length=40, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    delivery_instructions = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ConfirmPaymentInput(serializers.Serializer):
    """Gateway-specific confirmation data, passed through as-is."""
    payment_intent_id = serializers.CharField(required=False)
    paypal_order_id = serializers.CharField(required=False)
    token = serializers.CharField(required=False)
    orderToken = serializers.CharField(required=False)


class CancelOrderInput(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)


# ============================== outputs ==============================

class DeliveryZoneSerializer(serializers.ModelSerializer):
    estimated_label = serializers.CharField(read_only=True)

    class Meta:
        model = DeliveryZone
        fields = ("id", "name", "delivery_fee", "free_delivery_threshold", "estimated_days", "estimated_label")


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ("id", "product_id", "product_name", "product_sku", "quantity", "unit_price", "total_price")


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ("status", "notes", "created_at")


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ("gateway", "status", "amount", "currency", "transaction_id", "paid_at")


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    payment = serializers.SerializerMethodField()
    total_formatted = serializers.SerializerMethodField()
    delivery_zone = serializers.CharField(source="delivery_zone.name", default=None, read_only=True)
    address = serializers.CharField(source="address.full_address", default=None, read_only=True)

    class Meta:
        model = Order
        fields = (
            "id", "order_number", "status", "payment_method",
            "subtotal", "delivery_fee", "discount", "total", "total_formatted", "currency",
            "promotion_code", "notes", "delivery_instructions",
            "address", "delivery_zone", "items", "status_history", "payment",
            "created_at",
        )

    def get_payment(self, obj):
        payment = Payment.objects.filter(order=obj).first()
        return PaymentSerializer(payment).data if payment else None

    def get_total_formatted(self, obj):
        return format_money(obj.total, obj.currency)


class InvoiceSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Invoice
        fields = (
            "invoice_number", "order_number", "status",
            "subtotal", "delivery_fee", "discount", "total", "currency",
            "issue_date", "due_date", "paid_at", "notes", "is_overdue",
        )
