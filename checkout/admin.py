from django.contrib import admin
from .models import (
    Address, DeliveryZone, Invoice, Order, OrderItem, OrderStatusHistory,
    Payment, Product, Promotion, Setting, StockReservation,
)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "price", "sale_price", "stock", "is_active", "updated_at")
    search_fields = ("name", "slug", "sku")
    list_filter = ("is_active",)
    prepopulated_fields = {"slug": ("name",)}
    # stock is owned by the reservation service
    readonly_fields = ("stock",)

    def get_readonly_fields(self, request, obj=None):
        return self.readonly_fields if obj else ()


@admin.register(DeliveryZone)
class DeliveryZoneAdmin(admin.ModelAdmin):
    list_display = ("name", "delivery_fee", "free_delivery_threshold", "estimated_days", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)
    ordering = ("id",)


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ("code", "type", "value", "min_order", "uses_count", "max_uses", "start_date", "end_date", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("code", "name")
    readonly_fields = ("uses_count",)


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ("__str__", "user", "postcode", "is_default")
    search_fields = ("street", "suburb", "postcode")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "product_name", "product_sku", "quantity", "unit_price", "total_price")
    can_delete = False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("status", "notes", "changed_by", "created_at")
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "user", "status", "payment_method", "total", "created_at")
    list_filter = ("status", "payment_method")
    search_fields = ("order_number", "user__email", "promotion_code")
    readonly_fields = ("order_number", "subtotal", "delivery_fee", "discount", "total", "currency", "status")
    inlines = [OrderItemInline, OrderStatusHistoryInline]

    def has_delete_permission(self, request, obj=None):
        # orders are cancelled, never deleted
        return False


@admin.register(StockReservation)
class StockReservationAdmin(admin.ModelAdmin):
    list_display = ("product", "order", "quantity", "status", "expires_at", "resolved_at")
    list_filter = ("status",)
    search_fields = ("order__order_number", "product__name")
    readonly_fields = ("product", "order", "quantity", "status", "expires_at", "created_at", "resolved_at")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("order", "gateway", "status", "attempts", "amount", "currency", "transaction_id", "paid_at")
    list_filter = ("gateway", "status")
    search_fields = ("order__order_number", "transaction_id")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "order", "status", "total", "issue_date", "due_date", "paid_at")
    list_filter = ("status",)
    search_fields = ("invoice_number", "order__order_number")


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ("key", "group", "value", "updated_at")
    list_filter = ("group",)
    search_fields = ("key",)
