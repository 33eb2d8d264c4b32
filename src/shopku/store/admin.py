"""Admin registration for store models."""

from django.contrib import admin

from .models import CartLine, Order, OrderItem, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock", "rating")
    list_filter = ("category",)
    search_fields = ("name",)


@admin.register(CartLine)
class CartLineAdmin(admin.ModelAdmin):
    list_display = ("user", "product", "quantity", "created_at")
    raw_id_fields = ("user", "product")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product_id", "quantity", "price_at_purchase", "name_snapshot")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "payment_method", "status", "total", "created_at")
    list_filter = ("status", "payment_method")
    readonly_fields = ("user", "payment_method", "total", "created_at", "updated_at")
    inlines = [OrderItemInline]
