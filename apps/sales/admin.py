from django.contrib import admin

from apps.sales.models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    exclude = ("product",)
    readonly_fields = ("product_id", "product_name", "quantity", "unit_price", "total_price", "created_at")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("id", "account", "customer_id", "payment_method", "installments", "total_amount", "status", "created_at")
    list_filter = ("status", "payment_method")
    search_fields = ("id", "account__username")
    exclude = ("customer",)
    readonly_fields = (
        "account",
        "customer_id",
        "total_amount",
        "payment_method",
        "installments",
        "amount_received",
        "change",
        "created_at",
        "updated_at",
    )
    inlines = [SaleItemInline]


@admin.register(SaleItem)
class SaleItemAdmin(admin.ModelAdmin):
    list_display = ("sale", "product_name", "quantity", "unit_price", "total_price")
    search_fields = ("sale__id", "product_name")
    exclude = ("product",)
    readonly_fields = ("sale", "product_id", "product_name", "quantity", "unit_price", "total_price", "created_at")
