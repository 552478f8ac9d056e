from django.contrib import admin

from apps.catalog.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "account", "updated_at")
    list_filter = ("account",)
    search_fields = ("name", "description")
