from django.contrib import admin

from apps.customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "cpf", "email", "phone", "account", "created_at")
    list_filter = ("account",)
    search_fields = ("name", "cpf", "email", "phone")
