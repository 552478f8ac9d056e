from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = DjangoUserAdmin.fieldsets + (("PDV", {"fields": ("role", "last_signed_in")}),)
    list_display = DjangoUserAdmin.list_display + ("role", "last_signed_in")
    list_filter = DjangoUserAdmin.list_filter + ("role",)
