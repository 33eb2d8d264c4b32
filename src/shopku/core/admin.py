"""Admin registration for core models."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "balance", "is_staff", "date_joined")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Wallet", {"fields": ("balance",)}),
        ("Profile", {"fields": ("phone", "address", "avatar_url")}),
    )
