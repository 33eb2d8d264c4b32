"""Core app configuration."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the core application."""

    name = "shopku.core"
    verbose_name = "ShopKu Core"
    default_auto_field = "django.db.models.BigAutoField"
