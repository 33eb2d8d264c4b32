"""URL configuration for ShopKu project."""

from django.contrib import admin
from django.urls import include, path

from shopku.core.views import health_check

urlpatterns = [
    # Health check
    path("health/", health_check, name="health_check"),

    # Django admin
    path("admin/", admin.site.urls),

    # Account API (token login, registration, wallet balance)
    path("api/", include("shopku.core.urls", namespace="core")),

    # Store API (catalog, cart, orders)
    path("api/", include("shopku.store.urls", namespace="store")),
]
