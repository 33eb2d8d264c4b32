"""Account API URL patterns."""

from django.urls import path

from . import api_views

app_name = "core"

urlpatterns = [
    path("auth/token/", api_views.TokenLoginView.as_view(), name="token"),
    path("auth/register/", api_views.RegisterView.as_view(), name="register"),
    path("me/", api_views.MeView.as_view(), name="me"),
    path("user/", api_views.ProfileView.as_view(), name="profile"),
]
