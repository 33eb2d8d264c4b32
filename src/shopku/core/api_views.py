"""Account API views.

These endpoints sit in front of the store API:
- Token login for API clients
- Customer registration
- Wallet balance lookup for the signed-in customer
- Profile read and partial update
"""

import json
import logging

from django.contrib.auth import authenticate, get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .auth import require_api_user

logger = logging.getLogger(__name__)


def _bad_request(message):
    return JsonResponse({"success": False, "error": "invalid_argument", "message": message}, status=400)


def _read_json(request):
    try:
        data = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


@method_decorator(csrf_exempt, name="dispatch")
class TokenLoginView(View):
    """Exchange credentials for an API token.

    POST /api/auth/token/
    {
        "username": "budi",
        "password": "secret"
    }

    Returns auth token for subsequent requests.
    """

    def post(self, request):
        data = _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON body")

        username = str(data.get("username") or "").strip()
        password = data.get("password") or ""

        if not username or not password:
            return _bad_request("Username and password are required")

        user = authenticate(request, username=username, password=password)

        if not user:
            return JsonResponse(
                {"success": False, "error": "unauthorized", "message": "Invalid username or password"},
                status=401,
            )

        # Get or create auth token
        from rest_framework.authtoken.models import Token
        token, created = Token.objects.get_or_create(user=user)

        return JsonResponse({
            "success": True,
            "token": token.key,
            "user": {
                "id": str(user.pk),
                "username": user.username,
            },
        })


@method_decorator(csrf_exempt, name="dispatch")
class RegisterView(View):
    """Register a customer account with an empty wallet.

    POST /api/auth/register/
    {
        "username": "budi",
        "password": "secret",
        "email": "budi@example.com"
    }
    """

    def post(self, request):
        data = _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON body")

        username = str(data.get("username") or "").strip()
        password = data.get("password") or ""
        email = str(data.get("email") or "").strip()

        if not username or not password:
            return _bad_request("Username and password are required")

        User = get_user_model()
        if User.objects.filter(username=username).exists():
            return JsonResponse(
                {"success": False, "error": "conflict", "message": "Username already taken"},
                status=409,
            )

        try:
            with transaction.atomic():
                user = User.objects.create_user(username=username, email=email, password=password)
        except IntegrityError:
            # Lost a race with a concurrent registration
            return JsonResponse(
                {"success": False, "error": "conflict", "message": "Username already taken"},
                status=409,
            )

        logger.info("Registered user", extra={"user_id": str(user.pk)})

        return JsonResponse(
            {"success": True, "data": {"id": str(user.pk), "username": user.username}},
            status=201,
        )


class MeView(View):
    """Current customer with wallet balance.

    GET /api/me/
    Headers: Authorization: Bearer <token>
    """

    @method_decorator(require_api_user)
    def get(self, request):
        user = request.user
        return JsonResponse({
            "success": True,
            "data": {
                "username": user.username,
                "display_name": user.get_display_name(),
                "balance": user.balance,
            },
        })


PROFILE_FIELDS = ("username", "email", "phone", "address", "avatar_url")


def _profile_data(user):
    return {
        "id": str(user.pk),
        "username": user.username,
        "email": user.email,
        "phone": user.phone,
        "address": user.address,
        "avatar_url": user.avatar_url,
        "created_at": user.date_joined.isoformat(),
    }


@method_decorator(csrf_exempt, name="dispatch")
class ProfileView(View):
    """Contact details of the signed-in customer.

    GET /api/user/
    PUT /api/user/
    {
        "phone": "081234567890",
        "address": "Jl. Merdeka 1, Bandung"
    }

    PUT changes only the fields present in the body.
    """

    @method_decorator(require_api_user)
    def get(self, request):
        return JsonResponse({"success": True, "data": _profile_data(request.user)})

    @method_decorator(require_api_user)
    def put(self, request):
        data = _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON body")

        changes = {field: data[field] for field in PROFILE_FIELDS if field in data}
        if any(not isinstance(value, str) for value in changes.values()):
            return _bad_request("Profile fields must be strings")
        changes = {field: value.strip() for field, value in changes.items()}

        user = request.user
        User = get_user_model()
        if "username" in changes:
            if not changes["username"]:
                return _bad_request("Username cannot be empty")
            if User.objects.filter(username=changes["username"]).exclude(pk=user.pk).exists():
                return JsonResponse(
                    {"success": False, "error": "conflict", "message": "Username already taken"},
                    status=409,
                )

        for field, value in changes.items():
            setattr(user, field, value)

        try:
            user.full_clean(exclude=[f.name for f in User._meta.fields if f.name not in changes])
        except ValidationError as e:
            user.refresh_from_db()
            return JsonResponse(
                {
                    "success": False,
                    "error": "invalid_argument",
                    "message": "Invalid profile data",
                    "details": e.message_dict,
                },
                status=400,
            )

        if changes:
            try:
                with transaction.atomic():
                    user.save(update_fields=list(changes))
            except IntegrityError:
                user.refresh_from_db()
                return JsonResponse(
                    {"success": False, "error": "conflict", "message": "Username already taken"},
                    status=409,
                )
            logger.info("Updated profile", extra={"user_id": str(user.pk), "fields": sorted(changes)})

        return JsonResponse({
            "success": True,
            "data": _profile_data(user),
            "message": "Profile updated successfully",
        })
