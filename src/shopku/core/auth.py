"""Request authentication for the JSON API."""

import logging
from functools import wraps

from django.http import JsonResponse

logger = logging.getLogger(__name__)


def unauthorized(message="Authentication required"):
    return JsonResponse(
        {"success": False, "error": "unauthorized", "message": message},
        status=401,
    )


def resolve_token_user(request):
    """Return the user owning the request's Bearer token.

    Returns None when the request carries no Bearer header. Raises
    ``LookupError`` when the header is present but the token is unknown
    or belongs to an inactive account.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None

    key = auth_header[7:].strip()  # Remove "Bearer " prefix

    from rest_framework.authtoken.models import Token
    try:
        token_obj = Token.objects.select_related("user").get(key=key)
    except Token.DoesNotExist:
        raise LookupError("Invalid token")

    if not token_obj.user.is_active:
        raise LookupError("Inactive account")
    return token_obj.user


def require_api_user(view_func):
    """Decorator to require an authenticated user.

    Bearer tokens take precedence; an authenticated Django session is
    accepted otherwise.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            token_user = resolve_token_user(request)
        except LookupError as e:
            logger.info("Rejected API token: %s", e)
            return unauthorized("Invalid token")

        if token_user is not None:
            request.user = token_user
        elif not request.user.is_authenticated:
            return unauthorized()

        return view_func(request, *args, **kwargs)
    return wrapper
