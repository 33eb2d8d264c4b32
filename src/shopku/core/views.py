"""Core views for ShopKu."""

from django.db import DatabaseError, connection
from django.http import JsonResponse


def health_check(request):
    """Health check endpoint for container orchestration."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError:
        return JsonResponse(
            {"status": "unhealthy", "database": "unreachable"},
            status=503,
        )

    return JsonResponse({"status": "healthy", "database": "connected"})
