"""Custom authentication backends."""

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend


class UsernameOrEmailBackend(ModelBackend):
    """Authentication backend that accepts either a username or an email."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        User = get_user_model()

        if not username or password is None:
            return None

        try:
            user = User.objects.get(username=username)
        except User.DoesNotExist:
            # Fall back to email, only when it identifies a single account
            matches = list(User.objects.filter(email__iexact=username)[:2])
            if len(matches) != 1:
                return None
            user = matches[0]

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
