"""WSGI config for ShopKu project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shopku.settings.prod")

application = get_wsgi_application()
