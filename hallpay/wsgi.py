"""WSGI entrypoint for the Hall coin exchange."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hallpay.settings")

application = get_wsgi_application()
