# backend/wsgi.py
"""
WSGI entrypoint for the inventory API.

Deployments must export DJANGO_SETTINGS_MODULE=backend.settings.prod;
without it the dev settings are loaded.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_wsgi_application()
