# backend/settings/dev.py
"""
LOCAL DEVELOPMENT SETTINGS

- DEBUG on, SQLite by default (DATABASE_URL from base)
- frontend dev server on :3000 allowed for CORS + CSRF (session cookies)
- inventory.* loggers at DEBUG unless LOG_LEVEL says otherwise
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

FRONTEND_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=["http://localhost:3000"])
CORS_ALLOWED_ORIGINS = FRONTEND_ORIGINS
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=FRONTEND_ORIGINS)

LOGGING["loggers"]["inventory"]["level"] = env("LOG_LEVEL", default="DEBUG").upper()
