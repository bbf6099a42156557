# backend/settings/__init__.py
"""
Settings are split per environment; pick one with DJANGO_SETTINGS_MODULE:
- backend.settings.dev
- backend.settings.prod
- backend.settings.test
"""
