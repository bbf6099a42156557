"""
PATH: users/management/commands/ensure_superuser.py

Production-safe admin bootstrap.

- Reads AUTO_ADMIN_EMAIL + AUTO_ADMIN_PASSWORD (+ optional AUTO_ADMIN_NAME) from env.
- Idempotent: creates the admin if missing; resets password + admin role if present.
- Does NOT print the password.
"""

from __future__ import annotations

import logging

import environ
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

logger = logging.getLogger("inventory.users")

env = environ.Env()


class Command(BaseCommand):
    help = "Create/update an initial admin user from env vars (idempotent)."

    def handle(self, *args, **options):
        email = (env.str("AUTO_ADMIN_EMAIL", default="") or "").strip()
        password = (env.str("AUTO_ADMIN_PASSWORD", default="") or "").strip()
        name = (env.str("AUTO_ADMIN_NAME", default="Administrator") or "").strip()

        if not email or not password:
            self.stdout.write(self.style.WARNING("AUTO_ADMIN_* env vars not set. Skipping."))
            return

        User = get_user_model()

        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()

            if user:
                user.is_active = True
                user.is_staff = True
                user.is_superuser = True
                user.role = User.ROLE_ADMIN
                user.set_password(password)
                user.save()
                logger.info("Admin user updated", extra={"email": email})
                self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (updated)"))
                return

            User.objects.create_superuser(email=email, password=password, name=name)

        logger.info("Admin user created", extra={"email": email})
        self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (created)"))
