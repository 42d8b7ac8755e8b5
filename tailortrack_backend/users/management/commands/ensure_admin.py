# users/management/commands/ensure_admin.py
"""
ADMIN BOOTSTRAP

    manage.py ensure_admin --email owner@shop.in --password ... [--name "Ravi Kumar"]

- falls back to AUTO_ADMIN_EMAIL / AUTO_ADMIN_PASSWORD / AUTO_ADMIN_NAME
- idempotent: an existing account is promoted to admin and its password reset
- the password is never echoed
"""

from __future__ import annotations

import os

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.core.validators import validate_email
from django.db import transaction

from permissions.roles import ROLE_ADMIN

MIN_PASSWORD_LENGTH = 6


class Command(BaseCommand):
    help = "Create or promote the shop admin account (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", default=os.environ.get("AUTO_ADMIN_EMAIL", ""))
        parser.add_argument("--password", default=os.environ.get("AUTO_ADMIN_PASSWORD", ""))
        parser.add_argument("--name", default=os.environ.get("AUTO_ADMIN_NAME", ""))

    def handle(self, *args, **options):
        email = (options["email"] or "").strip().lower()
        password = (options["password"] or "").strip()
        first, _, last = (options["name"] or "").strip().partition(" ")

        if not email or not password:
            self.stdout.write(self.style.WARNING("No admin email/password given. Skipping."))
            return

        try:
            validate_email(email)
        except ValidationError as exc:
            raise CommandError(f"Invalid email: {email}") from exc
        if len(password) < MIN_PASSWORD_LENGTH:
            raise CommandError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        User = get_user_model()

        with transaction.atomic():
            user = User.objects.select_for_update().filter(email__iexact=email).first()
            if user is None:
                User.objects.create_superuser(email=email, password=password, first_name=first, last_name=last)
                self.stdout.write(self.style.SUCCESS(f"Admin created: {email}"))
                return

            user.role = ROLE_ADMIN
            user.is_active = True
            user.is_staff = True
            user.is_superuser = True
            if first:
                user.first_name, user.last_name = first, last
            user.set_password(password)
            user.save()

        self.stdout.write(self.style.SUCCESS(f"Admin updated: {email}"))
