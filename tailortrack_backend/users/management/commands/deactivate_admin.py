# users/management/commands/deactivate_admin.py
"""
Deactivates an admin account (never deletes: orders and payments keep their actor).
Refuses to remove the last active admin.
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN


class Command(BaseCommand):
    help = "Deactivate an admin account by email."

    def add_arguments(self, parser):
        parser.add_argument("email")

    def handle(self, *args, **options):
        User = get_user_model()
        email = options["email"].strip()

        with transaction.atomic():
            admins = list(User.objects.select_for_update().filter(role=ROLE_ADMIN, is_active=True))
            user = next((a for a in admins if a.email.lower() == email.lower()), None)
            if user is None:
                raise CommandError(f"No active admin with email {email}")
            if len(admins) == 1:
                raise CommandError("Refusing to deactivate the last active admin")

            user.is_active = False
            user.save(update_fields=["is_active", "updated_at"])

        self.stdout.write(self.style.SUCCESS(f"Admin deactivated: {email}"))
