# users/management/commands/list_staff.py

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from permissions.roles import ROLE_ADMIN, STAFF_ROLES


class Command(BaseCommand):
    help = "List back-office accounts (admins and staff), newest first."

    def add_arguments(self, parser):
        parser.add_argument("--admins-only", action="store_true")

    def handle(self, *args, **options):
        roles = {ROLE_ADMIN} if options["admins_only"] else STAFF_ROLES
        accounts = get_user_model().objects.filter(role__in=roles).order_by("-created_at")

        if not accounts:
            self.stdout.write("No back-office accounts found.")
            return

        self.stdout.write(f"Total: {len(accounts)}")
        for user in accounts:
            state = "active" if user.is_active else "inactive"
            self.stdout.write(f"{user.email}\t{user.full_name}\t{user.role}\t{state}\t{user.created_at:%Y-%m-%d}")
