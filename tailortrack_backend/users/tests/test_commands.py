from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

User = get_user_model()


class AdminCommandTests(TestCase):
    """
    GUARANTEES:
    - ensure_admin creates once, then promotes and resets on re-run
    - the last active admin cannot be deactivated
    """

    def test_ensure_admin_creates_then_updates(self):
        call_command("ensure_admin", email="Owner@Shop.in", password="secret-1", name="Ravi Kumar", stdout=StringIO())

        admin = User.objects.get(email="owner@shop.in")
        self.assertEqual(admin.role, "admin")
        self.assertTrue(admin.is_superuser)
        self.assertEqual(admin.full_name, "Ravi Kumar")

        admin.role = "staff"
        admin.save()
        call_command("ensure_admin", email="owner@shop.in", password="secret-2", stdout=StringIO())

        admin.refresh_from_db()
        self.assertEqual(admin.role, "admin")
        self.assertTrue(admin.check_password("secret-2"))
        self.assertEqual(User.objects.count(), 1)

    def test_ensure_admin_skips_without_credentials(self):
        out = StringIO()
        call_command("ensure_admin", email="", password="", stdout=out)
        self.assertIn("Skipping", out.getvalue())
        self.assertEqual(User.objects.count(), 0)

    def test_ensure_admin_rejects_short_password(self):
        with self.assertRaises(CommandError):
            call_command("ensure_admin", email="owner@shop.in", password="123", stdout=StringIO())

    def test_last_admin_cannot_be_deactivated(self):
        User.objects.create_user(email="a1@shop.in", password="x", role="admin")
        with self.assertRaises(CommandError):
            call_command("deactivate_admin", "a1@shop.in", stdout=StringIO())

        User.objects.create_user(email="a2@shop.in", password="x", role="admin")
        call_command("deactivate_admin", "A1@shop.in", stdout=StringIO())
        self.assertFalse(User.objects.get(email="a1@shop.in").is_active)

    def test_list_staff(self):
        User.objects.create_user(email="admin@shop.in", password="x", role="admin")
        User.objects.create_user(email="tailor@shop.in", password="x", role="staff")
        User.objects.create_user(email="cust@shop.in", password="x")

        out = StringIO()
        call_command("list_staff", stdout=out)
        self.assertIn("tailor@shop.in", out.getvalue())
        self.assertNotIn("cust@shop.in", out.getvalue())

        out = StringIO()
        call_command("list_staff", "--admins-only", stdout=out)
        self.assertNotIn("tailor@shop.in", out.getvalue())
