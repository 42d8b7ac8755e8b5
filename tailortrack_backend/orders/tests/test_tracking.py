from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from orders.models import Order
from orders.services.creation import create_order
from orders.services.status import change_status

User = get_user_model()


class PublicTrackingTests(TestCase):
    """
    GUARANTEES:
    - lookup by barcode is case-insensitive and needs no login
    - the public projection hides phone, address and actors
    - search by phone returns first names only
    """

    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.order = create_order(
            data={
                "customer_name": "Asha Verma",
                "phone_number": "9876543210",
                "address": "12 MG Road",
                "cloth_type": "dress",
                "amount": 4000,
            },
            actor=self.staff,
        )
        change_status(order=self.order, status=Order.STATUS_STITCHING, actor=self.staff)

    def test_track_by_lowercase_barcode(self):
        res = self.client.get(f"/api/track/{self.order.barcode.lower()}/")

        self.assertEqual(res.status_code, 200)
        order = res.data["order"]
        self.assertEqual(order["barcode"], self.order.barcode)
        self.assertEqual(order["status"], "stitching-in-progress")
        self.assertEqual([h["status"] for h in order["status_history"]], ["pending", "stitching-in-progress"])
        self.assertNotIn("phone_number", order)
        self.assertNotIn("address", order)
        self.assertNotIn("changed_by", order["status_history"][0])

    def test_unknown_barcode(self):
        res = self.client.get("/api/track/TTNOPE0000/")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["detail"], "Order not found")

    def test_search_by_phone(self):
        res = self.client.post("/api/track/search/", {"phoneNumber": "9876543210"}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["orders"]), 1)
        result = res.data["orders"][0]
        self.assertEqual(result["customer_name"], "Asha")
        self.assertEqual(result["cloth_type"], "dress")
        self.assertEqual(result["barcode"], self.order.barcode)

    def test_search_without_match(self):
        res = self.client.post("/api/track/search/", {"phone_number": "1111111111"}, format="json")
        self.assertEqual(res.status_code, 404)

    def test_search_requires_phone(self):
        res = self.client.post("/api/track/search/", {}, format="json")
        self.assertEqual(res.status_code, 400)


class HealthTests(TestCase):
    def test_health_reports_db_and_providers(self):
        res = APIClient().get("/api/health/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["db"], "ok")
        # test settings: gateway keys set, Twilio blank, locmem email
        self.assertEqual(res.data["providers"], {"sms": False, "email": True, "payments": True})
