from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from customers.models import Customer, CustomerMeasurementHistory
from customers.services.profiles import record_order, update_measurements

User = get_user_model()


class CustomerProfileServiceTests(TestCase):
    """
    GUARANTEES:
    - Measurement updates push the previous profile to history
    - History is append-only
    - Running totals are incremented, never recomputed
    """

    def setUp(self):
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.customer = Customer.objects.create(name="Meena", phone="9000000001")

    def test_first_measurement_update_writes_no_history(self):
        update_measurements(customer=self.customer, measurements={"chest": 38}, actor=self.staff)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.measurements, {"chest": 38})
        self.assertEqual(self.customer.measurement_history.count(), 0)

    def test_previous_profile_is_archived(self):
        update_measurements(customer=self.customer, measurements={"chest": 38}, actor=self.staff)
        update_measurements(
            customer=self.customer,
            measurements={"chest": 40, "waist": 32},
            actor=self.staff,
            notes="refit",
        )

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.measurements, {"chest": 40, "waist": 32})

        history = list(self.customer.measurement_history.all())
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].measurements, {"chest": 38})
        self.assertEqual(history[0].updated_by, self.staff)
        self.assertEqual(history[0].notes, "refit")

    def test_history_rows_are_immutable(self):
        entry = CustomerMeasurementHistory.objects.create(
            customer=self.customer, measurements={"chest": 1}
        )
        entry.notes = "changed"
        with self.assertRaises(ValueError):
            entry.save()

    def test_record_order_increments_totals(self):
        record_order(customer_id=self.customer.id, amount=Decimal("450.00"))
        record_order(customer_id=self.customer.id, amount=Decimal("50.50"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_orders, 2)
        self.assertEqual(self.customer.total_spent, Decimal("500.50"))


class CustomerApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.account = User.objects.create_user(email="meena@example.com", password="pass")
        self.other = User.objects.create_user(email="other@example.com", password="pass")

        self.customer = Customer.objects.create(
            user=self.account, name="Meena", phone="9000000001", email="meena@example.com"
        )

    def test_staff_creates_customer(self):
        self.client.force_authenticate(user=self.staff)
        res = self.client.post(
            "/api/customers/",
            {"name": "Ravi", "phone": "9000000002", "address": {"city": "Pune"}},
            format="json",
        )

        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["customer"]["name"], "Ravi")

    def test_duplicate_phone_rejected(self):
        self.client.force_authenticate(user=self.staff)
        res = self.client.post(
            "/api/customers/", {"name": "Dup", "phone": "9000000001"}, format="json"
        )
        self.assertEqual(res.status_code, 400)

    def test_customer_cannot_list(self):
        self.client.force_authenticate(user=self.account)
        res = self.client.get("/api/customers/")
        self.assertEqual(res.status_code, 403)

    def test_list_search(self):
        Customer.objects.create(name="Zubin", phone="9111111111")
        self.client.force_authenticate(user=self.staff)

        res = self.client.get("/api/customers/", {"search": "zub"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["name"], "Zubin")

    def test_me_returns_own_profile(self):
        self.client.force_authenticate(user=self.account)
        res = self.client.get("/api/customers/me/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["id"], str(self.customer.id))

    def test_owner_can_retrieve_but_not_others(self):
        self.client.force_authenticate(user=self.account)
        self.assertEqual(self.client.get(f"/api/customers/{self.customer.id}/").status_code, 200)

        self.client.force_authenticate(user=self.other)
        self.assertEqual(self.client.get(f"/api/customers/{self.customer.id}/").status_code, 403)

    def test_delete_is_soft(self):
        self.client.force_authenticate(user=self.staff)
        res = self.client.delete(f"/api/customers/{self.customer.id}/")

        self.assertEqual(res.status_code, 200)
        self.customer.refresh_from_db()
        self.assertFalse(self.customer.is_active)

    def test_search_by_phone(self):
        self.client.force_authenticate(user=self.staff)

        res = self.client.get("/api/customers/search/phone/9000000001/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["name"], "Meena")

        res = self.client.get("/api/customers/search/phone/0000/")
        self.assertEqual(res.status_code, 404)

    def test_measurement_patch_keeps_history(self):
        self.client.force_authenticate(user=self.staff)
        url = f"/api/customers/{self.customer.id}/measurements/"

        self.client.patch(url, {"measurements": {"chest": 38}}, format="json")
        res = self.client.patch(url, {"measurements": {"chest": 39}}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["customer"]["measurements"], {"chest": 39})
        self.assertEqual(len(res.data["customer"]["measurement_history"]), 1)

    def test_measurement_values_must_be_scalar(self):
        self.client.force_authenticate(user=self.staff)
        res = self.client.patch(
            f"/api/customers/{self.customer.id}/measurements/",
            {"measurements": {"chest": [1, 2]}},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
