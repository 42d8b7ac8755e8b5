from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from customers.models import Customer
from orders.models import Order
from orders.services.creation import create_order
from orders.services.exceptions import IdentifierGenerationError

User = get_user_model()


class OrderLifecycleScenarioTests(TestCase):
    """
    GUARANTEES (end to end through the API):
    - shirt 500 with discount 50 => amount 450, pending
    - paying 450 => paid, balance 0
    - delivered => delivery_date stamped, history grows by one per change
    """

    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.client.force_authenticate(user=self.staff)

    def test_full_lifecycle(self):
        res = self.client.post(
            "/api/orders/",
            {
                "customerName": "Asha Verma",
                "phoneNumber": "9876543210",
                "items": [{"clothType": "shirt", "price": "500", "quantity": 1}],
                "discount": "50",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        order = res.data["order"]
        self.assertEqual(order["subtotal"], "500.00")
        self.assertEqual(order["amount"], "450.00")
        self.assertEqual(order["balance_amount"], "450.00")
        self.assertEqual(order["payment_status"], "pending")
        self.assertEqual(len(order["status_history"]), 1)

        res = self.client.post(
            "/api/payments/",
            {"order_id": order["id"], "amount": "450", "payment_method": "cash"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["order"]["payment_status"], "paid")
        self.assertEqual(res.data["order"]["balance_amount"], "0.00")

        res = self.client.patch(f"/api/orders/{order['id']}/status/", {"status": "delivered"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["order"]["status"], "delivered")
        self.assertIsNotNone(res.data["order"]["delivery_date"])
        self.assertEqual(len(res.data["order"]["status_history"]), 2)

    def test_discount_larger_than_subtotal_rejected(self):
        res = self.client.post(
            "/api/orders/",
            {
                "customer_name": "Asha",
                "phone_number": "9876543210",
                "items": [{"cloth_type": "shirt", "price": "100"}],
                "discount": "150",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(Order.objects.count(), 0)

    def test_client_cannot_set_payment_status(self):
        res = self.client.post(
            "/api/orders/",
            {
                "customer_name": "Asha",
                "phone_number": "9876543210",
                "cloth_type": "suit",
                "amount": "2000",
                "payment_status": "paid",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["order"]["payment_status"], "pending")

    def test_missing_garment_rejected(self):
        res = self.client.post(
            "/api/orders/", {"customer_name": "Asha", "phone_number": "9876543210"}, format="json"
        )
        self.assertEqual(res.status_code, 400)

    def test_identifier_exhaustion_returns_500_and_persists_nothing(self):
        with mock.patch(
            "orders.models.order.generate_unique_barcode",
            side_effect=IdentifierGenerationError("Failed to generate unique barcode"),
        ):
            res = self.client.post(
                "/api/orders/",
                {"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": "10"},
                format="json",
            )

        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.data["detail"], "Failed to generate unique barcode")
        self.assertEqual(Order.objects.count(), 0)

    def test_staff_order_for_customer_copies_contact_and_updates_totals(self):
        customer = Customer.objects.create(name="Meena Rao", phone="9000000001", address={"city": "Pune"})

        res = self.client.post(
            "/api/orders/",
            {"customer": str(customer.id), "cloth_type": "blouse", "amount": "800"},
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["order"]["customer_name"], "Meena Rao")
        self.assertEqual(res.data["order"]["phone_number"], "9000000001")
        self.assertEqual(res.data["order"]["address"], "Pune")
        customer.refresh_from_db()
        self.assertEqual(customer.total_orders, 1)
        self.assertEqual(customer.total_spent, Decimal("800.00"))

    def test_put_edit_ignores_status_patch_applies_it(self):
        order = create_order(
            data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 500},
            actor=self.staff,
        )

        res = self.client.put(
            f"/api/orders/{order.id}/",
            {"status": "ready", "special_instructions": "slim fit"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["order"]["status"], "pending")
        self.assertEqual(res.data["order"]["special_instructions"], "slim fit")

        res = self.client.patch(f"/api/orders/{order.id}/", {"status": "ready"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["order"]["status"], "ready-for-delivery")

    def test_delete_blocked_once_paid(self):
        order = create_order(
            data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 500},
            actor=self.staff,
        )
        self.client.post(
            "/api/payments/",
            {"order_id": str(order.id), "amount": "100", "payment_method": "upi"},
            format="json",
        )

        res = self.client.delete(f"/api/orders/{order.id}/")
        self.assertEqual(res.status_code, 400)
        self.assertTrue(Order.objects.filter(pk=order.id).exists())

    def test_delete_unpaid_order(self):
        order = create_order(
            data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 500},
            actor=self.staff,
        )
        res = self.client.delete(f"/api/orders/{order.id}/")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(Order.objects.filter(pk=order.id).exists())


class CustomerOrderAccessTests(TestCase):
    """
    GUARANTEES:
    - customers create orders for themselves only, without a deposit
    - customers list and read only their own orders
    - customers cannot edit or move status
    """

    def setUp(self):
        self.client = APIClient()
        self.account = User.objects.create_user(
            email="meena@example.com", password="pass", first_name="Meena", last_name="Rao", phone="9000000001"
        )
        self.other = User.objects.create_user(email="other@example.com", password="pass", first_name="Other")

    def _create(self, user):
        self.client.force_authenticate(user=user)
        return self.client.post(
            "/api/orders/",
            {
                "items": [{"cloth_type": "kurta", "price": "900"}],
                "advance_amount": "900",
            },
            format="json",
        )

    def test_customer_creates_own_order(self):
        res = self._create(self.account)

        self.assertEqual(res.status_code, 201, res.data)
        order = Order.objects.get(pk=res.data["order"]["id"])
        self.assertEqual(order.customer.user, self.account)
        self.assertEqual(order.customer_name, "Meena Rao")
        self.assertEqual(order.advance_amount, Decimal("0.00"))
        self.assertEqual(order.created_by, self.account)

    def test_list_is_scoped_to_owner(self):
        self._create(self.account)
        self._create(self.other)

        self.client.force_authenticate(user=self.account)
        res = self.client.get("/api/orders/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["customer_name"], "Meena Rao")

    def test_cannot_read_others_order(self):
        order_id = self._create(self.other).data["order"]["id"]

        self.client.force_authenticate(user=self.account)
        self.assertEqual(self.client.get(f"/api/orders/{order_id}/").status_code, 403)

    def test_cannot_change_status(self):
        order_id = self._create(self.account).data["order"]["id"]

        res = self.client.patch(f"/api/orders/{order_id}/status/", {"status": "delivered"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_pickup_rules(self):
        order_id = self._create(self.account).data["order"]["id"]
        url = f"/api/orders/{order_id}/pickup/"

        self.assertEqual(self.client.patch(url).status_code, 400)

        order = Order.objects.get(pk=order_id)
        order.status = Order.STATUS_READY
        order.save()
        res = self.client.patch(url)
        self.assertEqual(res.status_code, 400)
        self.assertIn("Payment required", res.data["detail"])

        order.refresh_from_db()
        order.advance_amount = order.amount
        order.save()
        res = self.client.patch(url)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["order"]["status"], "delivered")


class OrderImageTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.client.force_authenticate(user=self.staff)
        self.order = create_order(
            data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 500},
            actor=self.staff,
        )

    def test_barcode_png(self):
        res = self.client.get(f"/api/orders/{self.order.id}/barcode/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res["Content-Type"], "image/png")
        self.assertTrue(res.content.startswith(b"\x89PNG"))

    def test_qrcode_png(self):
        res = self.client.get(f"/api/orders/{self.order.id}/qrcode/")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.content.startswith(b"\x89PNG"))


class OrderInputValidationTests(TestCase):
    """
    GUARANTEES:
    - item quantities must be whole numbers >= 1 (never coerced)
    - assigned_to must name an active staff account (400 otherwise)
    - an itemized order cannot be emptied of items
    """

    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.tailor = User.objects.create_user(email="tailor@example.com", password="pass", role="staff")
        self.client.force_authenticate(user=self.staff)

    def _itemized(self):
        return create_order(
            data={
                "customer_name": "Asha",
                "phone_number": "9876543210",
                "items": [{"cloth_type": "shirt", "price": "500", "quantity": 2}],
            },
            actor=self.staff,
        )

    def test_zero_or_fractional_quantity_rejected(self):
        for quantity in (0, 2.7):
            with self.subTest(quantity=quantity):
                res = self.client.post(
                    "/api/orders/",
                    {
                        "customerName": "Asha",
                        "phoneNumber": "9876543210",
                        "items": [{"clothType": "shirt", "price": 500, "quantity": quantity}],
                    },
                    format="json",
                )
                self.assertEqual(res.status_code, 400)
        self.assertEqual(Order.objects.count(), 0)

    def test_assign_to_staff_member(self):
        order = self._itemized()

        res = self.client.patch(f"/api/orders/{order.id}/", {"assignedTo": str(self.tailor.id)}, format="json")

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["order"]["assigned_to"], str(self.tailor.id))

    def test_assign_to_unknown_or_customer_account_rejected(self):
        order = self._itemized()
        customer = User.objects.create_user(email="c@example.com", password="pass")

        for target in ("7b0c3c3e-2a47-4c1a-9d55-0e6f5b1f9a10", str(customer.id)):
            with self.subTest(target=target):
                res = self.client.patch(f"/api/orders/{order.id}/", {"assigned_to": target}, format="json")
                self.assertEqual(res.status_code, 400)

        order.refresh_from_db()
        self.assertIsNone(order.assigned_to_id)

    def test_itemized_order_cannot_be_emptied(self):
        order = self._itemized()

        res = self.client.patch(f"/api/orders/{order.id}/", {"items": []}, format="json")

        self.assertEqual(res.status_code, 400)
        order.refresh_from_db()
        self.assertEqual(order.subtotal, Decimal("1000.00"))
        self.assertEqual(order.amount, Decimal("1000.00"))
