from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from customers.models import Customer
from orders.services.creation import create_order
from payments.models import Payment
from payments.services.reconciliation import apply_payment

User = get_user_model()


class AnalyticsTests(TestCase):
    """
    GUARANTEES:
    - revenue counts completed payments, not order amounts
    - outstanding counts balances of pending/partial orders
    - reports are for staff; bad date input is a 400
    """

    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        customer = Customer.objects.create(name="Meena Rao", phone="9000000001")

        first = create_order(data={"cloth_type": "suit", "amount": 2000}, actor=self.staff, customer=customer)
        create_order(
            data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 500},
            actor=self.staff,
        )
        apply_payment(order_id=first.id, amount="800", method=Payment.METHOD_CASH, actor=self.staff)
        self.client.force_authenticate(user=self.staff)

    def test_dashboard_summary(self):
        res = self.client.get("/api/analytics/dashboard/")

        self.assertEqual(res.status_code, 200)
        summary = res.data["summary"]
        self.assertEqual(summary["total_orders"], 2)
        self.assertEqual(summary["total_revenue"], "800.00")
        self.assertEqual(summary["total_pending"], "1700.00")
        self.assertEqual(summary["total_customers"], 1)
        self.assertEqual(res.data["payment_methods"], [{"method": "cash", "count": 1, "total": "800.00"}])
        self.assertEqual(res.data["top_customers"][0]["total_spent"], "2000.00")

    def test_date_range_is_inclusive(self):
        today = timezone.localdate().isoformat()
        res = self.client.get("/api/analytics/dashboard/", {"start_date": today, "end_date": today})
        self.assertEqual(res.data["summary"]["total_orders"], 2)

        res = self.client.get("/api/analytics/dashboard/", {"start_date": "2000-01-01", "end_date": "2000-01-31"})
        self.assertEqual(res.data["summary"]["total_orders"], 0)
        self.assertEqual(res.data["summary"]["total_revenue"], "0.00")

    def test_invalid_dates(self):
        self.assertEqual(self.client.get("/api/analytics/dashboard/", {"start_date": "01/02/2024"}).status_code, 400)
        res = self.client.get("/api/analytics/dashboard/", {"start_date": "2024-02-02", "end_date": "2024-02-01"})
        self.assertEqual(res.status_code, 400)

    def test_revenue_series(self):
        res = self.client.get("/api/analytics/revenue/", {"period": "week"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["revenue"][0]["revenue"], "800.00")

        self.assertEqual(self.client.get("/api/analytics/revenue/", {"period": "decade"}).status_code, 400)

    def test_order_stats(self):
        res = self.client.get("/api/analytics/orders/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["by_status"], [{"status": "pending", "count": 2}])
        self.assertEqual(res.data["avg_order_value"], "1250.00")

    def test_customers_forbidden(self):
        self.client.force_authenticate(user=User.objects.create_user(email="c@example.com", password="pass"))
        self.assertEqual(self.client.get("/api/analytics/dashboard/").status_code, 403)
