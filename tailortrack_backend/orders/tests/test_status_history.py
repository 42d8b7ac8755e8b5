from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from orders.models import Order, OrderStatusHistory
from orders.services.exceptions import (
    InvalidOrderStatusError,
    OrderNotReadyError,
    PaymentRequiredError,
)
from orders.services.status import change_status, mark_picked_up

User = get_user_model()


class StatusHistoryTests(TestCase):
    """
    GUARANTEES:
    - creation writes exactly one history row
    - same-status saves write nothing
    - every change appends one row; latest row == current status
    - first move to delivered stamps delivery_date, later moves keep it
    - history rows are immutable
    """

    def setUp(self):
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.order = Order(customer_name="Asha", phone_number="9876543210", cloth_type="shirt", amount=500)
        self.order.save(actor=self.staff, note="Order created")

    def _statuses(self):
        return list(self.order.status_history.order_by("timestamp", "id").values_list("status", flat=True))

    def test_creation_writes_one_entry(self):
        entries = list(self.order.status_history.all())

        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].status, Order.STATUS_PENDING)
        self.assertEqual(entries[0].changed_by, self.staff)
        self.assertEqual(entries[0].note, "Order created")

    def test_same_status_save_is_idempotent(self):
        self.order.special_instructions = "no pockets"
        self.order.save()
        self.assertFalse(change_status(order=self.order, status="pending", actor=self.staff))

        self.assertEqual(self.order.status_history.count(), 1)

    def test_changes_append_in_order(self):
        for target in ("measurement-taken", "cutting-done", "stitching"):
            self.assertTrue(change_status(order=self.order, status=target, actor=self.staff))

        self.order.refresh_from_db()
        self.assertEqual(
            self._statuses(),
            ["pending", "measurement-taken", "cutting-done", "stitching-in-progress"],
        )
        self.assertEqual(self._statuses()[-1], self.order.status)

    def test_any_stage_may_follow_any_other(self):
        change_status(order=self.order, status="ready-for-delivery")
        change_status(order=self.order, status="pending")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertEqual(len(self._statuses()), 3)

    def test_unknown_status_rejected(self):
        with self.assertRaises(InvalidOrderStatusError):
            change_status(order=self.order, status="teleported")

    def test_delivered_stamps_delivery_date_once(self):
        change_status(order=self.order, status="delivered")
        self.order.refresh_from_db()
        first = self.order.delivery_date
        self.assertIsNotNone(first)

        change_status(order=self.order, status="trial-done")
        change_status(order=self.order, status="delivered")
        self.order.refresh_from_db()
        self.assertEqual(self.order.delivery_date, first)

    def test_history_rows_are_immutable(self):
        entry = self.order.status_history.first()
        entry.note = "edited"
        with self.assertRaises(ValueError):
            entry.save()
        with self.assertRaises(ValueError):
            entry.delete()
        self.assertEqual(OrderStatusHistory.objects.count(), 1)

    def test_financial_edit_keeps_payment_status_derived(self):
        self.order.advance_amount = Decimal("500")
        self.order.payment_status = "pending"
        self.order.save()

        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, "paid")
        self.assertEqual(self.order.balance_amount, Decimal("0.00"))


class PickupTests(TestCase):
    def setUp(self):
        self.order = Order(customer_name="Asha", phone_number="9876543210", cloth_type="shirt", amount=500)
        self.order.save()

    def test_requires_ready_status(self):
        with self.assertRaises(OrderNotReadyError):
            mark_picked_up(order=self.order)

    def test_requires_full_payment(self):
        change_status(order=self.order, status="ready-for-delivery")
        self.order.refresh_from_db()

        with self.assertRaises(PaymentRequiredError):
            mark_picked_up(order=self.order)

    def test_paid_ready_order_is_delivered(self):
        self.order.advance_amount = Decimal("500")
        self.order.save()
        change_status(order=self.order, status="ready-for-delivery")
        self.order.refresh_from_db()

        order = mark_picked_up(order=self.order)

        self.assertEqual(order.status, Order.STATUS_DELIVERED)
        self.assertIsNotNone(order.delivery_date)
