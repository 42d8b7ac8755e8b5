from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase

from customers.services.profiles import ensure_customer_for_user
from notifications import tasks
from notifications.models import Notification
from orders.models import Order
from orders.services.creation import create_order
from orders.services.status import change_status

User = get_user_model()


class OrderNotificationTests(TestCase):
    """
    GUARANTEES:
    - nothing is dispatched before the order transaction commits
    - a linked customer gets a confirmation email and an in-app entry
    - ready-for-delivery sends the pickup email and in-app entry
    - SMS without credentials is skipped and the order is not marked sms_sent
    """

    def setUp(self):
        self.account = User.objects.create_user(
            email="meena@example.com", password="pass", first_name="Meena", phone="9000000001"
        )
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")

    def _create(self):
        return create_order(
            data={"items": [{"cloth_type": "kurta", "price": "900"}]},
            actor=self.account,
            customer=ensure_customer_for_user(self.account),
        )

    def test_nothing_sent_before_commit(self):
        self._create()
        self.assertEqual(len(mail.outbox), 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_order_created(self):
        with self.captureOnCommitCallbacks(execute=True):
            order = self._create()

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["meena@example.com"])
        self.assertEqual(mail.outbox[0].subject, f"Order Confirmation #{order.order_number}")
        self.assertIn(order.tracking_link, mail.outbox[0].body)

        note = Notification.objects.get(recipient=self.account)
        self.assertEqual(note.type, Notification.TYPE_ORDER_CONFIRMATION)
        self.assertEqual(note.order, order)

        order.refresh_from_db()
        self.assertFalse(order.sms_sent)

    def test_ready_for_pickup(self):
        order = self._create()

        with self.captureOnCommitCallbacks(execute=True):
            change_status(order=order, status=Order.STATUS_READY, actor=self.staff)

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("Ready for Pickup", mail.outbox[0].subject)
        self.assertEqual(
            Notification.objects.get(recipient=self.account).type, Notification.TYPE_READY_FOR_PICKUP
        )

    def test_other_status_is_in_app_only(self):
        order = self._create()

        with self.captureOnCommitCallbacks(execute=True):
            change_status(order=order, status=Order.STATUS_STITCHING, actor=self.staff)

        self.assertEqual(len(mail.outbox), 0)
        self.assertEqual(Notification.objects.get(recipient=self.account).type, Notification.TYPE_STATUS_UPDATE)

    def test_repeated_status_sends_nothing(self):
        order = self._create()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            change_status(order=order, status=Order.STATUS_PENDING, actor=self.staff)

        self.assertEqual(len(callbacks), 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_walk_in_order_has_no_inbox(self):
        with self.captureOnCommitCallbacks(execute=True):
            create_order(
                data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 300},
                actor=self.staff,
            )

        self.assertEqual(len(mail.outbox), 0)
        self.assertEqual(Notification.objects.count(), 0)


class NotificationTaskQueueTests(TestCase):
    """
    GUARANTEES:
    - order events enqueue Celery tasks only after commit, with string ids
    - a broadcast email goes only to recipients that still have unread notifications
    """

    def setUp(self):
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")

    def test_order_created_enqueued_after_commit(self):
        with mock.patch.object(tasks.send_order_created, "delay") as delay:
            with self.captureOnCommitCallbacks(execute=True):
                order = create_order(
                    data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 300},
                    actor=self.staff,
                )

        delay.assert_called_once_with(str(order.id))

    def test_status_change_enqueued_with_status(self):
        order = create_order(
            data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "shirt", "amount": 300},
            actor=self.staff,
        )

        with mock.patch.object(tasks.send_status_notifications, "delay") as delay:
            with self.captureOnCommitCallbacks(execute=True):
                change_status(order=order, status=Order.STATUS_STITCHING, actor=self.staff)

        delay.assert_called_once_with(str(order.id), Order.STATUS_STITCHING)

    def test_broadcast_email_skips_read_inbox(self):
        reader = User.objects.create_user(email="reader@example.com", password="pass", first_name="Uma")
        Notification.objects.create(
            recipient=reader, type=Notification.TYPE_ADMIN_BROADCAST, title="t", message="m", is_read=True
        )

        tasks.send_broadcast_email(str(reader.id), "Festive offer", "20% off")

        self.assertEqual(len(mail.outbox), 0)
