# notifications/tasks.py
"""
Celery tasks for notification work.

Every task is enqueued with transaction.on_commit(): nothing is sent for a
write that rolls back. Task arguments are plain ids and strings; provider
outcomes are reported as DeliveryResult values inside the dispatch layer.
"""

from __future__ import annotations

import logging

from celery import shared_task
from django.db import transaction

logger = logging.getLogger(__name__)


def enqueue(task, *args):
    transaction.on_commit(lambda: task.delay(*args), robust=True)


@shared_task(ignore_result=True)
def send_order_created(order_id):
    from notifications.services.dispatch import notify_order_created

    notify_order_created(order_id)


@shared_task(ignore_result=True)
def send_status_notifications(order_id, status):
    from notifications.services.dispatch import notify_status_change

    notify_status_change(order_id, status)


@shared_task(ignore_result=True)
def send_broadcast_email(user_id, title, message):
    from notifications.services.dispatch import email_broadcast_recipient

    email_broadcast_recipient(user_id, title, message)


@shared_task(ignore_result=True)
def fan_out_broadcast(user_ids, title, message):
    from notifications.services.dispatch import broadcast_recipients

    recipients = broadcast_recipients(user_ids)
    for user in recipients:
        send_broadcast_email.delay(str(user.pk), title, message)
    logger.info("Broadcast emails queued", extra={"recipients": len(recipients)})


def queue_order_created(*, order_id):
    enqueue(send_order_created, str(order_id))


def queue_status_notifications(*, order_id, status):
    enqueue(send_status_notifications, str(order_id), status)


def queue_broadcast_emails(*, user_ids, title, message):
    enqueue(fan_out_broadcast, [str(pk) for pk in user_ids], title, message)
