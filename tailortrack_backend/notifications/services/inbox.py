# notifications/services/inbox.py
"""
IN-APP NOTIFICATIONS

- notify_user(): one row for one recipient
- broadcast(): one row per active customer account (single bulk insert),
  then background emails to everyone with unread notifications
- read state: mark_read(), mark_all_read(), unread_count()
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from notifications.models import Notification

logger = logging.getLogger(__name__)


def notify_user(*, user, type: str, title: str, message: str, order=None, metadata=None) -> Notification:
    return Notification.objects.create(
        recipient=user,
        type=type,
        title=title,
        message=message,
        order=order,
        metadata=metadata or {},
    )


def unread_count(user) -> int:
    return Notification.objects.filter(recipient=user, is_read=False).count()


def mark_read(notification: Notification) -> Notification:
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=["is_read", "read_at"])
    return notification


def mark_all_read(user) -> int:
    return Notification.objects.filter(recipient=user, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )


@transaction.atomic
def broadcast(*, title: str, message: str, actor=None) -> int:
    from notifications import tasks

    User = get_user_model()
    recipient_ids = list(User.objects.customers().values_list("id", flat=True))

    metadata = {"sent_by": str(actor.pk)} if getattr(actor, "pk", None) else {}
    Notification.objects.bulk_create(
        [
            Notification(
                recipient_id=user_id,
                type=Notification.TYPE_ADMIN_BROADCAST,
                title=title,
                message=message,
                metadata=metadata,
            )
            for user_id in recipient_ids
        ]
    )

    logger.info("Broadcast created", extra={"recipients": len(recipient_ids)})
    tasks.queue_broadcast_emails(user_ids=recipient_ids, title=title, message=message)
    return len(recipient_ids)
