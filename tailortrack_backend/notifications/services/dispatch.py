# notifications/services/dispatch.py
"""
NOTIFICATION DISPATCH (order events -> channels)

Order created:
- SMS with tracking link (sms_sent/sms_sent_at set on provider ack)
- linked customer: confirmation email + in-app order_confirmation

Status changed:
- ready-for-delivery: email + SMS + in-app ready_for_pickup
- anything else: SMS + in-app status_update

Broadcast:
- one email per account with unread notifications, each its own Celery task

These run in Celery workers; each channel is attempted independently
and reports a DeliveryResult.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.utils import timezone

from notifications.models import Notification
from notifications.services import messages
from notifications.services.email import send_templated_email
from notifications.services.inbox import notify_user
from notifications.services.results import CHANNEL_IN_APP, DeliveryResult
from notifications.services.sms import send_sms
from orders.models import Order

logger = logging.getLogger(__name__)


def _load_order(order_id):
    order = Order.objects.select_related("customer__user").filter(pk=order_id).first()
    if order is None:
        logger.warning("Notification skipped: order not found", extra={"order_id": str(order_id)})
    return order


def _mark_sms_sent(order: Order) -> None:
    now = timezone.now()
    Order.objects.filter(pk=order.pk).update(sms_sent=True, sms_sent_at=now)
    order.sms_sent = True
    order.sms_sent_at = now


def _customer_email(order: Order) -> str:
    customer = order.customer
    if customer is None:
        return ""
    if customer.email:
        return customer.email
    return customer.user.email if customer.user_id else ""


def _customer_account(order: Order):
    customer = order.customer
    if customer is None or not customer.user_id:
        return None
    return customer.user


def _in_app(order: Order, *, type: str, title: str, message: str) -> DeliveryResult | None:
    account = _customer_account(order)
    if account is None:
        return None
    note = notify_user(
        user=account,
        type=type,
        title=title,
        message=message,
        order=order,
        metadata={"barcode": order.barcode, "status": order.status},
    )
    return DeliveryResult(ok=True, channel=CHANNEL_IN_APP, provider_id=str(note.id))


def resend_tracking_sms(order: Order) -> DeliveryResult:
    result = send_sms(to=order.phone_number, body=messages.order_created_sms(order))
    if result.ok:
        _mark_sms_sent(order)
    return result


def notify_order_created(order_id) -> list[DeliveryResult]:
    order = _load_order(order_id)
    if order is None:
        return []

    results = [resend_tracking_sms(order)]

    email = _customer_email(order)
    if email:
        results.append(
            send_templated_email(
                to=email,
                subject=messages.order_confirmation_subject(order),
                template="order_confirmation",
                context=messages.order_email_context(order),
            )
        )

    in_app = _in_app(
        order,
        type=Notification.TYPE_ORDER_CONFIRMATION,
        title="Order placed",
        message=f"Your order {order.barcode} has been placed. Track it at {order.tracking_link}",
    )
    if in_app is not None:
        results.append(in_app)

    logger.info(
        "Order created notifications dispatched",
        extra={"order_id": str(order.id), "results": [(r.channel, r.ok) for r in results]},
    )
    return results


def notify_status_change(order_id, status: str) -> list[DeliveryResult]:
    order = _load_order(order_id)
    if order is None:
        return []

    results = []
    if status == Order.STATUS_READY:
        email = _customer_email(order)
        if email:
            results.append(
                send_templated_email(
                    to=email,
                    subject=messages.ready_for_pickup_subject(order),
                    template="ready_for_pickup",
                    context=messages.order_email_context(order),
                )
            )
        results.append(send_sms(to=order.phone_number, body=messages.ready_for_pickup_sms(order)))
        in_app = _in_app(
            order,
            type=Notification.TYPE_READY_FOR_PICKUP,
            title="Ready for pickup",
            message=messages.ready_for_pickup_sms(order),
        )
    else:
        results.append(send_sms(to=order.phone_number, body=messages.status_update_sms(order)))
        in_app = _in_app(
            order,
            type=Notification.TYPE_STATUS_UPDATE,
            title=f"Order {order.barcode}: {order.status_label}",
            message=messages.status_update_sms(order),
        )

    if in_app is not None:
        results.append(in_app)

    logger.info(
        "Status notifications dispatched",
        extra={"order_id": str(order.id), "status": status, "results": [(r.channel, r.ok) for r in results]},
    )
    return results


def broadcast_recipients(user_ids):
    """Accounts from `user_ids` with an email and at least one unread notification."""
    User = get_user_model()
    return list(
        User.objects.filter(pk__in=list(user_ids))
        .exclude(email="")
        .annotate(unread=Count("notifications", filter=Q(notifications__is_read=False)))
        .filter(unread__gt=0)
    )


def email_broadcast_recipient(user_id, title: str, message: str) -> DeliveryResult | None:
    recipients = broadcast_recipients([user_id])
    if not recipients:
        return None

    user = recipients[0]
    result = send_templated_email(
        to=user.email,
        subject=title,
        template="broadcast",
        context={
            "first_name": messages.first_name(user.full_name),
            "title": title,
            "message": message,
            "unread_count": user.unread,
            "shop_name": messages.SHOP_NAME,
        },
    )
    if not result.ok:
        logger.warning("Broadcast email not sent", extra={"user_id": str(user.pk), "detail": result.detail})
    return result
