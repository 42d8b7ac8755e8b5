# payments/views/webhook.py
"""
POST /api/payments/webhook/

- X-Razorpay-Signature = HMAC-SHA256(webhook_secret, raw body), checked
  before the body is parsed; mismatch => 400
- payment.captured => apply to notes.orderId (replays are no-ops)
- well-signed but unusable payloads are acknowledged with 200
"""

from __future__ import annotations

import json
import logging
import uuid

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from payments.models import Payment
from payments.services import razorpay
from payments.services.exceptions import (
    GatewayError,
    InvalidPaymentAmountError,
    OrderNotFoundError,
)
from payments.services.reconciliation import apply_payment

logger = logging.getLogger(__name__)

EVENT_PAYMENT_CAPTURED = "payment.captured"


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


def _ack(detail: str):
    return Response({"ok": True, "detail": detail}, status=status.HTTP_200_OK)


def _parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class RazorpayWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [WebhookThrottle]

    def post(self, request, *args, **kwargs):
        raw_body = request.body or b""
        signature = request.headers.get("x-razorpay-signature")

        if not razorpay.verify_webhook_signature(raw_body=raw_body, signature=signature):
            logger.warning("Invalid Razorpay webhook signature")
            return Response({"ok": False, "detail": "Invalid signature"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            payload = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Webhook body is not JSON")
            return _ack("Invalid payload")
        if not isinstance(payload, dict):
            return _ack("Invalid payload")

        event = str(payload.get("event") or "")
        if event != EVENT_PAYMENT_CAPTURED:
            logger.info("Webhook event ignored", extra={"event": event})
            return _ack("Event ignored")

        entity = ((payload.get("payload") or {}).get("payment") or {}).get("entity") or {}
        notes = entity.get("notes") if isinstance(entity.get("notes"), dict) else {}
        order_id = _parse_uuid(notes.get("orderId") or notes.get("order_id"))
        gateway_payment_id = str(entity.get("id") or "")

        if not order_id or not gateway_payment_id:
            logger.warning("Captured payment without order reference", extra={"gateway_payment_id": gateway_payment_id})
            return _ack("No order reference")

        try:
            payment, created = apply_payment(
                order_id=order_id,
                amount=razorpay.from_paise(entity.get("amount")),
                method=Payment.METHOD_GATEWAY,
                gateway_order_id=str(entity.get("order_id") or ""),
                gateway_payment_id=gateway_payment_id,
                notes="Recorded from gateway webhook",
            )
        except OrderNotFoundError:
            logger.warning("Webhook for unknown order", extra={"order_id": str(order_id)})
            return _ack("Unknown order")
        except (InvalidPaymentAmountError, GatewayError) as exc:
            logger.warning("Webhook payment rejected", extra={"order_id": str(order_id), "error": str(exc)})
            return _ack("Invalid amount")

        if not created:
            return _ack("Already processed")

        logger.info(
            "Webhook payment applied",
            extra={"order_id": str(order_id), "payment_id": str(payment.id)},
        )
        return _ack("Processed")
