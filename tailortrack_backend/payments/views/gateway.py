# payments/views/gateway.py
"""
ONLINE PAYMENTS (Razorpay checkout)

POST /api/payments/create-order/    gateway order for the outstanding balance
POST /api/payments/verify/          checkout callback (camelCase keys)
POST /api/payments/verify-payment/  same, snake_case razorpay_* keys

Rules:
- caller must own the order (or be staff)
- signature mismatch => 400, nothing recorded
- the captured amount comes from the gateway, never from the client
- a payment id that was already recorded returns the existing payment
"""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Order
from orders.serializers import OrderSerializer
from payments.models import Payment
from payments.serializers import (
    GatewayOrderRequestSerializer,
    PaymentSerializer,
    VerifyPaymentSerializer,
)
from payments.services import razorpay
from payments.services.exceptions import (
    GatewayError,
    GatewayNotConfiguredError,
    InvalidPaymentAmountError,
    OrderNotFoundError,
)
from payments.services.reconciliation import apply_payment
from payments.views.payments import ensure_order_access

logger = logging.getLogger(__name__)


def _order_for(user, order_id) -> Order:
    order = get_object_or_404(Order.objects.select_related("customer__user", "created_by"), pk=order_id)
    ensure_order_access(user, order)
    return order


class CreateGatewayOrderView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=GatewayOrderRequestSerializer,
        responses={
            200: OpenApiResponse(description="Gateway order for checkout"),
            400: OpenApiResponse(description="Order already fully paid"),
            502: OpenApiResponse(description="Gateway unavailable"),
            503: OpenApiResponse(description="Gateway not configured"),
        },
    )
    def post(self, request):
        serializer = GatewayOrderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _order_for(request.user, serializer.validated_data["order_id"])

        if order.balance_amount <= 0:
            return Response({"detail": "Order is already fully paid"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            gateway_order = razorpay.create_gateway_order(
                amount=order.balance_amount,
                receipt=f"order_{order.order_number}",
                notes={
                    "orderId": str(order.id),
                    "customerId": str(order.customer_id or ""),
                    "orderNumber": order.order_number,
                },
            )
        except GatewayNotConfiguredError:
            return Response(
                {"detail": "Online payments are not configured"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        except GatewayError as exc:
            logger.warning("Gateway order creation failed", extra={"order_id": str(order.id), "error": str(exc)})
            return Response({"detail": "Failed to create payment order"}, status=status.HTTP_502_BAD_GATEWAY)

        return Response(
            {
                "gateway_order_id": gateway_order["id"],
                "amount": gateway_order.get("amount"),
                "currency": gateway_order.get("currency") or razorpay.gateway_currency(),
                "key_id": razorpay.key_id(),
                "order_details": {
                    "order_number": order.order_number,
                    "customer_name": order.customer_name,
                },
            }
        )


class VerifyPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=VerifyPaymentSerializer,
        responses={
            200: PaymentSerializer,
            400: OpenApiResponse(description="Invalid payment signature"),
            502: OpenApiResponse(description="Gateway unavailable"),
        },
    )
    def post(self, request):
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not razorpay.verify_payment_signature(
            gateway_order_id=data["gateway_order_id"],
            gateway_payment_id=data["gateway_payment_id"],
            signature=data["gateway_signature"],
        ):
            logger.warning("Invalid payment signature", extra={"gateway_order_id": data["gateway_order_id"]})
            return Response({"detail": "Invalid payment signature"}, status=status.HTTP_400_BAD_REQUEST)

        order = _order_for(request.user, data["order_id"])

        recorded = Payment.objects.filter(gateway_payment_id=data["gateway_payment_id"]).first()
        if recorded is not None:
            return self._response(recorded, created=False)

        try:
            details = razorpay.fetch_payment(data["gateway_payment_id"])
            amount = razorpay.from_paise(details.get("amount"))
        except GatewayNotConfiguredError:
            return Response(
                {"detail": "Online payments are not configured"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        except GatewayError as exc:
            logger.warning("Gateway payment fetch failed", extra={"order_id": str(order.id), "error": str(exc)})
            return Response({"detail": "Failed to verify payment"}, status=status.HTTP_502_BAD_GATEWAY)

        fetched_order_id = str(details.get("order_id") or "")
        if fetched_order_id and fetched_order_id != data["gateway_order_id"]:
            return Response({"detail": "Payment does not belong to this order"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            payment, created = apply_payment(
                order_id=order.id,
                amount=amount,
                method=Payment.METHOD_GATEWAY,
                actor=request.user,
                gateway_order_id=data["gateway_order_id"],
                gateway_payment_id=data["gateway_payment_id"],
                gateway_signature=data["gateway_signature"],
            )
        except OrderNotFoundError:
            return Response({"detail": "Order not found"}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPaymentAmountError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return self._response(payment, created=created)

    def _response(self, payment, *, created: bool):
        order = Order.objects.get(pk=payment.order_id)
        return Response(
            {
                "message": "Payment verified successfully" if created else "Payment already recorded",
                "payment": PaymentSerializer(payment).data,
                "order": OrderSerializer(order).data,
            }
        )
