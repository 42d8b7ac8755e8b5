# payments/views/payments.py
"""
PAYMENT RECORDS

- GET  /api/payments/                 staff list (?order=, ?method=, ?status=)
- POST /api/payments/                 manual cash/card/upi entry (staff)
- GET  /api/payments/<id>/            owner or staff
- GET  /api/payments/order/<order_id>/ owner or staff
"""

from __future__ import annotations

import logging
import uuid

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Order
from orders.serializers import OrderSerializer
from payments.models import Payment
from payments.serializers import ManualPaymentSerializer, PaymentSerializer
from payments.services.exceptions import InvalidPaymentAmountError, OrderNotFoundError
from payments.services.reconciliation import apply_payment
from permissions.roles import CAP_PAYMENTS_RECORD, HasCapability, IsStaff, is_staff_user

logger = logging.getLogger(__name__)


def ensure_order_access(user, order: Order) -> None:
    if is_staff_user(user):
        return
    owner = order.owner
    if owner is None or owner.pk != user.pk:
        raise PermissionDenied("You do not have access to this order")


def payment_queryset():
    return Payment.objects.select_related("order__customer__user", "order__created_by", "processed_by")


class PaymentPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100


class PaymentListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsStaff]
    required_capability = CAP_PAYMENTS_RECORD

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), HasCapability()]
        return super().get_permissions()

    @extend_schema(
        parameters=[
            OpenApiParameter("order", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("method", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: PaymentSerializer(many=True)},
    )
    def get(self, request):
        qs = payment_queryset()
        params = request.query_params
        if params.get("order"):
            try:
                qs = qs.filter(order_id=uuid.UUID(params["order"]))
            except ValueError:
                return Response({"detail": "Invalid order id"}, status=status.HTTP_400_BAD_REQUEST)
        if params.get("method"):
            qs = qs.filter(payment_method=params["method"])
        if params.get("status"):
            qs = qs.filter(payment_status=params["status"])

        paginator = PaymentPagination()
        page = paginator.paginate_queryset(qs.order_by("-created_at"), request, view=self)
        return paginator.get_paginated_response(PaymentSerializer(page, many=True).data)

    @extend_schema(
        request=ManualPaymentSerializer,
        responses={
            201: PaymentSerializer,
            400: OpenApiResponse(description="Validation error"),
            404: OpenApiResponse(description="Order not found"),
        },
    )
    def post(self, request):
        serializer = ManualPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            payment, _ = apply_payment(
                order_id=data["order_id"],
                amount=data["amount"],
                method=data["payment_method"],
                actor=request.user,
                transaction_id=data.get("transaction_id", ""),
                notes=data.get("notes", ""),
            )
        except OrderNotFoundError:
            return Response({"detail": "Order not found"}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPaymentAmountError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        order = Order.objects.get(pk=payment.order_id)
        return Response(
            {
                "message": "Payment recorded successfully",
                "payment": PaymentSerializer(payment).data,
                "order": OrderSerializer(order).data,
            },
            status=status.HTTP_201_CREATED,
        )


class PaymentDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: PaymentSerializer, 404: OpenApiResponse(description="Not found")})
    def get(self, request, pk):
        payment = get_object_or_404(payment_queryset(), pk=pk)
        ensure_order_access(request.user, payment.order)
        return Response(PaymentSerializer(payment).data)


class OrderPaymentsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: PaymentSerializer(many=True)})
    def get(self, request, order_id):
        order = get_object_or_404(Order.objects.select_related("customer__user", "created_by"), pk=order_id)
        ensure_order_access(request.user, order)

        payments = payment_queryset().filter(order=order).order_by("-created_at")
        return Response({"payments": PaymentSerializer(payments, many=True).data})
