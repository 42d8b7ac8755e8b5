# orders/views/orders.py

"""
ORDER VIEWSET (/api/orders/)

Customers:
- list / retrieve their own orders
- create orders for themselves (a Customer row is created on first order)
- pickup a ready, paid order

Staff:
- everything above for any order
- PUT edits, DELETE, status changes

Images:
- GET {id}/barcode/  Code128 PNG of the barcode
- GET {id}/qrcode/   QR PNG of the tracking link
"""

from __future__ import annotations

import logging

from django.db.models import Q
from django.http import HttpResponse
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from customers.services.profiles import ensure_customer_for_user
from orders.filters import OrderFilter
from orders.models import Order
from orders.pagination import OrderPagination
from orders.serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    OrderUpdateSerializer,
    StatusUpdateSerializer,
)
from orders.services.creation import apply_order_edits, create_order
from orders.services.exceptions import (
    IdentifierGenerationError,
    OrderNotReadyError,
    PaymentRequiredError,
)
from orders.services.imaging import render_barcode_png, render_qr_png
from orders.services.status import change_status, mark_picked_up
from permissions.roles import IsOwnerOrStaff, IsStaff, is_staff_user

logger = logging.getLogger(__name__)


def order_queryset():
    return Order.objects.select_related("customer", "created_by").prefetch_related(
        "status_history__changed_by"
    )


def identifier_failure_response():
    return Response(
        {"detail": "Failed to generate unique barcode"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class OrderViewSet(viewsets.ModelViewSet):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrStaff]
    pagination_class = OrderPagination
    filterset_class = OrderFilter
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    STAFF_ONLY_ACTIONS = {"update", "partial_update", "destroy", "set_status"}

    def get_permissions(self):
        if self.action in self.STAFF_ONLY_ACTIONS:
            return [IsAuthenticated(), IsStaff()]
        return super().get_permissions()

    @staticmethod
    def owner_of(order):
        return order.owner

    def get_queryset(self):
        qs = order_queryset()
        user = self.request.user
        if self.action == "list" and not is_staff_user(user):
            qs = qs.filter(Q(customer__user=user) | Q(created_by=user))
        return qs.order_by("-created_at")

    # -----------------------------
    # Create
    # -----------------------------
    @extend_schema(
        request=OrderCreateSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(description="Validation error"),
            500: OpenApiResponse(description="Identifier generation failed"),
        },
    )
    def create(self, request, *args, **kwargs):
        user = request.user
        staff = is_staff_user(user)

        customer = None if staff else ensure_customer_for_user(user)
        serializer = OrderCreateSerializer(data=request.data, context={"customer": customer})
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        if staff:
            customer = data.pop("customer", None)
        else:
            data.pop("customer", None)
            # customers cannot record their own deposit
            data.pop("advance_amount", None)

        try:
            order = create_order(data=data, actor=user, customer=customer)
        except IdentifierGenerationError:
            logger.exception("Order identifier generation failed")
            return identifier_failure_response()

        return Response(
            {
                "message": "Order created successfully",
                "order": OrderSerializer(order_queryset().get(pk=order.pk)).data,
            },
            status=status.HTTP_201_CREATED,
        )

    # -----------------------------
    # Staff edits
    # -----------------------------
    @extend_schema(request=OrderUpdateSerializer, responses={200: OrderSerializer})
    def update(self, request, *args, **kwargs):
        order = self.get_object()
        partial = kwargs.pop("partial", False)

        serializer = OrderUpdateSerializer(order, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        new_status = data.pop("status", None)
        apply_order_edits(order=order, data=data, actor=request.user, merge_measurements=partial)
        if partial and new_status:
            change_status(order=order, status=new_status, actor=request.user)

        return Response(
            {
                "message": "Order updated successfully",
                "order": OrderSerializer(order_queryset().get(pk=order.pk)).data,
            }
        )

    def destroy(self, request, *args, **kwargs):
        order = self.get_object()
        if order.payments.exists():
            return Response(
                {"detail": "Orders with recorded payments cannot be deleted"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info("Order deleted", extra={"order_id": str(order.id), "barcode": order.barcode})
        order.delete()
        return Response({"message": "Order deleted successfully"}, status=status.HTTP_200_OK)

    # -----------------------------
    # Workflow
    # -----------------------------
    @extend_schema(request=StatusUpdateSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request, pk=None):
        order = self.get_object()

        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        change_status(
            order=order,
            status=serializer.validated_data["status"],
            actor=request.user,
            note=serializer.validated_data.get("note", ""),
        )
        return Response(
            {
                "message": "Status updated successfully",
                "order": OrderSerializer(order_queryset().get(pk=order.pk)).data,
            }
        )

    @extend_schema(
        request=None,
        responses={200: OrderSerializer, 400: OpenApiResponse(description="Not ready or unpaid")},
    )
    @action(detail=True, methods=["patch"], url_path="pickup")
    def pickup(self, request, pk=None):
        order = self.get_object()

        try:
            mark_picked_up(order=order, actor=request.user)
        except (OrderNotReadyError, PaymentRequiredError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "message": "Order marked as picked up",
                "order": OrderSerializer(order_queryset().get(pk=order.pk)).data,
            }
        )

    # -----------------------------
    # Images
    # -----------------------------
    @extend_schema(responses={(200, "image/png"): OpenApiResponse(description="Code128 PNG")})
    @action(detail=True, methods=["get"], url_path="barcode")
    def barcode(self, request, pk=None):
        order = self.get_object()
        return HttpResponse(render_barcode_png(order.barcode), content_type="image/png")

    @extend_schema(responses={(200, "image/png"): OpenApiResponse(description="QR PNG")})
    @action(detail=True, methods=["get"], url_path="qrcode")
    def qrcode(self, request, pk=None):
        order = self.get_object()
        return HttpResponse(render_qr_png(order.tracking_link), content_type="image/png")

