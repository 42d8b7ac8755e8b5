# orders/views/admin_orders.py

"""
BACK-OFFICE ORDERS (/api/admin/orders/)

Staff only (capability based):
- create with denormalised customer fields (multi-item or single garment)
- list with ?search= ?status= ?sort_by= ?sort_order=
- PATCH partial edit (status change => history + SMS), PUT edit (status ignored)
- PATCH {id}/status/, DELETE
- GET stats/dashboard/
- POST {id}/resend-sms/ (synchronous, reports the provider result)
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, time

from django.db.models import Count, Sum
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from notifications.services.dispatch import resend_tracking_sms
from orders.models import Order
from orders.serializers import OrderSerializer
from orders.services.pricing import money
from orders.views.orders import OrderViewSet, order_queryset
from permissions.roles import CAP_ORDERS_MANAGE, CAP_ORDERS_STATUS, HasCapability

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
    "due_date": "due_date",
    "dueDate": "due_date",
    "expectedDeliveryDate": "due_date",
    "amount": "amount",
    "status": "status",
    "customer_name": "customer_name",
    "customerName": "customer_name",
    "order_number": "order_number",
    "orderNumber": "order_number",
}

RECENT_ORDERS_LIMIT = 10


def _sort_key(params) -> str:
    field = SORTABLE_FIELDS.get(params.get("sort_by") or params.get("sortBy") or "", "created_at")
    direction = (params.get("sort_order") or params.get("sortOrder") or "desc").lower()
    return field if direction == "asc" else f"-{field}"


class AdminOrderViewSet(OrderViewSet):
    permission_classes = [IsAuthenticated, HasCapability]

    def get_permissions(self):
        return [IsAuthenticated(), HasCapability()]

    @property
    def required_capability(self):
        if self.action == "set_status":
            return CAP_ORDERS_STATUS
        return CAP_ORDERS_MANAGE

    def get_queryset(self):
        qs = order_queryset()
        if self.action == "list":
            return qs.order_by(_sort_key(self.request.query_params))
        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("sort_by", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("sort_order", str, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    # -----------------------------
    # Dashboard
    # -----------------------------
    @extend_schema(responses={200: OpenApiResponse(description="Back-office dashboard numbers")})
    @action(detail=False, methods=["get"], url_path="stats/dashboard")
    def dashboard(self, request):
        orders = Order.objects.all()

        by_status = {
            row["status"]: row["count"]
            for row in orders.values("status").annotate(count=Count("id")).order_by()
        }

        totals = orders.aggregate(
            total=Sum("amount"),
            collected=Sum("advance_amount"),
            pending=Sum("balance_amount"),
        )
        revenue = {key: str(money(value)) for key, value in totals.items()}

        start_of_day = timezone.make_aware(
            datetime.combine(timezone.localdate(), time.min),
            timezone.get_current_timezone(),
        )

        recent = order_queryset().order_by("-created_at")[:RECENT_ORDERS_LIMIT]

        return Response(
            {
                "stats": {
                    "totalOrders": orders.count(),
                    "ordersByStatus": by_status,
                    "revenue": revenue,
                    "recentOrders": OrderSerializer(recent, many=True).data,
                    "todayOrders": orders.filter(created_at__gte=start_of_day).count(),
                }
            }
        )

    # -----------------------------
    # SMS
    # -----------------------------
    @extend_schema(
        request=None,
        responses={
            200: OpenApiResponse(description="SMS accepted by the provider"),
            500: OpenApiResponse(description="Provider rejected or not configured"),
        },
    )
    @action(detail=True, methods=["post"], url_path="resend-sms")
    def resend_sms(self, request, pk=None):
        order = self.get_object()
        result = resend_tracking_sms(order)

        if not result.ok:
            logger.warning(
                "Tracking SMS resend failed",
                extra={"order_id": str(order.id), "detail": result.detail},
            )
            return Response(
                {"detail": "Failed to send SMS", "result": asdict(result)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"message": "SMS sent successfully", "result": asdict(result)})
