# orders/views/tracking.py
"""
PUBLIC ORDER TRACKING

GET  /api/track/<barcode>/   customer-safe order projection (case-insensitive)
POST /api/track/search/      {"phone_number": "..."} -> recent orders, first names only

Rules:
- AllowAny, throttled (scope "public_track")
- 404 bodies never reveal whether anything else exists
- no phone, address, staff or actor data in responses
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from orders.models import Order
from orders.serializers import TrackingOrderSerializer, TrackingSearchSerializer

SEARCH_LIMIT = 10


class PublicTrackThrottle(AnonRateThrottle):
    scope = "public_track"


class TrackOrderView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicTrackThrottle]

    @extend_schema(
        tags=["Public"],
        responses={
            200: TrackingOrderSerializer,
            404: OpenApiResponse(description="Order not found"),
            429: OpenApiResponse(description="Rate limited"),
        },
    )
    def get(self, request, barcode, *args, **kwargs):
        order = (
            Order.objects.prefetch_related("status_history")
            .filter(barcode=(barcode or "").strip().upper())
            .first()
        )
        if order is None:
            return Response({"detail": "Order not found"}, status=status.HTTP_404_NOT_FOUND)

        return Response({"order": TrackingOrderSerializer(order).data})


class TrackSearchView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [PublicTrackThrottle]

    @extend_schema(
        tags=["Public"],
        request=TrackingSearchSerializer,
        responses={
            200: OpenApiResponse(description="Matching orders (first names only)"),
            400: OpenApiResponse(description="Phone number is required"),
            404: OpenApiResponse(description="No orders found"),
        },
    )
    def post(self, request, *args, **kwargs):
        serializer = TrackingSearchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        phone = serializer.validated_data["phone_number"].strip()

        orders = Order.objects.filter(phone_number=phone).order_by("-created_at")[:SEARCH_LIMIT]
        results = [
            {
                "barcode": order.barcode,
                "customer_name": (order.customer_name.split() or [""])[0],
                "cloth_type": order.cloth_type or (order.items[0]["cloth_type"] if order.items else ""),
                "status": order.status,
                "status_label": order.status_label,
                "expected_delivery_date": order.due_date,
                "created_at": order.created_at,
            }
            for order in orders
        ]

        if not results:
            return Response(
                {"detail": "No orders found for this phone number"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({"orders": results})
