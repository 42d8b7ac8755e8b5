# notifications/views.py
"""
NOTIFICATIONS (recipient scoped)

- GET    /api/notifications/?unread_only=true
- GET    /api/notifications/unread-count/
- PATCH  /api/notifications/<id>/read/
- PATCH  /api/notifications/mark-all-read/
- DELETE /api/notifications/<id>/
- POST   /api/notifications/broadcast/   (admin capability)
"""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from notifications.models import Notification
from notifications.serializers import BroadcastSerializer, NotificationSerializer
from notifications.services.inbox import broadcast, mark_all_read, mark_read, unread_count
from permissions.roles import CAP_NOTIFICATIONS_BROADCAST, HasCapability

logger = logging.getLogger(__name__)


class NotificationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100


class NotificationListView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter("unread_only", bool, OpenApiParameter.QUERY, required=False)],
        responses={200: NotificationSerializer(many=True)},
    )
    def get(self, request):
        qs = Notification.objects.filter(recipient=request.user).select_related("order")
        if (request.query_params.get("unread_only") or "").lower() in ("1", "true", "yes"):
            qs = qs.filter(is_read=False)

        paginator = NotificationPagination()
        page = paginator.paginate_queryset(qs.order_by("-created_at"), request, view=self)
        response = paginator.get_paginated_response(NotificationSerializer(page, many=True).data)
        response.data["unread_count"] = unread_count(request.user)
        return response


class UnreadCountView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OpenApiResponse(description="{'unread_count': int}")})
    def get(self, request):
        return Response({"unread_count": unread_count(request.user)})


class NotificationReadView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: NotificationSerializer})
    def patch(self, request, pk):
        notification = get_object_or_404(Notification, pk=pk, recipient=request.user)
        mark_read(notification)
        return Response(NotificationSerializer(notification).data)


class MarkAllReadView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: OpenApiResponse(description="{'updated': int}")})
    def patch(self, request):
        updated = mark_all_read(request.user)
        return Response({"message": "All notifications marked as read", "updated": updated})


class NotificationDeleteView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        notification = get_object_or_404(Notification, pk=pk, recipient=request.user)
        notification.delete()
        return Response({"message": "Notification deleted"}, status=status.HTTP_200_OK)


class BroadcastView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_NOTIFICATIONS_BROADCAST

    @extend_schema(
        request=BroadcastSerializer,
        responses={201: OpenApiResponse(description="{'recipients': int}")},
    )
    def post(self, request):
        serializer = BroadcastSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        recipients = broadcast(
            title=serializer.validated_data["title"],
            message=serializer.validated_data["message"],
            actor=request.user,
        )

        logger.info(
            "Broadcast sent",
            extra={"sent_by": str(request.user.id), "recipients": recipients},
        )
        return Response(
            {"message": f"Notification sent to {recipients} customers", "recipients": recipients},
            status=status.HTTP_201_CREATED,
        )
