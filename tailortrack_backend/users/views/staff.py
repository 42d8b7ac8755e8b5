# users/views/staff.py
"""
STAFF ACCOUNTS (ADMIN ONLY)

- GET  /api/auth/staff/  list back office accounts
- POST /api/auth/staff/  create an admin/staff account
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_STAFF_MANAGE, STAFF_ROLES, HasCapability
from users.serializers import StaffCreateSerializer, UserSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class StaffListCreateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STAFF_MANAGE

    @extend_schema(responses={200: UserSerializer(many=True)})
    def get(self, request):
        qs = User.objects.filter(role__in=STAFF_ROLES).order_by("-created_at")
        return Response(UserSerializer(qs, many=True).data)

    @extend_schema(request=StaffCreateSerializer, responses={201: UserSerializer})
    def post(self, request):
        serializer = StaffCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(
            "Staff account created",
            extra={"user_id": str(user.id), "created_by": str(request.user.id)},
        )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
