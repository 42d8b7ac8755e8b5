# customers/views.py

"""
CUSTOMER VIEWSET

Staff:
- CRUD (delete = soft delete)
- search by phone
- measurement update (previous profile -> history)

Customer accounts:
- /customers/me/ (read + contact update)
- retrieve own record
"""

from __future__ import annotations

import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from customers.models import Customer
from customers.serializers import (
    CustomerSelfSerializer,
    CustomerSerializer,
    MeasurementUpdateSerializer,
)
from customers.services.profiles import update_measurements
from permissions.roles import IsOwnerOrStaff, IsStaff, is_staff_user

logger = logging.getLogger(__name__)


class CustomerViewSet(viewsets.ModelViewSet):
    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated, IsStaff]

    def get_permissions(self):
        if self.action == "retrieve":
            return [IsAuthenticated(), IsOwnerOrStaff()]
        if self.action == "me":
            return [IsAuthenticated()]
        return super().get_permissions()

    @staticmethod
    def owner_of(customer):
        return customer.user

    def get_queryset(self):
        qs = Customer.objects.select_related("user").prefetch_related("measurement_history")

        if self.action != "list":
            return qs

        params = self.request.query_params
        include_inactive = (params.get("include_inactive") or "").lower() in ("1", "true", "yes")
        if not include_inactive:
            qs = qs.filter(is_active=True)

        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(name__icontains=search) | Q(phone__icontains=search) | Q(email__icontains=search)
            )
        return qs.order_by("-created_at")

    @extend_schema(
        parameters=[
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("include_inactive", bool, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer = serializer.save()

        logger.info("Customer created", extra={"customer_id": str(customer.id)})
        return Response(
            {"customer": CustomerSerializer(customer).data, "message": "Customer created successfully"},
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, *args, **kwargs):
        customer = self.get_object()
        customer.is_active = False
        customer.save(update_fields=["is_active", "updated_at"])

        logger.info("Customer deactivated", extra={"customer_id": str(customer.id)})
        return Response({"message": "Customer deleted successfully"}, status=status.HTTP_200_OK)

    # -----------------------------
    # Customer self-service
    # -----------------------------
    @extend_schema(
        request=CustomerSelfSerializer,
        responses={200: CustomerSerializer, 404: OpenApiResponse(description="No customer profile")},
    )
    @action(detail=False, methods=["get", "put", "patch"], url_path="me")
    def me(self, request):
        customer = Customer.objects.filter(user=request.user).first()
        if customer is None:
            return Response(
                {"detail": "Customer profile not found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        if request.method == "GET":
            return Response(CustomerSerializer(customer).data)

        serializer = CustomerSelfSerializer(
            customer, data=request.data, partial=request.method == "PATCH"
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(
            {"customer": serializer.data, "message": "Profile updated successfully"}
        )

    # -----------------------------
    # Staff helpers
    # -----------------------------
    @extend_schema(responses={200: CustomerSerializer, 404: OpenApiResponse(description="Not found")})
    @action(detail=False, methods=["get"], url_path=r"search/phone/(?P<phone>[^/]+)")
    def search_phone(self, request, phone=None):
        customer = get_object_or_404(Customer, phone=(phone or "").strip(), is_active=True)
        return Response(CustomerSerializer(customer).data)

    @extend_schema(request=MeasurementUpdateSerializer, responses={200: CustomerSerializer})
    @action(detail=True, methods=["patch"], url_path="measurements")
    def measurements(self, request, pk=None):
        customer = self.get_object()

        serializer = MeasurementUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer = update_measurements(
            customer=customer,
            measurements=serializer.validated_data["measurements"],
            actor=request.user if is_staff_user(request.user) else None,
            notes=serializer.validated_data.get("notes", ""),
        )
        customer = self.get_queryset().get(pk=customer.pk)
        return Response(
            {"customer": CustomerSerializer(customer).data, "message": "Measurements updated successfully"}
        )
