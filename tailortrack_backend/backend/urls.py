# backend/urls.py
"""
PROJECT URLS

All API routes live under /api/

Public (AllowAny):
- /api/track/...             order tracking by barcode / phone
- /api/payments/webhook/     gateway callbacks (signature checked)
- /api/health/               DB connectivity probe

Security hardening:
- Django admin path is configurable via env var (ADMIN_PATH)
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import DatabaseError, connections
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from notifications.services.email import email_configured
from notifications.services.sms import sms_configured
from payments.services import razorpay


# ------------------ API ROOT (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "message": {"type": "string"},
                "auth": {"type": "object"},
                "docs": {"type": "object"},
                "modules": {"type": "object"},
            },
        }
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "TailorTrack API is running",
            "auth": {
                "register": "/api/auth/register/",
                "login": "/api/auth/login/",
                "me": "/api/auth/me/",
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {
                "swagger": "/api/docs/",
                "schema": "/api/schema/",
            },
            "modules": {
                "customers": "/api/customers/",
                "orders": "/api/orders/",
                "admin_orders": "/api/admin/orders/",
                "track": "/api/track/",
                "payments": "/api/payments/",
                "notifications": "/api/notifications/",
                "analytics": "/api/analytics/",
            },
        }
    )


# ------------------ HEALTH CHECK (PUBLIC) ------------------
def _providers() -> dict:
    return {
        "sms": sms_configured(),
        "email": email_configured(),
        "payments": bool(razorpay.key_id()),
    }


@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "providers": {"type": "object"},
            },
        },
        503: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "error": {"type": "string"},
            },
        },
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    DB round trip plus which outbound providers have credentials.
    Missing providers do not degrade the status; sends are skipped.
    """
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except DatabaseError as e:
        return Response({"status": "degraded", "db": "down", "error": str(e)}, status=503)

    return Response({"status": "ok", "db": "ok", "providers": _providers()})


# ------------------ ADMIN PATH (HARDENED) ------------------
# Keep the trailing slash; do not publish a non-default value.
ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/) ------------------
api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    # OpenAPI / Swagger
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # JWT (SimpleJWT)
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    # Auth & Users
    path("auth/", include("users.urls")),
    # Shop
    path("customers/", include("customers.urls")),
    path("orders/", include("orders.urls")),
    path("admin/orders/", include("orders.admin_urls")),
    path("track/", include("orders.tracking_urls")),
    path("payments/", include("payments.urls")),
    path("notifications/", include("notifications.urls")),
    path("analytics/", include("analytics.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
