# analytics/views.py

"""
ANALYTICS (staff)

GET /api/analytics/dashboard/?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD
GET /api/analytics/revenue/?period=week|month|year
GET /api/analytics/orders/
"""

from __future__ import annotations

from datetime import datetime

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from analytics.services.reports import PERIOD_DAYS, dashboard_report, order_stats, revenue_series
from permissions.roles import CAP_ANALYTICS_VIEW, HasCapability


def _parse_date(value: str | None):
    """
    Accepts YYYY-MM-DD. Returns (date | None, ok).
    """
    if not value:
        return None, True
    try:
        return datetime.strptime(value, "%Y-%m-%d").date(), True
    except ValueError:
        return None, False


class AnalyticsDashboardView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ANALYTICS_VIEW

    @extend_schema(
        parameters=[
            OpenApiParameter("start_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("end_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
        ]
    )
    def get(self, request):
        params = request.query_params
        start, ok_start = _parse_date(params.get("start_date") or params.get("startDate"))
        end, ok_end = _parse_date(params.get("end_date") or params.get("endDate"))

        if not (ok_start and ok_end):
            return Response(
                {"detail": "Invalid date format. Use YYYY-MM-DD."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if start and end and start > end:
            return Response(
                {"detail": "start_date must be on or before end_date"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(dashboard_report(start=start, end=end))


class RevenueView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ANALYTICS_VIEW

    @extend_schema(
        parameters=[OpenApiParameter("period", str, OpenApiParameter.QUERY, required=False, enum=list(PERIOD_DAYS))]
    )
    def get(self, request):
        period = (request.query_params.get("period") or "month").lower()
        if period not in PERIOD_DAYS:
            return Response({"detail": "period must be week, month or year"}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"period": period, "revenue": revenue_series(period=period)})


class OrderStatsView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ANALYTICS_VIEW

    def get(self, request):
        return Response(order_stats())
