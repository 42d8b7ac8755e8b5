# analytics/urls.py

from django.urls import path

from analytics.views import AnalyticsDashboardView, OrderStatsView, RevenueView

app_name = "analytics"

urlpatterns = [
    path("dashboard/", AnalyticsDashboardView.as_view(), name="dashboard"),
    path("revenue/", RevenueView.as_view(), name="revenue"),
    path("orders/", OrderStatsView.as_view(), name="orders"),
]
