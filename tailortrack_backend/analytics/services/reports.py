# analytics/services/reports.py
"""
BACK-OFFICE REPORTS (read only)

- revenue = sum of COMPLETED payments (not order amounts)
- outstanding = sum of balance_amount over pending/partial orders
- date ranges are local calendar days, both ends inclusive
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.db.models import Avg, Count, Sum
from django.db.models.functions import TruncDate, TruncMonth
from django.utils import timezone

from customers.models import Customer
from orders.models import Order
from orders.services.pricing import PAYMENT_PARTIAL, PAYMENT_PENDING
from payments.models import Payment

TOP_CUSTOMERS_LIMIT = 10
RECENT_ORDERS_LIMIT = 10
REVENUE_MONTHS = 6

PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}


def money_str(x) -> str:
    if x is None:
        return "0.00"
    return f"{Decimal(str(x)):.2f}"


def day_start(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.min), timezone.get_current_timezone())


def _range_filter(field: str, start: date | None, end: date | None) -> dict:
    out = {}
    if start:
        out[f"{field}__gte"] = day_start(start)
    if end:
        out[f"{field}__lt"] = day_start(end + timedelta(days=1))
    return out


def _months_back(today: date, months: int) -> date:
    year, month = today.year, today.month - months
    while month <= 0:
        month += 12
        year -= 1
    return date(year, month, 1)


def dashboard_report(*, start: date | None = None, end: date | None = None) -> dict:
    orders = Order.objects.filter(**_range_filter("created_at", start, end))
    completed = Payment.objects.filter(
        payment_status=Payment.STATUS_COMPLETED,
        **_range_filter("created_at", start, end),
    )

    orders_by_status = [
        {"status": row["status"], "count": row["count"]}
        for row in orders.values("status").annotate(count=Count("id")).order_by("status")
    ]

    total_revenue = completed.aggregate(total=Sum("amount"))["total"]
    total_pending = orders.filter(payment_status__in=[PAYMENT_PENDING, PAYMENT_PARTIAL]).aggregate(
        total=Sum("balance_amount")
    )["total"]

    since = day_start(_months_back(timezone.localdate(), REVENUE_MONTHS))
    revenue_by_month = [
        {
            "month": row["month"].strftime("%Y-%m"),
            "revenue": money_str(row["revenue"]),
            "count": row["count"],
        }
        for row in Payment.objects.filter(payment_status=Payment.STATUS_COMPLETED, created_at__gte=since)
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(revenue=Sum("amount"), count=Count("id"))
        .order_by("month")
    ]

    top_customers = [
        {
            "id": str(c.id),
            "name": c.name,
            "phone": c.phone,
            "total_orders": c.total_orders,
            "total_spent": money_str(c.total_spent),
        }
        for c in Customer.objects.filter(is_active=True).order_by("-total_spent")[:TOP_CUSTOMERS_LIMIT]
    ]

    payment_methods = [
        {"method": row["payment_method"], "count": row["count"], "total": money_str(row["total"])}
        for row in completed.values("payment_method")
        .annotate(count=Count("id"), total=Sum("amount"))
        .order_by("payment_method")
    ]

    recent_orders = [
        {
            "id": str(o.id),
            "order_number": o.order_number,
            "barcode": o.barcode,
            "customer_name": o.customer_name,
            "status": o.status,
            "amount": money_str(o.amount),
            "payment_status": o.payment_status,
            "created_at": o.created_at,
        }
        for o in orders.order_by("-created_at")[:RECENT_ORDERS_LIMIT]
    ]

    return {
        "summary": {
            "total_orders": orders.count(),
            "total_revenue": money_str(total_revenue),
            "total_pending": money_str(total_pending),
            "total_customers": Customer.objects.filter(is_active=True).count(),
        },
        "orders_by_status": orders_by_status,
        "revenue_by_month": revenue_by_month,
        "top_customers": top_customers,
        "payment_methods": payment_methods,
        "recent_orders": recent_orders,
    }


def revenue_series(*, period: str = "month") -> list[dict]:
    """
    Completed-payment revenue per day (week/month) or per month (year).
    """
    days = PERIOD_DAYS.get(period, PERIOD_DAYS["month"])
    since = day_start(timezone.localdate() - timedelta(days=days))
    bucket = TruncMonth("created_at") if period == "year" else TruncDate("created_at")
    fmt = "%Y-%m" if period == "year" else "%Y-%m-%d"

    rows = (
        Payment.objects.filter(payment_status=Payment.STATUS_COMPLETED, created_at__gte=since)
        .annotate(bucket=bucket)
        .values("bucket")
        .annotate(revenue=Sum("amount"), count=Count("id"))
        .order_by("bucket")
    )
    return [
        {"period": row["bucket"].strftime(fmt), "revenue": money_str(row["revenue"]), "count": row["count"]}
        for row in rows
    ]


def order_stats() -> dict:
    by_status = [
        {"status": row["status"], "count": row["count"]}
        for row in Order.objects.values("status").annotate(count=Count("id")).order_by("status")
    ]
    by_month = [
        {"month": row["month"].strftime("%Y-%m"), "count": row["count"]}
        for row in Order.objects.annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(count=Count("id"))
        .order_by("month")
    ]
    avg_value = Order.objects.aggregate(avg=Avg("amount"))["avg"]
    return {
        "by_status": by_status,
        "by_month": by_month,
        "avg_order_value": money_str(avg_value),
    }
