# orders/filters.py

import django_filters
from django.db.models import Q

from orders.models import Order


class OrderFilter(django_filters.FilterSet):
    """
    ?search=  barcode / order number / customer name / phone (icontains)
    ?status=  canonical or legacy name; "all" disables the filter
    ?payment_status=, ?created_from=, ?created_to=
    """

    search = django_filters.CharFilter(method="filter_search")
    status = django_filters.CharFilter(method="filter_status")
    payment_status = django_filters.ChoiceFilter(choices=Order.PAYMENT_STATUS_CHOICES)
    created_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    created_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["search", "status", "payment_status", "customer"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(barcode__icontains=value)
            | Q(order_number__icontains=value)
            | Q(customer_name__icontains=value)
            | Q(phone_number__icontains=value)
        )

    def filter_status(self, queryset, name, value):
        value = (value or "").strip().lower()
        if not value or value == "all":
            return queryset
        return queryset.filter(status=Order.normalize_status(value) or value)
