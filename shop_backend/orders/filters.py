# orders/filters.py

import django_filters
from django.db.models import Q

from orders.models import Order


class OrderFilter(django_filters.FilterSet):
    """
    ?status=<status>
    ?search=<text>          order number / customer email / customer name
    ?created_from=YYYY-MM-DD
    ?created_to=YYYY-MM-DD
    """

    status = django_filters.ChoiceFilter(choices=Order.STATUS_CHOICES)
    delivery_method = django_filters.CharFilter(field_name="delivery_method")
    created_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    created_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Order
        fields = ["status", "delivery_method", "created_from", "created_to", "search"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(order_no__icontains=value)
            | Q(customer_email__icontains=value)
            | Q(customer_name__icontains=value)
        )
