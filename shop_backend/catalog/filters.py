# catalog/filters.py

import django_filters
from django.db.models import Q

from catalog.models import Product


class ProductFilter(django_filters.FilterSet):
    """
    ?category=<name>  exact (case-insensitive) category match
    ?search=<text>    name / description / category contains
    """

    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    availability = django_filters.ChoiceFilter(choices=Product.Availability.choices)
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Product
        fields = ["category", "availability", "search"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(category__icontains=value)
        )
