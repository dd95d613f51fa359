# support/filters.py

import django_filters

from support.models import Message


class MessageFilter(django_filters.FilterSet):
    """
    ?status=<status>  ?priority=<priority>  ?order_id=<uuid>  ?unread=true
    """

    status = django_filters.ChoiceFilter(choices=Message.STATUS_CHOICES)
    priority = django_filters.ChoiceFilter(choices=Message.PRIORITY_CHOICES)
    order_id = django_filters.UUIDFilter(field_name="order_id")
    unread = django_filters.BooleanFilter(field_name="read_at", lookup_expr="isnull")

    class Meta:
        model = Message
        fields = ["status", "priority", "order_id", "unread"]
