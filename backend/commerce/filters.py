import django_filters

from common.filters import DateOrDateTimeFilter

from .models import Order, OrderStatus


class OrderFilter(django_filters.FilterSet):
    """
    Query params:
      - status
      - customer_id
      - from_date, to_date (ISO date or datetime, inclusive; a bare date covers the whole day)
    """
    status = django_filters.ChoiceFilter(field_name="status", choices=OrderStatus.choices)
    customer_id = django_filters.UUIDFilter(field_name="customer_id")
    from_date = DateOrDateTimeFilter(field_name="created_at", lookup_expr="gte")
    to_date = DateOrDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "customer_id", "from_date", "to_date"]
