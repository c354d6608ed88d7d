import django_filters

from common.filters import DateOrDateTimeFilter

from .models import AuditLog


class AuditLogFilter(django_filters.FilterSet):
    """
    Query params:
      - action (case-insensitive substring)
      - resource (exact)
      - user_id
      - from_date, to_date (ISO date or datetime, inclusive; a bare date covers the whole day)
    """
    action = django_filters.CharFilter(field_name="action", lookup_expr="icontains")
    resource = django_filters.CharFilter(field_name="resource", lookup_expr="exact")
    user_id = django_filters.UUIDFilter(field_name="user_id")
    from_date = DateOrDateTimeFilter(field_name="created_at", lookup_expr="gte")
    to_date = DateOrDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = AuditLog
        fields = ["action", "resource", "user_id", "from_date", "to_date"]
