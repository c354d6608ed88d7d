import django_filters
from django.db.models import Q

from .models import Product


class ProductFilter(django_filters.FilterSet):
    """
    Query params:
      - category_id
      - is_published (true/false)
      - low_stock=true → stock at or below min_stock
      - search (name/description, case-insensitive)
    """
    category_id = django_filters.UUIDFilter(field_name="category_id")
    is_published = django_filters.BooleanFilter(field_name="is_published")
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Product
        fields = ["category_id", "is_published", "low_stock", "search"]

    def filter_low_stock(self, queryset, name, value):
        return queryset.low_stock() if value else queryset

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(description__icontains=value))
