import django_filters
from django.db.models import Q

from .models import Product

SORT_ORDERS = {
    'price_asc': ('price', '-created_at'),
    'price_desc': ('-price', '-created_at'),
    'newest': ('-created_at', '-id'),
    'oldest': ('created_at', 'id'),
}


class ProductFilter(django_filters.FilterSet):
    """
    Storefront product filters.

    Color and fabric type only narrow the list when the category filter is
    ``fabric``; unknown sort keys fall back to newest first.
    """
    category = django_filters.ChoiceFilter(choices=Product.CATEGORY_CHOICES)
    color = django_filters.CharFilter(method='filter_fabric_attribute')
    fabric_type = django_filters.CharFilter(method='filter_fabric_attribute')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    search = django_filters.CharFilter(method='filter_search')
    sort = django_filters.CharFilter(method='filter_sort')

    class Meta:
        model = Product
        fields = ['category', 'color', 'fabric_type', 'min_price', 'max_price', 'search', 'sort', 'featured']

    def filter_fabric_attribute(self, queryset, name, value):
        if self.data.get('category') != Product.CATEGORY_FABRIC:
            return queryset
        return queryset.filter(**{f'{name}__icontains': value})

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(description__icontains=value) |
            Q(color__icontains=value) |
            Q(fabric_type__icontains=value)
        )

    def filter_sort(self, queryset, name, value):
        return queryset.order_by(*SORT_ORDERS.get(value, SORT_ORDERS['newest']))
