import django_filters
from django.db.models import Q

from .models import Order
from .status import parse_status


class OrderFilter(django_filters.FilterSet):
    """
    Admin order list filters.

    Unknown status values are ignored; ``is_paid``/``is_delivered`` compare
    against the literal ``true``; the date range applies only when both ends
    are given.
    """
    status = django_filters.CharFilter(method='filter_status')
    is_paid = django_filters.CharFilter(method='filter_flag')
    is_delivered = django_filters.CharFilter(method='filter_flag')
    start_date = django_filters.DateFilter(method='filter_date_range')
    end_date = django_filters.DateFilter(method='filter_noop')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Order
        fields = ['status', 'is_paid', 'is_delivered', 'start_date', 'end_date', 'search']

    def filter_status(self, queryset, name, value):
        status = parse_status(value)
        if status is None:
            return queryset
        return queryset.filter(order_status=status.value)

    def filter_flag(self, queryset, name, value):
        return queryset.filter(**{name: value == 'true'})

    def filter_date_range(self, queryset, name, value):
        end_date = self.form.cleaned_data.get('end_date')
        if not end_date:
            return queryset
        return queryset.filter(created_at__date__gte=value, created_at__date__lte=end_date)

    def filter_noop(self, queryset, name, value):
        return queryset

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(full_name__icontains=value) |
            Q(address__icontains=value) |
            Q(order_status__icontains=value)
        )
