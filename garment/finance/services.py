"""
Finance dashboard figures built from orders and payroll.

Revenue comes from order totals; expenses are employee net salaries.
All results are plain dicts of floats so they can be cached and rendered
as-is.
"""
import logging
from collections import defaultdict
from datetime import datetime, time, timedelta

from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_date

from garment.core.cache_utils import cached_query, FINANCE_CACHE_TTL, FINANCE_CACHE_PREFIX
from garment.core.exceptions import DomainError
from garment.employees.models import Employee, SalaryRecord
from garment.orders.models import Order
from garment.orders.status import OrderStatus

logger = logging.getLogger('garment.finance')

KPI_PERIOD_DAYS = 30
MONTHS_IN_TREND = 12


def percentage(part, whole):
    """``part`` as a percentage of ``whole`` rounded to 2 places; 0 when ``whole`` is 0"""
    if not whole:
        return 0
    return round(part / whole * 100, 2)


def growth(current, previous):
    """Period-over-period growth; 100 when there is nothing to compare against"""
    if not previous:
        return 100
    return round((current - previous) / previous * 100, 2)


def parse_period(start_value=None, end_value=None):
    """Optional inclusive ``YYYY-MM-DD`` bounds; malformed values raise ``DomainError``"""
    try:
        start_date = parse_date(start_value) if start_value else None
        end_date = parse_date(end_value) if end_value else None
    except ValueError:
        raise DomainError('Invalid date format. Please use YYYY-MM-DD format.')
    if (start_value and start_date is None) or (end_value and end_date is None):
        raise DomainError('Invalid date format. Please use YYYY-MM-DD format.')
    return start_date, end_date


def _day_start(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def _period_filter(field, start_date, end_date):
    lookup = {}
    if start_date:
        lookup[f'{field}__gte'] = _day_start(start_date)
    if end_date:
        lookup[f'{field}__lt'] = _day_start(end_date + timedelta(days=1))
    return lookup


def order_financials(start_date=None, end_date=None):
    orders = list(
        Order.objects.filter(**_period_filter('created_at', start_date, end_date))
        .values('total_price', 'order_status', 'is_paid', 'payment_method', 'created_at')
    )

    total_potential = active = paid = delivered = cancelled = 0.0
    by_payment_method = defaultdict(float)
    by_status = defaultdict(float)
    count_by_status = defaultdict(int)
    by_month = {}

    for order in orders:
        amount = float(order['total_price'])
        order_status = order['order_status'] or 'Unknown'
        total_potential += amount
        if order_status != OrderStatus.CANCELLED.value:
            active += amount
        if order['is_paid']:
            paid += amount
        if order_status == OrderStatus.DELIVERED.value:
            delivered += amount
        if order_status == OrderStatus.CANCELLED.value:
            cancelled += amount

        by_payment_method[order['payment_method'] or 'Unknown'] += amount
        by_status[order_status] += amount
        count_by_status[order_status] += 1

        month = timezone.localtime(order['created_at']).strftime('%B %Y')
        month_totals = by_month.setdefault(month, {'total': 0.0, 'paid': 0.0, 'cancelled': 0.0})
        month_totals['total'] += amount
        if order['is_paid']:
            month_totals['paid'] += amount
        if order_status == OrderStatus.CANCELLED.value:
            month_totals['cancelled'] += amount

    order_count = len(orders)
    active_count = sum(1 for order in orders if order['order_status'] != OrderStatus.CANCELLED.value)

    return {
        'total_potential_revenue': total_potential,
        'active_revenue': active,
        'paid_revenue': paid,
        'delivered_revenue': delivered,
        'cancelled_revenue': cancelled,
        'order_count': order_count,
        'active_order_count': active_count,
        'avg_order_value': total_potential / order_count if order_count else 0,
        'revenue_by_payment_method': dict(by_payment_method),
        'monthly_revenue': by_month,
        'revenue_by_status': dict(by_status),
        'order_count_by_status': dict(count_by_status),
        'payment_summary': {
            'paid': paid,
            'unpaid': active - paid,
            'paid_percentage': percentage(paid, active),
        },
    }


def salary_financials(start_date=None, end_date=None):
    paid_employees = Employee.objects.filter(net_salary__gt=0)
    history = SalaryRecord.objects.filter(
        employee__in=paid_employees, **_period_filter('date', start_date, end_date)
    )
    total_salaries = float(history.aggregate(total=Sum('net_salary'))['total'] or 0)

    department_salaries = {
        row['department']: float(row['total'])
        for row in paid_employees.values('department').annotate(total=Sum('net_salary')).order_by('department')
    }
    employee_count = paid_employees.count()

    return {
        'total_salaries': total_salaries,
        'employee_count': employee_count,
        'avg_salary': total_salaries / employee_count if employee_count else 0,
        'department_salaries': department_salaries,
    }


@cached_query(cache_ttl=FINANCE_CACHE_TTL, key_prefix=FINANCE_CACHE_PREFIX)
def financial_summary(start_date=None, end_date=None):
    orders = order_financials(start_date, end_date)
    salaries = salary_financials(start_date, end_date)

    total_revenue = orders['total_potential_revenue']
    total_expenses = salaries['total_salaries']
    profit_loss = total_revenue - total_expenses

    return {
        'period': {
            'start_date': start_date.isoformat() if start_date else None,
            'end_date': end_date.isoformat() if end_date else None,
        },
        'orders': orders,
        'salaries': salaries,
        'overview': {
            'total_revenue': total_revenue,
            'total_expenses': total_expenses,
            'profit_loss': profit_loss,
            'profit_margin': percentage(profit_loss, total_revenue),
        },
    }


def _current_salary_expense():
    return float(Employee.objects.filter(net_salary__gt=0).aggregate(total=Sum('net_salary'))['total'] or 0)


def _month_starts(today, count):
    """First day of each of the last ``count`` calendar months, oldest first"""
    year, month = today.year, today.month
    starts = []
    for _ in range(count):
        starts.append(today.replace(year=year, month=month, day=1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(starts))


def _next_month(day):
    if day.month == 12:
        return day.replace(year=day.year + 1, month=1)
    return day.replace(month=day.month + 1)


@cached_query(cache_ttl=FINANCE_CACHE_TTL, key_prefix=FINANCE_CACHE_PREFIX)
def monthly_finance(today):
    """Revenue, expenses and profit for the last twelve calendar months"""
    expenses = _current_salary_expense()
    monthly_data = []
    for month_start in _month_starts(today, MONTHS_IN_TREND):
        orders = Order.objects.filter(
            created_at__gte=_day_start(month_start),
            created_at__lt=_day_start(_next_month(month_start)),
        )
        revenue = float(orders.aggregate(total=Sum('total_price'))['total'] or 0)
        paid_revenue = float(orders.filter(is_paid=True).aggregate(total=Sum('total_price'))['total'] or 0)
        monthly_data.append({
            'month': month_start.strftime('%b %Y'),
            'revenue': revenue,
            'paid_revenue': paid_revenue,
            'expenses': expenses,
            'profit': revenue - expenses,
            'order_count': orders.count(),
        })
    return monthly_data


@cached_query(cache_ttl=FINANCE_CACHE_TTL, key_prefix=FINANCE_CACHE_PREFIX)
def financial_kpis():
    """Last 30 days against the 30 days before"""
    now = timezone.now()
    current_start = now - timedelta(days=KPI_PERIOD_DAYS)
    previous_start = current_start - timedelta(days=KPI_PERIOD_DAYS)

    current_orders = Order.objects.filter(created_at__gte=current_start, created_at__lte=now)
    previous_orders = Order.objects.filter(created_at__gte=previous_start, created_at__lt=current_start)

    current_revenue = float(current_orders.aggregate(total=Sum('total_price'))['total'] or 0)
    previous_revenue = float(previous_orders.aggregate(total=Sum('total_price'))['total'] or 0)
    current_count = current_orders.count()
    previous_count = previous_orders.count()

    active_employees = Employee.objects.filter(net_salary__gt=0, status=Employee.STATUS_ACTIVE).count()
    salary_expense = _current_salary_expense()
    profit = current_revenue - salary_expense

    return {
        'revenue': {
            'current': current_revenue,
            'previous': previous_revenue,
            'growth': growth(current_revenue, previous_revenue),
        },
        'orders': {
            'current': current_count,
            'previous': previous_count,
            'growth': growth(current_count, previous_count),
        },
        'employees': active_employees,
        'salary_expense': salary_expense,
        'profit': {
            'amount': profit,
            'margin': percentage(profit, current_revenue),
        },
        'period': {
            'current': {'start': current_start.isoformat(), 'end': now.isoformat()},
            'previous': {'start': previous_start.isoformat(), 'end': current_start.isoformat()},
        },
    }
