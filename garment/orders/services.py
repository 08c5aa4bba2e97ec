"""
Order lifecycle: placing orders against stock, status changes, payment,
delivery and cancellation, plus the statistics behind the admin dashboard.

Every stock change happens inside ``transaction.atomic`` with the product
rows locked, so concurrent orders cannot oversell.
"""
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum, Count, Case, When, DecimalField, Value
from django.db.models.functions import TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_date

from garment.catalog.models import Product, InventoryMovement
from garment.core.cache_utils import cached_query, ORDER_STATS_CACHE_TTL, ORDER_STATS_CACHE_PREFIX
from garment.core.exceptions import DomainError, NotFoundError, NotAuthorizedError
from garment.core.roles import Capability
from .models import Order, OrderItem
from .notifications import queue_order_confirmation
from .status import OrderStatus, parse_status, can_transition, can_cancel

logger = logging.getLogger('garment.orders')

STATS_DEFAULT_DAYS = 30


def can_access_order(user, order):
    return order.user_id == user.pk or user.has_capability(Capability.MANAGE_ORDERS)


def get_order(pk, user=None, lock=False, action='access'):
    """Fetch an order, optionally checking the caller may act on it"""
    queryset = Order.objects.select_for_update() if lock else Order.objects.select_related('user')
    order = queryset.filter(pk=pk).first()
    if order is None:
        raise NotFoundError('Order not found')
    if user is not None and not can_access_order(user, order):
        raise NotAuthorizedError(f'Not authorized to {action} this order')
    return order


def _lock_products(product_ids):
    products = Product.objects.select_for_update().filter(pk__in=set(product_ids)).order_by('pk')
    return {product.pk: product for product in products}


def place_order(user, data):
    """
    Create an order and take its items out of stock.

    ``data`` is validated ``OrderCreateSerializer`` data. Raises ``DomainError``
    when an item is short and ``NotFoundError`` for an unknown product; either
    rolls back the whole order.
    """
    items = data.get('order_items') or []
    if not items:
        raise DomainError('No order items')

    shipping = data['shipping_address']
    with transaction.atomic():
        products = _lock_products(item['product'] for item in items)

        for item in items:
            product = products.get(item['product'])
            if product is None:
                raise NotFoundError(f"Product {item['name']} not found")

        order = Order.objects.create(
            user=user,
            full_name=shipping['full_name'],
            address=shipping['address'],
            city=shipping['city'],
            postal_code=shipping['postal_code'],
            country=shipping['country'],
            phone_number=shipping['phone_number'],
            payment_method=data['payment_method'],
            items_price=data.get('items_price') or Decimal('0'),
            tax_price=data.get('tax_price') or Decimal('0'),
            shipping_price=data.get('shipping_price') or Decimal('0'),
            total_price=data.get('total_price') or Decimal('0'),
        )

        for item in items:
            product = products[item['product']]
            if product.quantity < item['quantity']:
                raise DomainError(f"Not enough stock for {item['name']}. Available: {product.quantity}")

            OrderItem.objects.create(
                order=order,
                product=product,
                name=item['name'],
                quantity=item['quantity'],
                price=item['price'],
                category=item['category'],
                fabric_measurement=item.get('fabric_measurement'),
                image=item['image'],
            )
            product.track_inventory_change(
                InventoryMovement.TYPE_ORDER,
                -item['quantity'],
                f'Order #{order.pk}',
                reference_id=order.pk,
                notes=f'Order placed by {user.name} ({user.email})',
            )
            if product.is_out_of_stock or product.is_low_stock:
                logger.info(
                    f"Product {product.name} is now {'out of stock' if product.is_out_of_stock else 'low in stock'}"
                )

        queue_order_confirmation(order)

    logger.info(f"Order {order.pk} created by user {user.pk} with {len(items)} items")
    return order


def _restore_stock(order, reference, notes):
    """Return every item's quantity to stock. Caller holds the transaction."""
    items = list(order.items.all())
    products = _lock_products(item.product_id for item in items if item.product_id)
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            continue
        product.track_inventory_change(
            InventoryMovement.TYPE_RETURN,
            item.quantity,
            reference,
            reference_id=order.pk,
            notes=notes,
        )
        logger.info(f"Returned {item.quantity} of {item.name} to inventory. New quantity: {product.quantity}")


def update_status(pk, value):
    """Admin status change; moving to Cancelled puts the items back in stock"""
    new_status = parse_status(value)
    if new_status is None:
        raise DomainError('Invalid status value')

    with transaction.atomic():
        order = get_order(pk, lock=True)
        previous_status = order.order_status
        if not can_transition(previous_status, new_status):
            raise DomainError(f'Cannot change order status from {previous_status} to {new_status}')

        order.order_status = new_status.value
        if new_status == OrderStatus.DELIVERED and not order.is_delivered:
            order.is_delivered = True
            order.delivered_at = timezone.now()
        if new_status == OrderStatus.CANCELLED and previous_status != OrderStatus.CANCELLED.value:
            _restore_stock(
                order,
                f'Order Cancelled #{order.pk}',
                f'Order cancelled, item returned to inventory. Previous status: {previous_status}',
            )
        order.save()

    logger.info(f"Order {order.pk} status changed from {previous_status} to {new_status}")
    return order, previous_status


def cancel_order(pk, user):
    """Customer (or staff) cancellation of an order that has not shipped"""
    with transaction.atomic():
        order = get_order(pk, lock=True)
        if not can_access_order(user, order):
            raise NotAuthorizedError('Not authorized to cancel this order')
        if not can_cancel(order.order_status):
            raise DomainError(f'Cannot cancel order in {order.order_status} status')

        previous_status = order.order_status
        order.order_status = OrderStatus.CANCELLED.value
        _restore_stock(
            order,
            f'Order Cancelled by User #{order.pk}',
            f'Order cancelled by {user.name} ({user.email}). Previous status: {previous_status}',
        )
        order.save()

    logger.info(f"Order {order.pk} cancelled by user {user.pk}")
    return order


def mark_paid(order, payment):
    order.is_paid = True
    order.paid_at = timezone.now()
    order.payment_id = payment.get('id', '')
    order.payment_status = payment.get('status', '')
    order.payment_update_time = payment.get('update_time', '')
    order.payment_email = payment.get('email_address', '')
    order.save()
    return order


def mark_delivered(order):
    if not can_transition(order.order_status, OrderStatus.DELIVERED):
        raise DomainError(f'Cannot change order status from {order.order_status} to {OrderStatus.DELIVERED}')
    if not order.is_delivered:
        order.is_delivered = True
        order.delivered_at = timezone.now()
    order.order_status = OrderStatus.DELIVERED.value
    order.save()
    return order


def _day_start(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def resolve_stats_range(start_value=None, end_value=None, today=None):
    """
    Date range for order statistics: default last 30 days, end clamped to
    today, a start after the end resets to 30 days before the end.
    """
    today = today or timezone.localdate()
    try:
        start_date = parse_date(start_value) if start_value else today - timedelta(days=STATS_DEFAULT_DAYS)
        end_date = parse_date(end_value) if end_value else today
    except ValueError:
        start_date = end_date = None
    if start_date is None or end_date is None:
        raise DomainError('Invalid date format. Please use YYYY-MM-DD format.')

    if end_date > today:
        end_date = today
    if start_date > end_date:
        start_date = end_date - timedelta(days=STATS_DEFAULT_DAYS)
    return start_date, end_date


@cached_query(cache_ttl=ORDER_STATS_CACHE_TTL, key_prefix=ORDER_STATS_CACHE_PREFIX)
def order_stats(start_date, end_date):
    """Revenue, per-status counts and a day-by-day series for ``[start_date, end_date]``"""
    from .serializers import OrderSerializer

    orders = Order.objects.filter(
        created_at__gte=_day_start(start_date),
        created_at__lt=_day_start(end_date + timedelta(days=1)),
    )

    status_counts = {status.value: 0 for status in OrderStatus}
    for row in orders.values('order_status').annotate(count=Count('id')):
        if row['order_status'] in status_counts:
            status_counts[row['order_status']] = row['count']

    total_revenue = orders.filter(is_paid=True).aggregate(total=Sum('total_price'))['total'] or 0

    paid_total = Case(
        When(is_paid=True, then='total_price'),
        default=Value(0),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )
    per_day = {
        row['day']: row
        for row in orders.annotate(day=TruncDate('created_at'))
        .values('day')
        .annotate(revenue=Sum(paid_total), order_count=Count('id'))
    }

    daily_revenue = []
    day = start_date
    while day <= end_date:
        row = per_day.get(day)
        daily_revenue.append({
            'date': day.isoformat(),
            'revenue': float(row['revenue'] or 0) if row else 0,
            'order_count': row['order_count'] if row else 0,
        })
        day += timedelta(days=1)

    recent_orders = Order.objects.select_related('user').prefetch_related('items').order_by('-created_at', '-id')[:5]

    return {
        'total_revenue': float(total_revenue),
        'total_orders': orders.count(),
        'status_counts': status_counts,
        'daily_revenue': daily_revenue,
        'recent_orders': list(OrderSerializer(recent_orders, many=True).data),
    }


def total_price_summation():
    result = Order.objects.aggregate(total_amount=Sum('total_price'), order_count=Count('id'))
    return {
        'total_amount': float(result['total_amount'] or 0),
        'order_count': result['order_count'] or 0,
    }
