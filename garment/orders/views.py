import logging
import math

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from garment.core.permissions import IsOrderManager
from garment.core.utils import success_response, error_response, create_audit_log
from .filters import OrderFilter
from .models import Order
from .serializers import (
    OrderSerializer, OrderCreateSerializer, OrderStatusUpdateSerializer, PaymentResultSerializer,
)
from . import services

logger = logging.getLogger('garment.orders')

DEFAULT_PAGE_SIZE = 10


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _order_queryset():
    return Order.objects.select_related('user').prefetch_related('items')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """Place an order (any signed-in user) or list all orders (order managers)"""
    if request.method == 'POST':
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.place_order(request.user, serializer.validated_data)
        create_audit_log(request, 'order_create', 'Order', order.id,
                         changes={'total_price': str(order.total_price)}, object_name=f'Order #{order.id}')
        return success_response(status.HTTP_201_CREATED, order=OrderSerializer(order).data)

    if not IsOrderManager().has_permission(request, None):
        return _forbidden()

    order_filter = OrderFilter(request.query_params, queryset=_order_queryset())
    queryset = order_filter.qs.order_by('-created_at', '-id')

    page = _positive_int(request.query_params.get('page'), 1)
    limit = _positive_int(request.query_params.get('limit'), DEFAULT_PAGE_SIZE)
    total = queryset.count()
    offset = (page - 1) * limit
    orders = queryset[offset:offset + limit]

    serializer = OrderSerializer(orders, many=True)
    return success_response(
        count=len(serializer.data),
        total_pages=math.ceil(total / limit),
        current_page=page,
        orders=serializer.data,
    )


def _forbidden():
    return error_response('Access denied. Insufficient privileges.', status.HTTP_403_FORBIDDEN)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_orders(request):
    orders = _order_queryset().filter(user=request.user).order_by('-created_at', '-id')
    serializer = OrderSerializer(orders, many=True)
    return success_response(count=len(serializer.data), orders=serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOrderManager])
def order_stats(request):
    """Order statistics for the admin dashboard; ``/income/`` serves the same data"""
    start_date, end_date = services.resolve_stats_range(
        request.query_params.get('start_date'),
        request.query_params.get('end_date'),
    )
    logger.debug(f"Order stats range: {start_date} to {end_date}")
    return success_response(stats=services.order_stats(start_date, end_date))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOrderManager])
def total_price_summation(request):
    return success_response(**services.total_price_summation())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    order = services.get_order(pk, user=request.user)
    return success_response(order=OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_pay(request, pk):
    order = services.get_order(pk, user=request.user, action='pay for')
    serializer = PaymentResultSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = services.mark_paid(order, serializer.validated_data)
    create_audit_log(request, 'order_pay', 'Order', order.id,
                     changes={'payment_id': order.payment_id}, object_name=f'Order #{order.id}')
    return success_response(order=OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsOrderManager])
def order_deliver(request, pk):
    order = services.mark_delivered(services.get_order(pk))
    create_audit_log(request, 'order_deliver', 'Order', order.id, object_name=f'Order #{order.id}')
    return success_response(order=OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsOrderManager])
def order_update_status(request, pk):
    serializer = OrderStatusUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order, previous_status = services.update_status(pk, serializer.validated_data['status'])
    create_audit_log(request, 'order_status', 'Order', order.id,
                     changes={'from': previous_status, 'to': order.order_status},
                     object_name=f'Order #{order.id}')
    return success_response(order=OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_cancel(request, pk):
    order = services.cancel_order(pk, request.user)
    create_audit_log(request, 'order_cancel', 'Order', order.id, object_name=f'Order #{order.id}')
    return success_response(message='Order cancelled successfully', order=OrderSerializer(order).data)
