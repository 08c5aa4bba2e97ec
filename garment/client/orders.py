"""
Order service: the order endpoints behind ``ApiResult`` returning methods.
"""
from typing import Dict, Iterable, List, Optional

from garment.orders.status import StatusBadge, status_badge

from .http import ApiClient
from .results import ApiResult

ORDER_QUERY_KEYS = ('start_date', 'end_date', 'limit', 'page', 'sort', 'direction', 'status')
ORDER_FLAG_KEYS = ('is_paid', 'is_delivered')


def _flag(value):
    if isinstance(value, str):
        return value.lower()
    return 'true' if value else 'false'


def build_order_query(params: Optional[Dict] = None) -> Dict[str, str]:
    """
    Query parameters for the admin order list. Empty filters are left out;
    ``is_paid``/``is_delivered`` are sent whenever they are not ``None``.
    """
    params = params or {}
    query = {}
    for key in ORDER_QUERY_KEYS:
        if params.get(key):
            query[key] = str(params[key])
    for key in ORDER_FLAG_KEYS:
        if params.get(key) is not None:
            query[key] = _flag(params[key])
    if params.get('search'):
        query['search'] = str(params['search'])
    return query


def _date_range(start_date=None, end_date=None):
    query = {}
    if start_date:
        query['start_date'] = str(start_date)
    if end_date:
        query['end_date'] = str(end_date)
    return query


def filter_orders(orders: Iterable[Dict], status: Optional[str] = None) -> List[Dict]:
    """Order-history filter; ``None`` or ``all`` keeps every order"""
    orders = list(orders)
    if not status or status == 'all':
        return orders
    return [order for order in orders if order.get('order_status') == status]


def order_badge(order: Dict) -> StatusBadge:
    """Badge for an order as returned by the API; unknown statuses get the gray badge"""
    return status_badge(order.get('order_status'))


class OrderService:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_all_orders(self, **params) -> ApiResult:
        result = self.client.get('/api/orders/', 'Failed to fetch orders', params=build_order_query(params))
        if not result.success:
            result.data = {'orders': [], 'total_count': 0, 'current_page': 1, 'total_pages': 1}
            return result

        orders = result.get('orders') or []
        result.data = {
            'orders': orders,
            'total_count': result.get('count') or len(orders),
            'current_page': result.get('current_page') or 1,
            'total_pages': result.get('total_pages') or 1,
        }
        return result

    def get_order_by_id(self, order_id) -> ApiResult:
        return self.client.get(f'/api/orders/{order_id}/', 'Failed to fetch order details')

    def update_order_status(self, order_id, status) -> ApiResult:
        return self.client.patch(f'/api/orders/{order_id}/status/', 'Failed to update order status',
                                 json={'status': str(status)})

    def mark_order_as_delivered(self, order_id) -> ApiResult:
        return self.client.patch(f'/api/orders/{order_id}/deliver/', 'Failed to mark order as delivered', json={})

    def get_order_statistics(self, start_date=None, end_date=None) -> ApiResult:
        return self.client.get('/api/orders/stats/', 'Failed to fetch order statistics',
                               params=_date_range(start_date, end_date))

    def get_order_income(self, start_date=None, end_date=None) -> ApiResult:
        return self.client.get('/api/orders/income/', 'Failed to fetch order income statistics',
                               params=_date_range(start_date, end_date))

    def create_order(self, order_data: Dict) -> ApiResult:
        return self.client.post('/api/orders/', 'Failed to create order', json=order_data)

    def get_user_orders(self) -> ApiResult:
        return self.client.get('/api/orders/myorders/', 'Failed to fetch your orders')

    def cancel_order(self, order_id) -> ApiResult:
        return self.client.put(f'/api/orders/{order_id}/cancel/', 'Failed to cancel order', json={})

    def pay_order(self, order_id, payment_result: Dict) -> ApiResult:
        return self.client.put(f'/api/orders/{order_id}/pay/', 'Failed to process payment', json=payment_result)

    def get_total_price_summation(self) -> ApiResult:
        return self.client.get('/api/orders/total-price-summation/', 'Failed to fetch total price summation')
