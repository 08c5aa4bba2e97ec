"""
Python client for the garment factory API.

Plain ``requests``; importing this package does not configure Django.
"""
from .results import ApiResult, ErrorKind
from .http import ApiClient
from .orders import OrderService, build_order_query, filter_orders, order_badge
from .session import AuthSession, BackendStatus
from .guards import GuardDecision, GuardKind, protected_route, admin_route, public_route, guard_for_result
from .dashboard import FinanceService, FinanceDashboard

__all__ = [
    'ApiResult', 'ErrorKind', 'ApiClient',
    'OrderService', 'build_order_query', 'filter_orders', 'order_badge',
    'AuthSession', 'BackendStatus',
    'GuardDecision', 'GuardKind', 'protected_route', 'admin_route', 'public_route', 'guard_for_result',
    'FinanceService', 'FinanceDashboard',
]
