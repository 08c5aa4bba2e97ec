"""
Test suite for the Python API client
Tests: result contract, HTTP client, order service, auth session, route guards
and the finance dashboard loader. The HTTP session is mocked throughout.
"""
import json
import os
import threading
from unittest import mock

import requests
from django.test import SimpleTestCase

from garment.client import (
    ApiClient, ApiResult, ErrorKind, OrderService, build_order_query, filter_orders, order_badge,
    AuthSession, BackendStatus, GuardKind, protected_route, admin_route, public_route, guard_for_result,
    FinanceService, FinanceDashboard,
)
from garment.core.roles import Capability, Role

BASE_URL = 'http://api.test'


def fake_response(status_code, body=None):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode() if body is not None else b''
    return response


def make_client(*responses, routes=None):
    """
    ApiClient whose session answers with ``responses`` in order, or by URL
    path through ``routes``
    """
    session = requests.Session()
    if routes is not None:
        def answer(method, url, **kwargs):
            outcome = routes[url[len(BASE_URL):]]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        session.request = mock.Mock(side_effect=answer)
    else:
        session.request = mock.Mock(side_effect=list(responses))
    return ApiClient(base_url=BASE_URL, session=session)


class ApiResultTests(SimpleTestCase):

    def test_success_carries_body(self):
        result = ApiResult.from_response(fake_response(200, {'success': True, 'order': {'id': 1}}), 'Failed')
        self.assertTrue(result.success)
        self.assertIsNone(result.kind)
        self.assertEqual(result['order'], {'id': 1})

    def test_client_error_uses_server_message(self):
        body = {'success': False, 'message': 'No order items', 'errors': {'order_items': ['required']}}
        result = ApiResult.from_response(fake_response(400, body), 'Failed to create order')
        self.assertFalse(result)
        self.assertEqual(result.kind, ErrorKind.CLIENT_ERROR)
        self.assertEqual(result.message, 'No order items')
        self.assertEqual(result.errors, {'order_items': ['required']})

    def test_error_field_and_default_message(self):
        result = ApiResult.from_response(fake_response(500, {'error': 'boom'}), 'Failed')
        self.assertEqual(result.kind, ErrorKind.SERVER_ERROR)
        self.assertEqual(result.message, 'boom')

        result = ApiResult.from_response(fake_response(502), 'Failed to fetch orders')
        self.assertEqual(result.message, 'Failed to fetch orders')

    def test_unauthorized(self):
        result = ApiResult.from_response(fake_response(401, {'detail': 'Token expired'}), 'Failed')
        self.assertTrue(result.is_unauthorized)
        self.assertEqual(result.status_code, 401)

    def test_network_failure(self):
        result = ApiResult.from_exception(requests.ConnectionError('refused'), 'Cannot connect')
        self.assertEqual(result.kind, ErrorKind.NETWORK)
        self.assertIsNone(result.status_code)


class ApiClientTests(SimpleTestCase):

    def test_base_url_from_environment(self):
        with mock.patch.dict(os.environ, {'GARMENT_BACKEND_URL': 'http://factory.example/'}):
            self.assertEqual(ApiClient().base_url, 'http://factory.example')

    def test_default_base_url(self):
        with mock.patch.dict(os.environ):
            os.environ.pop('GARMENT_BACKEND_URL', None)
            self.assertEqual(ApiClient().base_url, 'http://localhost:8000')

    def test_bearer_token_header(self):
        client = make_client(fake_response(200, {'success': True}))
        client.set_tokens('abc', 'def')
        self.assertEqual(client.session.headers['Authorization'], 'Bearer abc')
        client.clear_tokens()
        self.assertNotIn('Authorization', client.session.headers)

    def test_network_error_does_not_raise(self):
        client = make_client(requests.ConnectionError('refused'))
        result = client.get('/api/orders/', 'Failed to fetch orders')
        self.assertFalse(result.success)
        self.assertEqual(result.kind, ErrorKind.NETWORK)

    def test_unauthorized_notifies_listeners(self):
        client = make_client(fake_response(401, {'success': False, 'message': 'Not authorized'}))
        seen = []
        client.on_unauthorized(seen.append)
        result = client.get('/api/orders/myorders/')
        self.assertTrue(client.last_unauthorized)
        self.assertEqual(seen, [result])

    def test_no_retry(self):
        client = make_client(fake_response(503), fake_response(200, {'success': True}))
        result = client.get('/api/finance/kpis/')
        self.assertEqual(result.kind, ErrorKind.SERVER_ERROR)
        self.assertEqual(client.session.request.call_count, 1)


class OrderServiceTests(SimpleTestCase):

    def test_query_keeps_only_given_filters(self):
        self.assertEqual(build_order_query({'status': 'Shipped', 'search': '', 'page': None}), {'status': 'Shipped'})

    def test_query_flags(self):
        query = build_order_query({'is_paid': False, 'is_delivered': True, 'limit': 20})
        self.assertEqual(query, {'is_paid': 'false', 'is_delivered': 'true', 'limit': '20'})
        self.assertEqual(build_order_query({'is_paid': None}), {})

    def test_get_all_orders(self):
        body = {'success': True, 'count': 2, 'total_pages': 3, 'current_page': 2,
                'orders': [{'id': 1}, {'id': 2}]}
        client = make_client(fake_response(200, body))
        result = OrderService(client).get_all_orders(status='Shipped', page=2)
        self.assertTrue(result.success)
        self.assertEqual(result.data, {
            'orders': [{'id': 1}, {'id': 2}], 'total_count': 2, 'current_page': 2, 'total_pages': 3,
        })
        args, kwargs = client.session.request.call_args
        self.assertEqual(args, ('GET', f'{BASE_URL}/api/orders/'))
        self.assertEqual(kwargs['params'], {'status': 'Shipped', 'page': '2'})

    def test_get_all_orders_failure_has_empty_defaults(self):
        client = make_client(fake_response(403, {'success': False, 'message': 'Access denied. Insufficient privileges.'}))
        result = OrderService(client).get_all_orders()
        self.assertFalse(result.success)
        self.assertEqual(result.message, 'Access denied. Insufficient privileges.')
        self.assertEqual(result['orders'], [])
        self.assertEqual(result['total_pages'], 1)

    def test_create_order(self):
        client = make_client(fake_response(201, {'success': True, 'order': {'id': 7, 'order_status': 'Pending'}}))
        result = OrderService(client).create_order({'order_items': []})
        self.assertTrue(result.success)
        self.assertEqual(result['order']['id'], 7)

    def test_create_order_rejected(self):
        body = {'success': False, 'message': 'Not enough stock for Tee. Available: 2', 'errors': None}
        client = make_client(fake_response(400, body))
        result = OrderService(client).create_order({'order_items': []})
        self.assertFalse(result.success)
        self.assertEqual(result.message, 'Not enough stock for Tee. Available: 2')

    def test_update_order_status(self):
        client = make_client(fake_response(200, {'success': True, 'order': {'order_status': 'Shipped'}}))
        OrderService(client).update_order_status(5, 'Shipped')
        args, kwargs = client.session.request.call_args
        self.assertEqual(args, ('PATCH', f'{BASE_URL}/api/orders/5/status/'))
        self.assertEqual(kwargs['json'], {'status': 'Shipped'})

    def test_statistics_date_range(self):
        client = make_client(fake_response(200, {'success': True, 'stats': {}}))
        OrderService(client).get_order_statistics(start_date='2024-01-01')
        self.assertEqual(client.session.request.call_args[1]['params'], {'start_date': '2024-01-01'})

    def test_filter_order_history(self):
        client = make_client(fake_response(200, {'success': True, 'orders': [
            {'id': 'a1', 'order_status': 'Pending'},
            {'id': 'b2', 'order_status': 'Delivered'},
        ]}))
        orders = OrderService(client).get_user_orders()['orders']
        delivered = filter_orders(orders, 'Delivered')
        self.assertEqual([order['id'] for order in delivered], ['b2'])
        self.assertEqual(len(filter_orders(orders, 'all')), 2)
        self.assertEqual(len(filter_orders(orders, None)), 2)

    def test_order_badge(self):
        self.assertEqual(order_badge({'order_status': 'Delivered'}).color_class, 'bg-green-100 text-green-800')
        self.assertEqual(order_badge({'order_status': 'On Hold'}).color_class, 'bg-gray-100 text-gray-800')
        self.assertEqual(order_badge({}).color_class, 'bg-gray-100 text-gray-800')


ADMIN_USER = {'id': 1, 'name': 'Admin', 'email': 'admin@factory.test', 'role': 'admin'}


class AuthSessionTests(SimpleTestCase):

    def test_refresh_logs_in(self):
        client = make_client(routes={
            '/': fake_response(200, {'success': True}),
            '/api/auth/is-auth/': fake_response(200, {'success': True, 'user': ADMIN_USER}),
        })
        session = AuthSession(client)
        self.assertTrue(session.refresh())
        self.assertTrue(session.is_logged_in)
        self.assertEqual(session.role, Role.ADMIN)
        self.assertEqual(session.backend_status, BackendStatus.ONLINE)
        self.assertFalse(session.is_loading)

    def test_refresh_falls_back_to_profile_on_404(self):
        client = make_client(routes={
            '/': fake_response(200, {'success': True}),
            '/api/auth/is-auth/': fake_response(404, {'detail': 'Not found.'}),
            '/api/auth/profile/': fake_response(200, {'success': True, 'user': {**ADMIN_USER, 'role': 'sales'}}),
        })
        session = AuthSession(client)
        self.assertTrue(session.refresh())
        self.assertEqual(session.role, Role.SALES)
        self.assertTrue(session.has_capability(Capability.MANAGE_ORDERS))
        self.assertFalse(session.has_capability(Capability.VIEW_FINANCE))

    def test_refresh_unauthorized_clears(self):
        client = make_client(routes={
            '/': fake_response(200, {'success': True}),
            '/api/auth/is-auth/': fake_response(401, {'detail': 'Authentication credentials were not provided.'}),
        })
        session = AuthSession(client)
        session.is_logged_in = True
        self.assertFalse(session.refresh())
        self.assertFalse(session.is_logged_in)
        self.assertIsNone(session.user)

    def test_offline_backend_skips_auth_check(self):
        client = make_client(routes={'/': requests.ConnectionError('refused')})
        session = AuthSession(client)
        self.assertFalse(session.refresh())
        self.assertEqual(session.backend_status, BackendStatus.OFFLINE)
        self.assertEqual(client.session.request.call_count, 1)

    def test_server_error_backend(self):
        client = make_client(routes={'/': fake_response(500)})
        session = AuthSession(client)
        session.refresh()
        self.assertEqual(session.backend_status, BackendStatus.ERROR)
        self.assertFalse(session.is_logged_in)

    def test_login_and_logout(self):
        client = make_client(routes={
            '/api/auth/login/': fake_response(200, {'success': True, 'role': 'admin', 'user': ADMIN_USER,
                                                    'access': 'tok', 'refresh': 'ref'}),
            '/api/auth/logout/': requests.ConnectionError('refused'),
        })
        session = AuthSession(client)
        changes = []
        session.subscribe(lambda s: changes.append(s.is_logged_in))

        self.assertTrue(session.login('admin@factory.test', 'secret123').success)
        self.assertEqual(client.session.headers['Authorization'], 'Bearer tok')
        self.assertTrue(session.is_logged_in)

        self.assertFalse(session.logout().success)
        self.assertFalse(session.is_logged_in)
        self.assertNotIn('Authorization', client.session.headers)
        self.assertEqual(changes, [True, False])

    def test_failed_login_keeps_session_empty(self):
        client = make_client(fake_response(401, {'success': False, 'message': 'Invalid email or password'}))
        session = AuthSession(client)
        result = session.login('nobody@factory.test', 'wrong')
        self.assertEqual(result.message, 'Invalid email or password')
        self.assertFalse(session.is_logged_in)


class RouteGuardTests(SimpleTestCase):

    def session_for(self, role=None, loading=False):
        session = AuthSession(make_client())
        if role:
            session._set_user({'role': role})
        session.is_loading = loading
        return session

    def test_loading(self):
        session = self.session_for(loading=True)
        for decision in (protected_route(session, '/orders'), admin_route(session, '/admin'), public_route(session)):
            self.assertEqual(decision.kind, GuardKind.LOADING)

    def test_protected_route(self):
        decision = protected_route(self.session_for(), '/orders')
        self.assertTrue(decision.is_redirect)
        self.assertEqual((decision.target, decision.from_path), ('/login', '/orders'))
        self.assertTrue(protected_route(self.session_for('user'), '/orders').renders)

    def test_admin_route(self):
        self.assertEqual(admin_route(self.session_for(), '/admin-dashboard').target, '/login')
        self.assertEqual(admin_route(self.session_for('sales'), '/admin-dashboard').target, '/home')
        self.assertTrue(admin_route(self.session_for('manager'), '/admin-dashboard').renders)

    def test_admin_route_with_capability(self):
        decision = admin_route(self.session_for('finance'), '/finance', capability=Capability.VIEW_FINANCE)
        self.assertTrue(decision.renders)
        decision = admin_route(self.session_for('manager'), '/finance', capability=Capability.VIEW_FINANCE)
        self.assertEqual(decision.target, '/home')

    def test_public_route(self):
        self.assertTrue(public_route(self.session_for()).renders)
        self.assertEqual(public_route(self.session_for('admin')).target, '/admin-dashboard')
        self.assertEqual(public_route(self.session_for('user')).target, '/home')
        self.assertEqual(public_route(self.session_for('user'), from_path='/cart').target, '/cart')

    def test_unauthorized_result_redirects_to_login(self):
        session = self.session_for('admin')
        result = ApiResult.from_response(fake_response(401, {'detail': 'Token expired'}), 'Failed')
        decision = guard_for_result(session, result, '/admin/orders')
        self.assertEqual((decision.target, decision.from_path), ('/login', '/admin/orders'))
        self.assertFalse(session.is_logged_in)
        self.assertFalse(protected_route(session, '/admin/orders').renders)

    def test_forbidden_order_keeps_session(self):
        session = self.session_for('user')
        client = make_client(fake_response(403, {'success': False, 'message': 'Not authorized to access this order'}))
        result = OrderService(client).get_order_by_id(7)
        self.assertEqual(result.kind, ErrorKind.CLIENT_ERROR)
        self.assertEqual(result.message, 'Not authorized to access this order')
        self.assertIsNone(guard_for_result(session, result, '/orders/7'))
        self.assertTrue(session.is_logged_in)
        self.assertFalse(client.last_unauthorized)

    def test_other_results_do_not_redirect(self):
        session = self.session_for('admin')
        self.assertIsNone(guard_for_result(session, ApiResult.ok({}), '/orders'))
        self.assertTrue(session.is_logged_in)


class FinanceDashboardTests(SimpleTestCase):

    def test_load_populates_every_piece(self):
        service = mock.Mock(spec=FinanceService)
        service.get_kpis.return_value = ApiResult.ok({'success': True, 'kpis': {'employees': 3}})
        service.get_monthly.return_value = ApiResult.ok({'success': True, 'monthly_data': [{'month': 'Jan 2024'}]})
        service.get_summary.return_value = ApiResult.ok({'success': True, 'financial_summary': {'overview': {}}})

        dashboard = FinanceDashboard(service).load('2024-01-01', '2024-01-31')
        self.assertFalse(dashboard.loading)
        self.assertEqual(dashboard.kpis, {'employees': 3})
        self.assertEqual(dashboard.monthly, [{'month': 'Jan 2024'}])
        self.assertEqual(dashboard.summary, {'overview': {}})
        self.assertEqual(dashboard.errors, {})
        service.get_summary.assert_called_once_with('2024-01-01', '2024-01-31')

    def test_slow_piece_does_not_hold_back_the_others(self):
        others_done = threading.Event()
        resolved = []

        def slow_monthly():
            others_done.wait(timeout=5)
            return ApiResult.ok({'monthly_data': []})

        def on_update(name, dashboard):
            resolved.append(name)
            if {'kpis', 'summary'} <= set(resolved):
                self.assertTrue(dashboard.loading)
                self.assertIsNotNone(dashboard.kpis)
                others_done.set()

        service = mock.Mock(spec=FinanceService)
        service.get_kpis.return_value = ApiResult.ok({'kpis': {'employees': 1}})
        service.get_monthly.side_effect = slow_monthly
        service.get_summary.return_value = ApiResult.ok({'financial_summary': {}})

        dashboard = FinanceDashboard(service, on_update=on_update).load()
        self.assertTrue(others_done.is_set())
        self.assertEqual(resolved[-1], 'monthly')
        self.assertFalse(dashboard.loading)

    def test_failures_are_kept_per_piece(self):
        service = mock.Mock(spec=FinanceService)
        service.get_kpis.return_value = ApiResult.ok({'kpis': {'employees': 2}})
        service.get_monthly.return_value = ApiResult.fail('Failed to fetch monthly financial data',
                                                          kind=ErrorKind.SERVER_ERROR, status_code=500)
        service.get_summary.return_value = ApiResult.fail('Not authorized', kind=ErrorKind.UNAUTHORIZED,
                                                          status_code=401)

        dashboard = FinanceDashboard(service).load()
        self.assertEqual(dashboard.kpis, {'employees': 2})
        self.assertEqual(dashboard.monthly, [])
        self.assertEqual(set(dashboard.errors), {'monthly', 'summary'})
        self.assertTrue(dashboard.unauthorized)
