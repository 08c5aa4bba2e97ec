"""
Test suite for Orders module
Tests: status presentation, placing orders against stock, admin workflow,
cancellation, payment, statistics and permissions
"""
from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status

from garment.catalog.models import InventoryMovement
from garment.core.models import AuditLog
from garment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from garment.orders.models import Order
from garment.orders.services import resolve_stats_range
from garment.orders.status import (
    OrderStatus, StatusBadge, status_badge, status_step, can_cancel, can_transition,
    available_actions, is_terminal,
)
from garment.core.exceptions import DomainError


class OrderStatusPresentationTests(SimpleTestCase):
    """Test the status badge table and workflow rules"""

    def test_known_badges(self):
        self.assertEqual(status_badge('Pending').color_class, 'bg-yellow-100 text-yellow-800')
        self.assertEqual(status_badge(OrderStatus.PROCESSING).color_class, 'bg-blue-100 text-blue-800')
        self.assertEqual(status_badge('Shipped').color_class, 'bg-purple-100 text-purple-800')
        self.assertEqual(status_badge('Delivered').color_class, 'bg-green-100 text-green-800')
        self.assertEqual(status_badge('Cancelled').color_class, 'bg-red-100 text-red-800')

    def test_unknown_badge_is_gray(self):
        for value in (None, '', 'Lost', 'pending'):
            badge = status_badge(value)
            self.assertIsInstance(badge, StatusBadge)
            self.assertEqual(badge.color_class, 'bg-gray-100 text-gray-800')

    def test_steps(self):
        self.assertEqual(status_step('Pending'), 0)
        self.assertEqual(status_step('Processing'), 1)
        self.assertEqual(status_step('Shipped'), 2)
        self.assertEqual(status_step('Delivered'), 3)
        self.assertEqual(status_step('Cancelled'), 0)
        self.assertEqual(status_step('Unknown'), 0)

    def test_cancellation_rule(self):
        self.assertTrue(can_cancel('Pending'))
        self.assertTrue(can_cancel('Processing'))
        self.assertFalse(can_cancel('Shipped'))
        self.assertFalse(can_cancel('Delivered'))
        self.assertFalse(can_cancel('Cancelled'))

    def test_transitions(self):
        self.assertTrue(can_transition('Pending', 'Shipped'))
        self.assertTrue(can_transition('Shipped', 'Pending'))
        self.assertTrue(can_transition('Delivered', 'Delivered'))
        self.assertFalse(can_transition('Delivered', 'Pending'))
        self.assertFalse(can_transition('Cancelled', 'Processing'))
        self.assertFalse(can_transition('Pending', 'Lost'))
        self.assertTrue(is_terminal('Cancelled'))

    def test_available_actions(self):
        self.assertEqual(available_actions('Pending'), ['process', 'cancel'])
        self.assertEqual(available_actions('Processing'), ['ship', 'cancel'])
        self.assertEqual(available_actions('Shipped'), ['deliver'])
        self.assertEqual(available_actions('Delivered'), [])
        self.assertEqual(available_actions(None), [])


class StatsRangeTests(SimpleTestCase):
    """Test the statistics date window"""

    def setUp(self):
        self.today = timezone.now().date()

    def test_defaults_to_last_30_days(self):
        start, end = resolve_stats_range(today=self.today)
        self.assertEqual(end, self.today)
        self.assertEqual(start, self.today - timedelta(days=30))

    def test_end_is_clamped_to_today(self):
        future = (self.today + timedelta(days=10)).isoformat()
        _, end = resolve_stats_range(None, future, today=self.today)
        self.assertEqual(end, self.today)

    def test_start_after_end_resets(self):
        end_value = (self.today - timedelta(days=5)).isoformat()
        start_value = (self.today - timedelta(days=1)).isoformat()
        start, end = resolve_stats_range(start_value, end_value, today=self.today)
        self.assertEqual(start, end - timedelta(days=30))

    def test_invalid_date(self):
        with self.assertRaises(DomainError):
            resolve_stats_range('not-a-date', None, today=self.today)
        with self.assertRaises(DomainError):
            resolve_stats_range('2024-02-30', None, today=self.today)


class PlaceOrderTests(TestCase):
    """Test placing orders against stock"""

    def setUp(self):
        self.user = TestDataFactory.create_user(name='Customer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(price=Decimal('25.00'), quantity=15)

    def test_create_order_decrements_stock(self):
        payload = TestDataFactory.order_payload(self.product, quantity=6)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        order = response.data['order']
        self.assertEqual(order['order_status'], 'Pending')
        self.assertEqual(order['status_color'], 'bg-yellow-100 text-yellow-800')
        self.assertEqual(len(order['order_items']), 1)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 9)
        self.assertTrue(self.product.is_low_stock)
        movement = self.product.movements.get()
        self.assertEqual(movement.movement_type, InventoryMovement.TYPE_ORDER)
        self.assertEqual(movement.quantity, -6)
        self.assertEqual(movement.reference_id, str(order['id']))

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(f"#{order['id']}", mail.outbox[0].subject)

    def test_create_order_without_items(self):
        payload = TestDataFactory.order_payload(self.product, order_items=[])
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'No order items')

    def test_create_order_insufficient_stock(self):
        payload = TestDataFactory.order_payload(self.product, quantity=16)
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], f'Not enough stock for {self.product.name}. Available: 15')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 15)
        self.assertFalse(Order.objects.exists())

    def test_insufficient_stock_rolls_back_earlier_items(self):
        other = TestDataFactory.create_product(quantity=1)
        payload = TestDataFactory.order_payload(self.product, quantity=2)
        payload['order_items'].append({
            'product': other.id, 'name': other.name, 'quantity': 3,
            'price': str(other.price), 'category': 'product', 'image': other.image,
        })
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 15)
        self.assertFalse(InventoryMovement.objects.exists())

    def test_create_order_unknown_product(self):
        payload = TestDataFactory.order_payload(self.product)
        payload['order_items'][0]['product'] = 999999
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_fabric_item_needs_measurement(self):
        fabric = TestDataFactory.create_product(category='fabric', quantity=10)
        payload = TestDataFactory.order_payload(fabric)
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Fabric measurement is required for fabric items')

    def test_my_orders(self):
        TestDataFactory.create_order(self.user, [(self.product, 1)])
        TestDataFactory.create_order(TestDataFactory.create_user(), [(self.product, 1)])
        response = self.client.get('/api/orders/myorders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_requires_login(self):
        self.client.logout()
        response = self.client.get('/api/orders/myorders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class OrderAccessTests(TestCase):
    """Test order visibility and customer actions"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.stranger = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(quantity=10)
        self.order = TestDataFactory.create_order(self.owner, [(self.product, 2)])
        self.client = AuthenticatedAPIClient()

    def test_owner_can_view(self):
        self.client.authenticate_user(self.owner)
        response = self.client.get(f'/api/orders/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['shipping_address']['city'], 'Colombo')
        self.assertEqual(response.data['order']['actions'], ['process', 'cancel'])

    def test_stranger_cannot_view(self):
        self.client.authenticate_user(self.stranger)
        response = self.client.get(f'/api/orders/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Not authorized to access this order')

    def test_order_manager_can_view(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='sales'))
        response = self.client.get(f'/api/orders/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_missing_order(self):
        self.client.authenticate_user(self.owner)
        response = self.client.get('/api/orders/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Order not found')

    def test_owner_cancel_restores_stock(self):
        self.client.authenticate_user(self.owner)
        response = self.client.put(f'/api/orders/{self.order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Order cancelled successfully')
        self.assertEqual(response.data['order']['order_status'], 'Cancelled')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 12)
        self.assertEqual(self.product.movements.get().movement_type, InventoryMovement.TYPE_RETURN)

    def test_cannot_cancel_shipped(self):
        self.order.order_status = 'Shipped'
        self.order.save()
        self.client.authenticate_user(self.owner)
        response = self.client.put(f'/api/orders/{self.order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Cannot cancel order in Shipped status')

    def test_cannot_cancel_twice(self):
        self.client.authenticate_user(self.owner)
        self.client.put(f'/api/orders/{self.order.id}/cancel/')
        response = self.client.put(f'/api/orders/{self.order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 12)

    def test_stranger_cannot_cancel(self):
        self.client.authenticate_user(self.stranger)
        response = self.client.put(f'/api/orders/{self.order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Not authorized to cancel this order')

    def test_pay_order(self):
        self.client.authenticate_user(self.owner)
        data = {'id': 'PAY-1', 'status': 'COMPLETED', 'update_time': '2024-01-01T00:00:00Z',
                'payer': {'email_address': 'payer@test.com'}}
        response = self.client.put(f'/api/orders/{self.order.id}/pay/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['order']['is_paid'])
        self.assertEqual(response.data['order']['payment_result']['email_address'], 'payer@test.com')
        self.assertTrue(AuditLog.objects.filter(action='order_pay').exists())


class AdminOrderWorkflowTests(TestCase):
    """Test admin listing, status changes and delivery"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.customer = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(quantity=10)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list_requires_capability(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_with_pagination(self):
        for _ in range(12):
            TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.get('/api/orders/', {'page': 2, 'limit': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 5)
        self.assertEqual(response.data['total_pages'], 3)
        self.assertEqual(response.data['current_page'], 2)

    def test_list_filters(self):
        TestDataFactory.create_order(self.customer, [(self.product, 1)], order_status='Shipped', is_paid=True)
        TestDataFactory.create_order(self.customer, [(self.product, 1)], full_name='Saman Perera')

        response = self.client.get('/api/orders/', {'status': 'Shipped'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/orders/', {'status': 'Bogus'})
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/orders/', {'is_paid': 'false'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/orders/', {'search': 'saman'})
        self.assertEqual(response.data['orders'][0]['shipping_address']['full_name'], 'Saman Perera')

    def test_update_status(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.put(f'/api/orders/{order.id}/status/', {'status': 'Processing'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['order_status'], 'Processing')
        self.assertEqual(response.data['order']['status_step'], 1)
        log = AuditLog.objects.get(action='order_status')
        self.assertEqual(log.changes, {'from': 'Pending', 'to': 'Processing'})

    def test_update_status_invalid_value(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.put(f'/api/orders/{order.id}/status/', {'status': 'Lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid status value')

    def test_terminal_status_is_final(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)], order_status='Delivered')
        response = self.client.put(f'/api/orders/{order.id}/status/', {'status': 'Pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_cancel_restores_stock(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 4)], order_status='Shipped')
        response = self.client.put(f'/api/orders/{order.id}/status/', {'status': 'Cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 14)

    def test_deliver(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)], order_status='Shipped')
        response = self.client.put(f'/api/orders/{order.id}/deliver/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['order']['is_delivered'])
        self.assertEqual(response.data['order']['order_status'], 'Delivered')
        self.assertIsNotNone(response.data['order']['delivered_at'])

    def test_deliver_again_keeps_delivery_time(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)], order_status='Shipped')
        self.client.put(f'/api/orders/{order.id}/deliver/')
        order.refresh_from_db()
        delivered_at = order.delivered_at

        response = self.client.put(f'/api/orders/{order.id}/deliver/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.delivered_at, delivered_at)

    def test_deliver_requires_capability(self):
        order = TestDataFactory.create_order(self.customer, [(self.product, 1)])
        self.client.authenticate_user(self.customer)
        response = self.client.put(f'/api/orders/{order.id}/deliver/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class OrderStatisticsTests(TestCase):
    """Test statistics and totals"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_user(role='admin')
        self.customer = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(price=Decimal('10.00'), quantity=100)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_stats(self):
        TestDataFactory.create_order(self.customer, [(self.product, 3)], is_paid=True)
        TestDataFactory.create_order(self.customer, [(self.product, 2)], order_status='Cancelled')
        response = self.client.get('/api/orders/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data['stats']
        self.assertEqual(stats['total_orders'], 2)
        self.assertEqual(stats['total_revenue'], 30.0)
        self.assertEqual(stats['status_counts'], {
            'Pending': 1, 'Processing': 0, 'Shipped': 0, 'Delivered': 0, 'Cancelled': 1,
        })
        self.assertEqual(len(stats['daily_revenue']), 31)
        today = stats['daily_revenue'][-1]
        self.assertEqual(today['order_count'], 2)
        self.assertEqual(today['revenue'], 30.0)
        self.assertEqual(len(stats['recent_orders']), 2)

    def test_stats_with_no_orders(self):
        response = self.client.get('/api/orders/income/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data['stats']
        self.assertEqual(stats['total_orders'], 0)
        self.assertTrue(all(day['revenue'] == 0 for day in stats['daily_revenue']))

    def test_stats_invalid_date(self):
        response = self.client.get('/api/orders/stats/', {'start_date': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid date format. Please use YYYY-MM-DD format.')

    def test_total_price_summation(self):
        TestDataFactory.create_order(self.customer, [(self.product, 3)])
        TestDataFactory.create_order(self.customer, [(self.product, 1)])
        response = self.client.get('/api/orders/total-price-summation/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_amount'], 40.0)
        self.assertEqual(response.data['order_count'], 2)
