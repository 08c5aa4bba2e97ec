"""
Test suite for the product catalog and inventory tracking
Tests: stock flags, storefront filters, product management, restock and adjustments
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from garment.catalog.models import Product, InventoryMovement
from garment.core.models import AuditLog
from garment.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ProductModelTests(TestCase):
    """Test derived stock flags and movement tracking"""

    def test_stock_flags_follow_quantity(self):
        product = TestDataFactory.create_product(quantity=0)
        self.assertTrue(product.is_out_of_stock)
        self.assertFalse(product.is_low_stock)

        product.quantity = 5
        product.save()
        self.assertFalse(product.is_out_of_stock)
        self.assertTrue(product.is_low_stock)

        product.quantity = 11
        product.save()
        self.assertFalse(product.is_low_stock)

    def test_threshold_is_inclusive(self):
        product = TestDataFactory.create_product(quantity=10)
        self.assertTrue(product.is_low_stock)

    def test_track_inventory_change_records_movement(self):
        product = TestDataFactory.create_product(quantity=20)
        movement = product.track_inventory_change(InventoryMovement.TYPE_ORDER, -15, 'Order #1', reference_id=1)
        product.refresh_from_db()
        self.assertEqual(product.quantity, 5)
        self.assertTrue(product.is_low_stock)
        self.assertEqual(movement.previous_quantity, 20)
        self.assertEqual(movement.new_quantity, 5)
        self.assertEqual(movement.reference_id, '1')


class ProductListTests(TestCase):
    """Test the public product listing and its filters"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.shirt = TestDataFactory.create_product(name='Linen Shirt', price=Decimal('40.00'))
        self.blue = TestDataFactory.create_product(name='Denim Roll', price=Decimal('15.00'), category='fabric',
                                                   color='Indigo Blue', fabric_type='Denim')
        self.red = TestDataFactory.create_product(name='Silk Roll', price=Decimal('90.00'), category='fabric',
                                                  color='Red', fabric_type='Silk')

    def test_list_is_public(self):
        response = self.client.get('/api/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['count'], 3)

    def test_filter_by_category(self):
        response = self.client.get('/api/products/', {'category': 'fabric'})
        self.assertEqual({p['name'] for p in response.data['data']}, {'Denim Roll', 'Silk Roll'})

    def test_color_filter_only_applies_to_fabrics(self):
        response = self.client.get('/api/products/', {'category': 'fabric', 'color': 'blue'})
        self.assertEqual([p['name'] for p in response.data['data']], ['Denim Roll'])

        response = self.client.get('/api/products/', {'color': 'blue'})
        self.assertEqual(response.data['count'], 3)

    def test_price_range_and_sort(self):
        response = self.client.get('/api/products/', {'min_price': '20', 'sort': 'price_asc'})
        self.assertEqual([p['name'] for p in response.data['data']], ['Linen Shirt', 'Silk Roll'])

        response = self.client.get('/api/products/', {'sort': 'price_desc'})
        self.assertEqual(response.data['data'][0]['name'], 'Silk Roll')

    def test_search(self):
        response = self.client.get('/api/products/', {'search': 'silk'})
        self.assertEqual([p['name'] for p in response.data['data']], ['Silk Roll'])

    def test_detail_not_found(self):
        response = self.client.get('/api/products/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Product not found')


class ProductManagementTests(TestCase):
    """Test product create/update/delete permissions and validation"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.manager = TestDataFactory.create_user(role='inventory')
        self.data = {
            'name': 'Cotton Tee',
            'description': 'Plain tee',
            'price': '12.50',
            'image': 'https://example.com/tee.jpg',
            'category': 'product',
            'quantity': 30,
        }

    def test_create_requires_login(self):
        response = self.client.post('/api/products/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_requires_capability(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='sales'))
        response = self.client.post('/api/products/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_product(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/products/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['data']['is_low_stock'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Product').exists())

    def test_create_fabric_requires_color_and_type(self):
        self.client.authenticate_user(self.manager)
        self.data['category'] = 'fabric'
        response = self.client.post('/api/products/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Color and fabric type are required for fabrics')

    def test_update_and_delete(self):
        product = TestDataFactory.create_product()
        self.client.authenticate_user(self.manager)
        response = self.client.put(f'/api/products/{product.id}/', {'price': '55.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.price, Decimal('55.00'))

        response = self.client.delete(f'/api/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())


class InventoryOperationTests(TestCase):
    """Test restock, adjustments, history and low-stock report"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role='manager'))
        self.product = TestDataFactory.create_product(quantity=8)

    def test_restock(self):
        response = self.client.post(f'/api/products/{self.product.id}/restock/', {'quantity': 12}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['new_quantity'], 20)
        self.assertEqual(response.data['message'], 'Successfully added 12 items to inventory')
        movement = self.product.movements.get()
        self.assertEqual(movement.movement_type, InventoryMovement.TYPE_RESTOCK)

    def test_restock_rejects_non_positive(self):
        response = self.client.post(f'/api/products/{self.product.id}/restock/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Please provide a valid quantity greater than zero')

    def test_adjust_inventory(self):
        data = {'adjustment': -3, 'reason': 'Damaged in storage'}
        response = self.client.post(f'/api/products/{self.product.id}/adjust-inventory/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['new_quantity'], 5)
        self.assertTrue(AuditLog.objects.filter(action='stock_adjust').exists())

    def test_adjust_cannot_go_negative(self):
        data = {'adjustment': -9, 'reason': 'Count correction'}
        response = self.client.post(f'/api/products/{self.product.id}/adjust-inventory/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Adjustment would result in negative inventory')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 8)

    def test_adjust_requires_reason(self):
        response = self.client.post(f'/api/products/{self.product.id}/adjust-inventory/',
                                    {'adjustment': 2, 'reason': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Please provide a reason for the adjustment')

    def test_inventory_history_newest_first(self):
        self.client.post(f'/api/products/{self.product.id}/restock/', {'quantity': 1}, format='json')
        self.client.post(f'/api/products/{self.product.id}/adjust-inventory/',
                         {'adjustment': -2, 'reason': 'Audit'}, format='json')
        response = self.client.get(f'/api/products/{self.product.id}/inventory-history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['current_quantity'], 7)
        history = response.data['inventory_history']
        self.assertEqual([entry['movement_type'] for entry in history], ['adjustment', 'restock'])

    def test_low_stock_report(self):
        TestDataFactory.create_product(quantity=0)
        TestDataFactory.create_product(quantity=100)
        response = self.client.get('/api/products/inventory/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['out_of_stock_count'], 1)
        self.assertEqual(response.data['low_stock_count'], 1)
        self.assertEqual(response.data['data'][0]['quantity'], 0)
