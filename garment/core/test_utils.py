"""
Test utilities and factories for creating test data
"""
from decimal import Decimal
import random
import string

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from garment.catalog.models import Product
from garment.employees.models import Employee
from garment.orders.models import Order, OrderItem

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', role='user', name=None, **extra):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6)}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            name=name or 'Test User',
            role=role,
            **extra
        )

    @staticmethod
    def create_product(name=None, price=Decimal('100.00'), quantity=50, category='product', **extra):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if category == 'fabric':
            extra.setdefault('color', 'Blue')
            extra.setdefault('fabric_type', 'Cotton')
        return Product.objects.create(
            name=name,
            description=f'Test product {name}',
            price=price,
            image='https://example.com/image.jpg',
            category=category,
            quantity=quantity,
            **extra
        )

    @staticmethod
    def create_order(user, items=None, order_status='Pending', total_price=None, is_paid=False, **extra):
        """
        Create an order directly, bypassing stock checks.
        ``items`` is a list of ``(product, quantity)`` pairs.
        """
        items = items or []
        if total_price is None:
            total_price = sum((product.price * quantity for product, quantity in items), Decimal('0'))
        order = Order.objects.create(
            user=user,
            full_name=extra.pop('full_name', 'Test Customer'),
            address=extra.pop('address', '1 Test Street'),
            city='Colombo',
            postal_code='10100',
            country='Sri Lanka',
            phone_number='0771234567',
            payment_method=extra.pop('payment_method', Order.PAYMENT_CASH_ON_DELIVERY),
            items_price=total_price,
            total_price=total_price,
            order_status=order_status,
            is_paid=is_paid,
            **extra
        )
        for product, quantity in items:
            OrderItem.objects.create(
                order=order,
                product=product,
                name=product.name,
                quantity=quantity,
                price=product.price,
                category=product.category,
                image=product.image,
            )
        return order

    @staticmethod
    def create_employee(employee_id=None, department='Production', **extra):
        """Create a test employee"""
        if not employee_id:
            employee_id = f'EMP{TestDataFactory.random_string(5).upper()}'
        return Employee.objects.create(
            employee_id=employee_id,
            name=extra.pop('name', 'Test Employee'),
            email=extra.pop('email', f'{employee_id.lower()}@factory.test'),
            department=department,
            position=extra.pop('position', 'Operator'),
            attend_time='08:00',
            leave_time='17:00',
            **extra
        )

    @staticmethod
    def order_payload(product, quantity=1, **overrides):
        """Checkout request body for one product"""
        payload = {
            'order_items': [{
                'product': product.id,
                'name': product.name,
                'quantity': quantity,
                'price': str(product.price),
                'category': product.category,
                'image': product.image,
            }],
            'shipping_address': {
                'full_name': 'Test Customer',
                'address': '1 Test Street',
                'city': 'Colombo',
                'postal_code': '10100',
                'country': 'Sri Lanka',
                'phone_number': '0771234567',
            },
            'payment_method': 'Cash on Delivery',
            'items_price': str(product.price * quantity),
            'tax_price': '0.00',
            'shipping_price': '0.00',
            'total_price': str(product.price * quantity),
        }
        payload.update(overrides)
        return payload


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
