from decimal import Decimal

from django.conf import settings
from django.db import models

from garment.catalog.models import Product
from .status import OrderStatus, status_choices, status_badge


class Order(models.Model):
    """Customer order; never deleted, only cancelled"""
    PAYMENT_CREDIT_CARD = 'Credit Card'
    PAYMENT_CASH_ON_DELIVERY = 'Cash on Delivery'
    PAYMENT_BANK_TRANSFER = 'Bank Transfer'
    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_CREDIT_CARD, 'Credit Card'),
        (PAYMENT_CASH_ON_DELIVERY, 'Cash on Delivery'),
        (PAYMENT_BANK_TRANSFER, 'Bank Transfer'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')
    # Shipping address
    full_name = models.CharField(max_length=150)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=100)
    phone_number = models.CharField(max_length=30)

    payment_method = models.CharField(max_length=30, choices=PAYMENT_METHOD_CHOICES)
    payment_id = models.CharField(max_length=100, blank=True)
    payment_status = models.CharField(max_length=50, blank=True)
    payment_update_time = models.CharField(max_length=50, blank=True)
    payment_email = models.EmailField(blank=True)

    items_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipping_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    is_paid = models.BooleanField(default=False, db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    is_delivered = models.BooleanField(default=False, db_index=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    order_status = models.CharField(
        max_length=20, choices=status_choices(), default=OrderStatus.PENDING.value, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Order #{self.pk} - {self.full_name} ({self.order_status})"

    @property
    def badge(self):
        return status_badge(self.order_status)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['order_status', 'created_at'], name='idx_order_status_created'),
            models.Index(fields=['is_paid', 'created_at'], name='idx_order_paid_created'),
        ]


class OrderItem(models.Model):
    """Line item of an order; price and name are copied from the product at order time"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, related_name='order_items')
    name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=20, choices=Product.CATEGORY_CHOICES, default=Product.CATEGORY_PRODUCT)
    fabric_measurement = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    image = models.URLField(max_length=500)

    def __str__(self):
        return f"{self.name} x {self.quantity}"

    @property
    def line_total(self):
        return self.price * self.quantity

    class Meta:
        db_table = 'order_items'
