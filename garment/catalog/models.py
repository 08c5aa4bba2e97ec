from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """Finished garments and fabric rolls held in stock"""
    CATEGORY_PRODUCT = 'product'
    CATEGORY_FABRIC = 'fabric'
    CATEGORY_CHOICES = [
        (CATEGORY_PRODUCT, 'Product'),
        (CATEGORY_FABRIC, 'Fabric'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    image = models.URLField(max_length=500)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=CATEGORY_PRODUCT, db_index=True)
    quantity = models.IntegerField(default=0)
    # Fabric only
    color = models.CharField(max_length=100, blank=True)
    fabric_type = models.CharField(max_length=100, blank=True)
    featured = models.BooleanField(default=False)
    low_stock_threshold = models.IntegerField(default=10)
    reorder_point = models.IntegerField(default=5)
    is_low_stock = models.BooleanField(default=False, db_index=True)
    is_out_of_stock = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.get_category_display()})"

    def clean(self):
        if self.category == self.CATEGORY_FABRIC and (not self.color or not self.fabric_type):
            raise ValidationError('Color and fabric type are required for fabrics')

    def refresh_stock_flags(self):
        self.is_out_of_stock = self.quantity <= 0
        self.is_low_stock = 0 < self.quantity <= self.low_stock_threshold

    def save(self, *args, **kwargs):
        self.refresh_stock_flags()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'quantity' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'is_low_stock', 'is_out_of_stock'}
        super().save(*args, **kwargs)

    def track_inventory_change(self, movement_type, quantity, reference, reference_id='', notes=''):
        """
        Apply a signed quantity change and record it in the movement history.
        Callers hold the row lock (``select_for_update``) inside a transaction.
        """
        previous_quantity = self.quantity
        self.quantity = previous_quantity + quantity
        self.save(update_fields=['quantity', 'updated_at'])
        return InventoryMovement.objects.create(
            product=self,
            movement_type=movement_type,
            quantity=quantity,
            reference=reference,
            reference_id=str(reference_id),
            notes=notes,
            previous_quantity=previous_quantity,
            new_quantity=self.quantity,
        )

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['category', 'price'], name='idx_product_category_price'),
        ]


class InventoryMovement(models.Model):
    """Stock movement history per product"""
    TYPE_ORDER = 'order'
    TYPE_RESTOCK = 'restock'
    TYPE_ADJUSTMENT = 'adjustment'
    TYPE_RETURN = 'return'
    TYPE_CHOICES = [
        (TYPE_ORDER, 'Order'),
        (TYPE_RESTOCK, 'Restock'),
        (TYPE_ADJUSTMENT, 'Adjustment'),
        (TYPE_RETURN, 'Return'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='movements')
    movement_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    quantity = models.IntegerField()  # negative for reductions
    reference = models.CharField(max_length=255)
    reference_id = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    previous_quantity = models.IntegerField()
    new_quantity = models.IntegerField()
    date = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.product.name}: {self.quantity:+d} ({self.movement_type})"

    class Meta:
        db_table = 'inventory_movements'
        ordering = ['-date', '-id']
