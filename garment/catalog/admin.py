from django.contrib import admin
from .models import Product, InventoryMovement


class InventoryMovementInline(admin.TabularInline):
    model = InventoryMovement
    extra = 0
    readonly_fields = ['movement_type', 'quantity', 'reference', 'reference_id', 'notes',
                       'previous_quantity', 'new_quantity', 'date']
    can_delete = False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'price', 'quantity', 'is_low_stock', 'is_out_of_stock', 'featured', 'created_at']
    list_filter = ['category', 'featured', 'is_low_stock', 'is_out_of_stock', 'created_at']
    search_fields = ['name', 'description', 'color', 'fabric_type']
    ordering = ['-created_at']
    readonly_fields = ['is_low_stock', 'is_out_of_stock', 'created_at', 'updated_at']
    inlines = [InventoryMovementInline]


@admin.register(InventoryMovement)
class InventoryMovementAdmin(admin.ModelAdmin):
    list_display = ['product', 'movement_type', 'quantity', 'previous_quantity', 'new_quantity', 'reference', 'date']
    list_filter = ['movement_type', 'date']
    search_fields = ['product__name', 'reference', 'reference_id']
    ordering = ['-date']
    readonly_fields = ['date']
