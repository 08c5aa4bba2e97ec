from django.urls import path
from .views import (
    product_list_create, product_detail, product_low_stock,
    product_inventory_history, product_restock, product_adjust_inventory,
)

urlpatterns = [
    path('', product_list_create, name='product-list-create'),
    path('inventory/low-stock/', product_low_stock, name='product-low-stock'),
    path('<int:pk>/', product_detail, name='product-detail'),
    path('<int:pk>/inventory-history/', product_inventory_history, name='product-inventory-history'),
    path('<int:pk>/restock/', product_restock, name='product-restock'),
    path('<int:pk>/adjust-inventory/', product_adjust_inventory, name='product-adjust-inventory'),
]
