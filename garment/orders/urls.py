from django.urls import path
from .views import (
    order_list_create, my_orders, order_stats, total_price_summation,
    order_detail, order_pay, order_deliver, order_update_status, order_cancel,
)

urlpatterns = [
    path('', order_list_create, name='order-list-create'),
    path('myorders/', my_orders, name='order-my-orders'),
    path('stats/', order_stats, name='order-stats'),
    path('income/', order_stats, name='order-income'),
    path('total-price-summation/', total_price_summation, name='order-total-price-summation'),
    path('<int:pk>/', order_detail, name='order-detail'),
    path('<int:pk>/pay/', order_pay, name='order-pay'),
    path('<int:pk>/deliver/', order_deliver, name='order-deliver'),
    path('<int:pk>/status/', order_update_status, name='order-update-status'),
    path('<int:pk>/cancel/', order_cancel, name='order-cancel'),
]
