"""
URL configuration for the garment factory backend.

Every app mounts its routes under ``api/``; the bare root answers the
frontend's reachability ping.
"""
from django.contrib import admin
from django.urls import path, include

from garment.core.views import health

admin.site.site_header = "Garment Factory Management Admin Panel"
admin.site.site_title = "Garment Factory Admin Portal"
admin.site.index_title = "Welcome to the Garment Factory Admin Portal"

urlpatterns = [
    path('', health, name='health'),
    path('admin/', admin.site.urls),
    path('api/', include('garment.core.urls')),
    path('api/products/', include('garment.catalog.urls')),
    path('api/orders/', include('garment.orders.urls')),
    path('api/employees/', include('garment.employees.urls')),
    path('api/finance/', include('garment.finance.urls')),
]
