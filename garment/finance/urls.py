from django.urls import path
from .views import financial_summary, monthly_finance, financial_kpis

urlpatterns = [
    path('summary/', financial_summary, name='finance-summary'),
    path('monthly/', monthly_finance, name='finance-monthly'),
    path('kpis/', financial_kpis, name='finance-kpis'),
]
