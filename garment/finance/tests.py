"""
Test suite for Finance module
Tests: summary figures, monthly trend, KPIs, cache invalidation and permissions
"""
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status

from garment.core.exceptions import DomainError
from garment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from garment.finance.services import growth, percentage, parse_period
from garment.orders.models import Order


class FinanceHelperTests(SimpleTestCase):

    def test_growth(self):
        self.assertEqual(growth(150, 100), 50.0)
        self.assertEqual(growth(50, 100), -50.0)
        self.assertEqual(growth(10, 0), 100)
        self.assertEqual(growth(0, 0), 100)

    def test_percentage(self):
        self.assertEqual(percentage(1, 3), 33.33)
        self.assertEqual(percentage(5, 0), 0)

    def test_parse_period(self):
        self.assertEqual(parse_period(), (None, None))
        start, end = parse_period('2024-01-01', '2024-01-31')
        self.assertEqual((start.day, end.day), (1, 31))
        with self.assertRaises(DomainError):
            parse_period('01/01/2024')


class FinanceAPITestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role='finance'))
        self.customer = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(price=Decimal('50.00'))

    def order(self, quantity, **extra):
        return TestDataFactory.create_order(self.customer, [(self.product, quantity)], **extra)


class FinancialSummaryTests(FinanceAPITestCase):

    def setUp(self):
        super().setUp()
        self.order(2, is_paid=True)
        self.order(1, order_status='Cancelled')
        self.order(4, order_status='Delivered', is_paid=True, payment_method=Order.PAYMENT_CREDIT_CARD)
        TestDataFactory.create_employee(department='Sewing').assign_salary(Decimal('80'), Decimal('30'), Decimal('10'))

    def test_summary(self):
        response = self.client.get('/api/finance/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['financial_summary']

        orders = summary['orders']
        self.assertEqual(orders['total_potential_revenue'], 350.0)
        self.assertEqual(orders['active_revenue'], 300.0)
        self.assertEqual(orders['paid_revenue'], 300.0)
        self.assertEqual(orders['delivered_revenue'], 200.0)
        self.assertEqual(orders['cancelled_revenue'], 50.0)
        self.assertEqual(orders['order_count'], 3)
        self.assertEqual(orders['active_order_count'], 2)
        self.assertEqual(orders['order_count_by_status'], {'Pending': 1, 'Cancelled': 1, 'Delivered': 1})
        self.assertEqual(orders['revenue_by_payment_method'][Order.PAYMENT_CREDIT_CARD], 200.0)
        self.assertEqual(orders['payment_summary']['paid_percentage'], 100.0)

        salaries = summary['salaries']
        self.assertEqual(salaries['total_salaries'], 100.0)
        self.assertEqual(salaries['employee_count'], 1)
        self.assertEqual(salaries['department_salaries'], {'Sewing': 100.0})

        overview = summary['overview']
        self.assertEqual(overview['total_revenue'], 350.0)
        self.assertEqual(overview['total_expenses'], 100.0)
        self.assertEqual(overview['profit_loss'], 250.0)
        self.assertEqual(overview['profit_margin'], 71.43)

    def test_summary_for_empty_period(self):
        start = (timezone.localdate() + timedelta(days=5)).isoformat()
        response = self.client.get('/api/finance/summary/', {'start_date': start})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        overview = response.data['financial_summary']['overview']
        self.assertEqual(overview['total_revenue'], 0)
        self.assertEqual(overview['profit_margin'], 0)
        self.assertEqual(response.data['financial_summary']['period']['start_date'], start)

    def test_summary_invalid_date(self):
        response = self.client.get('/api/finance/summary/', {'end_date': 'last-week'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_new_order_invalidates_cached_summary(self):
        self.client.get('/api/finance/summary/')
        self.order(1)
        response = self.client.get('/api/finance/summary/')
        self.assertEqual(response.data['financial_summary']['orders']['order_count'], 4)

    def test_monthly(self):
        response = self.client.get('/api/finance/monthly/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        months = response.data['monthly_data']
        self.assertEqual(len(months), 12)
        current = months[-1]
        self.assertEqual(current['month'], timezone.localdate().strftime('%b %Y'))
        self.assertEqual(current['revenue'], 350.0)
        self.assertEqual(current['paid_revenue'], 300.0)
        self.assertEqual(current['expenses'], 100.0)
        self.assertEqual(current['profit'], 250.0)
        self.assertEqual(current['order_count'], 3)
        self.assertEqual(months[0]['revenue'], 0)


class FinancialKPITests(FinanceAPITestCase):

    def test_growth_against_previous_period(self):
        self.order(2)
        older = self.order(1)
        Order.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=40))
        cache.clear()

        response = self.client.get('/api/finance/kpis/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        kpis = response.data['kpis']
        self.assertEqual(kpis['revenue'], {'current': 100.0, 'previous': 50.0, 'growth': 100.0})
        self.assertEqual(kpis['orders'], {'current': 1, 'previous': 1, 'growth': 0.0})

    def test_growth_without_previous_period(self):
        self.order(1)
        kpis = self.client.get('/api/finance/kpis/').data['kpis']
        self.assertEqual(kpis['revenue']['growth'], 100)
        self.assertEqual(kpis['orders']['growth'], 100)

    def test_profit_and_headcount(self):
        self.order(3)
        TestDataFactory.create_employee().assign_salary(Decimal('100'))
        inactive = TestDataFactory.create_employee(status='inactive')
        inactive.assign_salary(Decimal('20'))

        kpis = self.client.get('/api/finance/kpis/').data['kpis']
        self.assertEqual(kpis['employees'], 1)
        self.assertEqual(kpis['salary_expense'], 120.0)
        self.assertEqual(kpis['profit'], {'amount': 30.0, 'margin': 20.0})


class FinancePermissionTests(TestCase):

    def test_requires_finance_capability(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(role='manager'))
        for url in ('/api/finance/summary/', '/api/finance/monthly/', '/api/finance/kpis/'):
            self.assertEqual(client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_requires_login(self):
        response = AuthenticatedAPIClient().get('/api/finance/kpis/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
