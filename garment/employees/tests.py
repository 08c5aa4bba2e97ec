"""
Test suite for Employees module
Tests: employee CRUD, validation messages, deactivation, salary assignment and reports
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from garment.core.models import AuditLog
from garment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from garment.employees.models import Employee, SalaryRecord


class EmployeeModelTests(TestCase):
    """Test salary assignment on the model"""

    def test_assign_salary_computes_net_and_history(self):
        employee = TestDataFactory.create_employee()
        record = employee.assign_salary(Decimal('50000'), Decimal('5000'), Decimal('2500'), note='Annual review')
        employee.refresh_from_db()
        self.assertEqual(employee.net_salary, Decimal('52500'))
        self.assertIsNotNone(employee.salary_last_updated)
        self.assertEqual(record.net_salary, Decimal('52500'))
        self.assertEqual(employee.salary_history.count(), 1)

    def test_missing_parts_count_as_zero(self):
        employee = TestDataFactory.create_employee()
        employee.assign_salary(basic=Decimal('30000'))
        employee.refresh_from_db()
        self.assertEqual(employee.allowances, Decimal('0'))
        self.assertEqual(employee.net_salary, Decimal('30000'))


class EmployeeAPITests(TestCase):
    """Test employee endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role='manager'))
        self.data = {
            'employee_id': 'EMP001',
            'name': 'Nimal Silva',
            'email': 'Nimal@Factory.test',
            'department': 'Cutting',
            'position': 'Cutter',
            'date': '2024-03-01',
            'attend_time': '08:00',
            'leave_time': '17:30',
        }

    def test_create_employee(self):
        response = self.client.post('/api/employees/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Employee added successfully')
        employee = response.data['employee']
        self.assertEqual(employee['email'], 'nimal@factory.test')
        self.assertEqual(employee['status'], 'active')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Employee').exists())

    def test_new_employee_is_always_active(self):
        self.data['status'] = 'inactive'
        response = self.client.post('/api/employees/', self.data, format='json')
        self.assertEqual(response.data['employee']['status'], 'active')

    def test_duplicate_employee_id(self):
        TestDataFactory.create_employee(employee_id='EMP001')
        response = self.client.post('/api/employees/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Employee with this ID already exists')

    def test_short_name(self):
        self.data['name'] = 'N'
        response = self.client.post('/api/employees/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Name must be between 2 and 50 characters')

    def test_invalid_time(self):
        self.data['attend_time'] = '25:00'
        response = self.client.post('/api/employees/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Please enter a valid time in HH:MM format')

    def test_list_employees(self):
        TestDataFactory.create_employee()
        TestDataFactory.create_employee()
        response = self.client.get('/api/employees/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['employees']), 2)

    def test_update_ignores_status(self):
        employee = TestDataFactory.create_employee()
        response = self.client.patch(f'/api/employees/{employee.id}/',
                                     {'position': 'Supervisor', 'status': 'inactive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        employee.refresh_from_db()
        self.assertEqual(employee.position, 'Supervisor')
        self.assertEqual(employee.status, Employee.STATUS_ACTIVE)

    def test_deactivate(self):
        employee = TestDataFactory.create_employee()
        response = self.client.put(f'/api/employees/{employee.id}/deactivate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['employee']['status'], 'inactive')

    def test_delete(self):
        employee = TestDataFactory.create_employee()
        response = self.client.delete(f'/api/employees/{employee.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Employee.objects.filter(pk=employee.id).exists())

    def test_missing_employee(self):
        response = self.client.delete('/api/employees/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Employee not found')

    def test_requires_capability(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='sales'))
        response = self.client.get('/api/employees/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class SalaryAPITests(TestCase):
    """Test salary assignment, history and the salary report"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role='admin'))
        self.employee = TestDataFactory.create_employee(employee_id='EMP100', department='Sewing')

    def test_assign_salary(self):
        data = {'basic': '1000', 'allowances': '200', 'deductions': '50', 'note': 'Initial'}
        response = self.client.post(f'/api/employees/{self.employee.id}/salary/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Salary assigned successfully')
        self.assertEqual(response.data['employee']['current_salary']['net_salary'], Decimal('1150'))
        self.assertEqual(SalaryRecord.objects.filter(employee=self.employee).count(), 1)

    def test_negative_salary_rejected(self):
        response = self.client.post(f'/api/employees/{self.employee.id}/salary/', {'basic': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(SalaryRecord.objects.exists())

    def test_salary_history_newest_first(self):
        self.employee.assign_salary(Decimal('1000'))
        self.employee.assign_salary(Decimal('1500'))
        response = self.client.get(f'/api/employees/{self.employee.id}/salary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        history = response.data['salary_history']
        self.assertEqual(len(history), 2)
        self.assertEqual(history[0]['basic'], Decimal('1500'))
        self.assertEqual(response.data['current_salary']['basic'], Decimal('1500'))

    def test_salary_report(self):
        self.employee.assign_salary(Decimal('1000'), Decimal('100'), Decimal('50'))
        other = TestDataFactory.create_employee(employee_id='EMP200', department='Cutting')
        other.assign_salary(Decimal('2000'))
        TestDataFactory.create_employee(employee_id='EMP300')

        response = self.client.get('/api/employees/salary/report/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        report = response.data['report']
        self.assertEqual([e['employee_id'] for e in report['employees']], ['EMP100', 'EMP200'])
        summary = report['summary']
        self.assertEqual(summary['total_employees'], 2)
        self.assertEqual(summary['total_basic'], Decimal('3000'))
        self.assertEqual(summary['total_net_salary'], Decimal('3050'))

    def test_salary_report_by_department(self):
        self.employee.assign_salary(Decimal('1000'))
        TestDataFactory.create_employee(department='Cutting').assign_salary(Decimal('2000'))
        response = self.client.get('/api/employees/salary/report/', {'department': 'Sewing'})
        self.assertEqual(response.data['report']['summary']['total_employees'], 1)
