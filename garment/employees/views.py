import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from garment.core.permissions import IsEmployeeManager
from garment.core.utils import success_response, error_response, create_audit_log
from .models import Employee
from .serializers import (
    EmployeeSerializer, SalaryRecordSerializer, SalaryAssignSerializer,
    SalaryReportEmployeeSerializer, current_salary,
)

logger = logging.getLogger('garment.employees')


def _get_employee(pk):
    return Employee.objects.filter(pk=pk).first()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsEmployeeManager])
def employee_list_create(request):
    if request.method == 'GET':
        employees = Employee.objects.all().order_by('-created_at', '-id')
        return success_response(employees=EmployeeSerializer(employees, many=True).data)

    serializer = EmployeeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    # New employees always start active
    employee = serializer.save(status=Employee.STATUS_ACTIVE)
    logger.info(f"Employee created: {employee.employee_id}")
    create_audit_log(request, 'create', 'Employee', employee.id, object_name=employee.employee_id)
    return success_response(
        status.HTTP_201_CREATED,
        message='Employee added successfully',
        employee=EmployeeSerializer(employee).data,
    )


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsEmployeeManager])
def employee_detail(request, pk):
    employee = _get_employee(pk)
    if employee is None:
        return error_response('Employee not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'DELETE':
        employee_id = employee.employee_id
        employee.delete()
        logger.info(f"Employee deleted: {employee_id}")
        create_audit_log(request, 'delete', 'Employee', pk, object_name=employee_id)
        return success_response(message='Employee deleted successfully')

    serializer = EmployeeSerializer(employee, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    # Status only changes through the deactivate endpoint
    serializer.validated_data.pop('status', None)
    employee = serializer.save()
    create_audit_log(request, 'update', 'Employee', employee.id,
                     changes={key: str(value) for key, value in serializer.validated_data.items()},
                     object_name=employee.employee_id)
    return success_response(message='Employee updated successfully', employee=EmployeeSerializer(employee).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsEmployeeManager])
def employee_deactivate(request, pk):
    employee = _get_employee(pk)
    if employee is None:
        return error_response('Employee not found', status.HTTP_404_NOT_FOUND)

    employee.status = Employee.STATUS_INACTIVE
    employee.save(update_fields=['status', 'updated_at'])
    create_audit_log(request, 'update', 'Employee', employee.id,
                     changes={'status': Employee.STATUS_INACTIVE}, object_name=employee.employee_id)
    return success_response(message='Employee deactivated successfully', employee=EmployeeSerializer(employee).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsEmployeeManager])
def employee_salary(request, pk):
    """Salary history (GET) or assign a new salary (POST)"""
    employee = _get_employee(pk)
    if employee is None:
        return error_response('Employee not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        history = employee.salary_history.all().order_by('-date', '-id')
        return success_response(
            salary_history=SalaryRecordSerializer(history, many=True).data,
            current_salary=current_salary(employee),
        )

    serializer = SalaryAssignSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    with transaction.atomic():
        record = employee.assign_salary(**serializer.validated_data)

    logger.info(f"Salary assigned to {employee.employee_id}: net {record.net_salary}")
    create_audit_log(request, 'salary_assign', 'Employee', employee.id,
                     changes={
                         'basic': str(record.basic),
                         'allowances': str(record.allowances),
                         'deductions': str(record.deductions),
                         'net_salary': str(record.net_salary),
                     },
                     object_name=employee.employee_id)
    return success_response(message='Salary assigned successfully', employee=EmployeeSerializer(employee).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEmployeeManager])
def salary_report(request):
    """Current salaries of employees with a positive net salary, with totals"""
    employees = Employee.objects.filter(net_salary__gt=0)

    department = request.query_params.get('department')
    if department:
        employees = employees.filter(department=department)

    start_date = _parse_report_date(request.query_params.get('start_date'))
    end_date = _parse_report_date(request.query_params.get('end_date'))
    if start_date:
        employees = employees.filter(salary_last_updated__date__gte=start_date)
    if end_date:
        employees = employees.filter(salary_last_updated__date__lte=end_date)

    totals = employees.aggregate(
        total_basic=Sum('basic_salary'),
        total_allowances=Sum('allowances'),
        total_deductions=Sum('deductions'),
        total_net_salary=Sum('net_salary'),
    )
    summary = {key: value or Decimal('0') for key, value in totals.items()}
    summary['total_employees'] = employees.count()
    summary['generated_at'] = timezone.now()

    return success_response(report={
        'employees': SalaryReportEmployeeSerializer(employees.order_by('employee_id'), many=True).data,
        'summary': summary,
    })


def _parse_report_date(value):
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None
