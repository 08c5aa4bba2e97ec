from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from .models import Employee, SalaryRecord, TIME_VALIDATOR


class EmployeeSerializer(serializers.ModelSerializer):
    employee_id = serializers.CharField(
        min_length=2,
        max_length=20,
        validators=[UniqueValidator(
            queryset=Employee.objects.all(),
            message='Employee with this ID already exists',
        )],
        error_messages={
            'blank': 'Employee ID is required',
            'required': 'Employee ID is required',
            'min_length': 'Employee ID must be between 2 and 20 characters',
            'max_length': 'Employee ID must be between 2 and 20 characters',
        },
    )
    name = serializers.CharField(min_length=2, max_length=50, error_messages={
        'blank': 'Name is required',
        'required': 'Name is required',
        'min_length': 'Name must be between 2 and 50 characters',
        'max_length': 'Name must be between 2 and 50 characters',
    })
    email = serializers.EmailField(
        validators=[UniqueValidator(
            queryset=Employee.objects.all(),
            message='Employee with this email already exists',
            lookup='iexact',
        )],
        error_messages={
            'blank': 'Email is required',
            'required': 'Email is required',
            'invalid': 'Please enter a valid email address',
        },
    )
    date = serializers.DateField(error_messages={
        'required': 'Date is required',
        'invalid': 'Please enter a valid date',
    })
    attend_time = serializers.CharField(validators=[TIME_VALIDATOR], error_messages={
        'blank': 'Attend time is required',
        'required': 'Attend time is required',
    })
    leave_time = serializers.CharField(validators=[TIME_VALIDATOR], error_messages={
        'blank': 'Leave time is required',
        'required': 'Leave time is required',
    })
    department = serializers.CharField(max_length=100, error_messages={
        'blank': 'Department is required',
        'required': 'Department is required',
    })
    position = serializers.CharField(max_length=100, error_messages={
        'blank': 'Position is required',
        'required': 'Position is required',
    })
    status = serializers.ChoiceField(choices=Employee.STATUS_CHOICES, required=False, error_messages={
        'invalid_choice': 'Status must be either active or inactive',
    })
    current_salary = serializers.SerializerMethodField()

    class Meta:
        model = Employee
        fields = ['id', 'employee_id', 'name', 'email', 'department', 'position', 'status', 'date',
                  'attend_time', 'leave_time', 'current_salary', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_email(self, value):
        return value.strip().lower()

    def get_current_salary(self, obj):
        return current_salary(obj)


def current_salary(employee):
    return {
        'basic': employee.basic_salary,
        'allowances': employee.allowances,
        'deductions': employee.deductions,
        'net_salary': employee.net_salary,
        'last_updated': employee.salary_last_updated,
    }


class SalaryRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = SalaryRecord
        fields = ['id', 'basic', 'allowances', 'deductions', 'net_salary', 'date', 'note']


class SalaryAssignSerializer(serializers.Serializer):
    basic = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    allowances = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    deductions = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    note = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class SalaryReportEmployeeSerializer(serializers.ModelSerializer):
    salary = serializers.SerializerMethodField()

    class Meta:
        model = Employee
        fields = ['id', 'employee_id', 'name', 'email', 'department', 'position', 'salary']

    def get_salary(self, obj):
        return current_salary(obj)
