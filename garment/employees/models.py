from decimal import Decimal

from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models
from django.utils import timezone

TIME_VALIDATOR = RegexValidator(
    regex=r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$',
    message='Please enter a valid time in HH:MM format',
)


class Employee(models.Model):
    """Factory employee with the current salary breakdown"""
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    employee_id = models.CharField(max_length=20, unique=True, validators=[MinLengthValidator(2)])
    name = models.CharField(max_length=50, validators=[MinLengthValidator(2)])
    email = models.EmailField(unique=True)
    department = models.CharField(max_length=100, db_index=True)
    position = models.CharField(max_length=100)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    date = models.DateField(default=timezone.localdate)
    attend_time = models.CharField(max_length=5, validators=[TIME_VALIDATOR])
    leave_time = models.CharField(max_length=5, validators=[TIME_VALIDATOR])

    # Current salary; every change is also appended to SalaryRecord
    basic_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    net_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    salary_last_updated = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.employee_id} - {self.name}"

    def assign_salary(self, basic=None, allowances=None, deductions=None, note=''):
        """Set the current salary and append it to the history; missing parts count as zero"""
        basic = basic or Decimal('0')
        allowances = allowances or Decimal('0')
        deductions = deductions or Decimal('0')
        net_salary = basic + allowances - deductions
        now = timezone.now()

        self.basic_salary = basic
        self.allowances = allowances
        self.deductions = deductions
        self.net_salary = net_salary
        self.salary_last_updated = now
        self.save(update_fields=['basic_salary', 'allowances', 'deductions', 'net_salary',
                                 'salary_last_updated', 'updated_at'])
        return SalaryRecord.objects.create(
            employee=self,
            basic=basic,
            allowances=allowances,
            deductions=deductions,
            net_salary=net_salary,
            date=now,
            note=note or '',
        )

    class Meta:
        db_table = 'employees'
        ordering = ['-created_at', '-id']


class SalaryRecord(models.Model):
    """Append-only salary history"""
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='salary_history')
    basic = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    net_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    date = models.DateTimeField(default=timezone.now, db_index=True)
    note = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return f"{self.employee.employee_id}: {self.net_salary} on {self.date:%Y-%m-%d}"

    class Meta:
        db_table = 'salary_records'
        ordering = ['-date', '-id']
