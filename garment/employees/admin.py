from django.contrib import admin
from .models import Employee, SalaryRecord


class SalaryRecordInline(admin.TabularInline):
    model = SalaryRecord
    extra = 0
    readonly_fields = ['basic', 'allowances', 'deductions', 'net_salary', 'date', 'note']
    can_delete = False


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['employee_id', 'name', 'email', 'department', 'position', 'status', 'net_salary', 'created_at']
    list_filter = ['status', 'department', 'created_at']
    search_fields = ['employee_id', 'name', 'email']
    ordering = ['employee_id']
    readonly_fields = ['net_salary', 'salary_last_updated', 'created_at', 'updated_at']
    inlines = [SalaryRecordInline]


@admin.register(SalaryRecord)
class SalaryRecordAdmin(admin.ModelAdmin):
    list_display = ['employee', 'basic', 'allowances', 'deductions', 'net_salary', 'date']
    list_filter = ['date']
    search_fields = ['employee__employee_id', 'employee__name']
    ordering = ['-date']
