from django.urls import path
from .views import (
    employee_list_create, employee_detail, employee_deactivate,
    employee_salary, salary_report,
)

urlpatterns = [
    path('', employee_list_create, name='employee-list-create'),
    path('salary/report/', salary_report, name='employee-salary-report'),
    path('<int:pk>/', employee_detail, name='employee-detail'),
    path('<int:pk>/deactivate/', employee_deactivate, name='employee-deactivate'),
    path('<int:pk>/salary/', employee_salary, name='employee-salary'),
]
