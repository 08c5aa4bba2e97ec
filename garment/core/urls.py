from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView,
    health, register, logout, is_authenticated,
    send_verify_otp, verify_account, send_reset_otp, reset_password,
    user_data, profile, update_password,
    audit_log_list,
)

urlpatterns = [
    # Auth endpoints
    path('auth/ping/', health, name='auth-ping'),
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/logout/', logout, name='logout'),
    path('auth/is-auth/', is_authenticated, name='is-auth'),
    path('auth/profile/', profile, name='auth-profile'),

    # Email verification and password recovery
    path('auth/send-verify-otp/', send_verify_otp, name='send-verify-otp'),
    path('auth/verify-account/', verify_account, name='verify-account'),
    path('auth/send-reset-otp/', send_reset_otp, name='send-reset-otp'),
    path('auth/reset-password/', reset_password, name='reset-password'),

    # Profile endpoints
    path('user/data/', user_data, name='user-data'),
    path('user/profile/', profile, name='user-profile'),
    path('user/update-password/', update_password, name='update-password'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]
