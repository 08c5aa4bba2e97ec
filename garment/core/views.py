import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import ProtectedError
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .emails import send_welcome_email, send_verify_otp_email, send_reset_otp_email
from .models import AuditLog
from .permissions import IsDashboardUser
from .serializers import (
    UserSerializer, RegisterSerializer, ProfileUpdateSerializer, PasswordUpdateSerializer,
    OtpSerializer, EmailSerializer, ResetPasswordSerializer,
    CustomTokenObtainPairSerializer, CustomTokenRefreshSerializer, AuditLogSerializer,
)
from .utils import success_response, error_response, generate_otp

User = get_user_model()
logger = logging.getLogger('garment.core')


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """Reachability ping used by clients before checking auth"""
    return success_response(
        message='Authentication server is running',
        timestamp=timezone.now().isoformat(),
    )


class CustomTokenObtainPairView(TokenObtainPairView):
    """Email/password login returning the JWT pair inside the success envelope"""
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        response.data = {'success': True, **response.data}
        return response


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


def _issue_tokens(user):
    token = CustomTokenObtainPairSerializer.get_token(user)
    return {'access': str(token.access_token), 'refresh': str(token)}


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    email = request.data.get('email')
    if email and User.objects.filter(email__iexact=User.objects.normalize_email(email)).exists():
        return error_response('User already exists')

    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info(f"Registered user {user.email} with role {user.role}")
    send_welcome_email(user)

    return success_response(
        status.HTTP_201_CREATED,
        message='User registered successfully',
        role=user.role,
        user=UserSerializer(user).data,
        **_issue_tokens(user),
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    """Tokens are stateless; the client drops them"""
    return success_response(message='Logged Out')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def is_authenticated(request):
    return success_response(user=UserSerializer(request.user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_verify_otp(request):
    user = request.user
    if user.is_account_verified:
        return error_response('Account already verified')

    user.verify_otp = generate_otp()
    user.verify_otp_expires_at = timezone.now() + settings.VERIFY_OTP_TTL
    user.save(update_fields=['verify_otp', 'verify_otp_expires_at', 'updated_at'])
    send_verify_otp_email(user, user.verify_otp)
    return success_response(message='Verification OTP sent to email')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def verify_account(request):
    serializer = OtpSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = request.user

    if not user.verify_otp or user.verify_otp != serializer.validated_data['otp']:
        return error_response('Invalid OTP')
    if user.verify_otp_expires_at is None or user.verify_otp_expires_at < timezone.now():
        return error_response('OTP expired')

    user.is_account_verified = True
    user.verify_otp = ''
    user.verify_otp_expires_at = None
    user.save(update_fields=['is_account_verified', 'verify_otp', 'verify_otp_expires_at', 'updated_at'])
    return success_response(message='Email verified successfully')


@api_view(['POST'])
@permission_classes([AllowAny])
def send_reset_otp(request):
    serializer = EmailSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = User.objects.filter(email__iexact=serializer.validated_data['email']).first()
    if user is None:
        return error_response('User not found', status.HTTP_404_NOT_FOUND)

    user.reset_otp = generate_otp()
    user.reset_otp_expires_at = timezone.now() + settings.RESET_OTP_TTL
    user.save(update_fields=['reset_otp', 'reset_otp_expires_at', 'updated_at'])
    send_reset_otp_email(user, user.reset_otp)
    return success_response(message='OTP sent to your email')


@api_view(['POST'])
@permission_classes([AllowAny])
def reset_password(request):
    serializer = ResetPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    user = User.objects.filter(email__iexact=data['email']).first()
    if user is None:
        return error_response('User not found', status.HTTP_404_NOT_FOUND)

    if not user.reset_otp or user.reset_otp != data['otp']:
        return error_response('Invalid OTP')
    if user.reset_otp_expires_at is None or user.reset_otp_expires_at < timezone.now():
        return error_response('OTP expired')

    user.set_password(data['new_password'])
    user.reset_otp = ''
    user.reset_otp_expires_at = None
    user.save()
    logger.info(f"Password reset for {user.email}")
    return success_response(message='Password has been reset successfully')


# Profile views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_data(request):
    user = request.user
    return success_response(user_data={
        'name': user.name,
        'is_account_verified': user.is_account_verified,
    })


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def profile(request):
    """Retrieve, update or delete the caller's own account"""
    user = request.user

    if request.method == 'GET':
        return success_response(user=UserSerializer(user).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success_response(message='Profile updated successfully', user=UserSerializer(user).data)
    else:  # DELETE
        try:
            user.delete()
        except ProtectedError:
            return error_response('Accounts with orders cannot be deleted')
        logger.info(f"Account deleted: {user.email}")
        return success_response(message='Account deleted successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def update_password(request):
    serializer = PasswordUpdateSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    request.user.set_password(serializer.validated_data['new_password'])
    request.user.save()
    return success_response(message='Password updated successfully')


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDashboardUser])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action')
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model')
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from')
    date_to = request.query_params.get('date_to')
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    serializer = AuditLogSerializer(queryset.order_by('-created_at')[:500], many=True)
    return Response({'success': True, 'count': len(serializer.data), 'logs': serializer.data})
