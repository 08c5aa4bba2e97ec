from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ObjectDoesNotExist
from rest_framework import serializers
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from .models import User, AuditLog
from .roles import Capability, Role, has_capability, is_admin_email


class UserSerializer(serializers.ModelSerializer):
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'phone', 'address', 'is_account_verified',
                  'is_active', 'capabilities', 'created_at', 'updated_at']
        read_only_fields = ['role', 'is_account_verified', 'is_active', 'created_at', 'updated_at']

    def get_capabilities(self, obj):
        return [capability.value for capability in Capability if has_capability(obj.role, capability)]


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])

    class Meta:
        model = User
        fields = ['name', 'email', 'password']

    def validate_email(self, value):
        return User.objects.normalize_email(value)

    def create(self, validated_data):
        email = validated_data['email']
        role = Role.ADMIN if is_admin_email(email, settings.ADMIN_EMAIL_PATTERN) else Role.USER
        return User.objects.create_user(
            email=email,
            password=validated_data['password'],
            name=validated_data['name'],
            role=role.value,
        )


class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['name', 'email', 'phone', 'address']

    def validate_email(self, value):
        value = User.objects.normalize_email(value)
        taken = User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists()
        if taken:
            raise serializers.ValidationError('Email is already in use')
        return value


class PasswordUpdateSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])

    def validate_current_password(self, value):
        if not self.context['request'].user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect')
        return value


class OtpSerializer(serializers.Serializer):
    otp = serializers.CharField(max_length=6)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(max_length=6)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    default_error_messages = {
        'no_active_account': 'Invalid email or password',
    }

    def validate(self, attrs):
        data = super().validate(attrs)
        # Accounts matching the admin pattern are promoted on login
        if is_admin_email(self.user.email, settings.ADMIN_EMAIL_PATTERN) and self.user.role != Role.ADMIN.value:
            self.user.role = Role.ADMIN.value
            self.user.save(update_fields=['role', 'updated_at'])
        data['role'] = self.user.role
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['name'] = user.name
        token['role'] = user.role
        return token


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that answers 401 instead of 500 when the user was deleted"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
