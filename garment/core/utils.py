"""Utility functions for audit logging, response envelopes and one-time codes"""
import logging
import secrets

from rest_framework.response import Response

from .models import AuditLog

logger = logging.getLogger(__name__)


def success_response(status_code=200, **payload):
    """Build the ``{success: true, ...}`` envelope the frontend expects"""
    return Response({'success': True, **payload}, status=status_code)


def error_response(message, status_code=400, **extra):
    """Build the ``{success: false, message}`` envelope"""
    return Response({'success': False, 'message': message, **extra}, status=status_code)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def generate_otp():
    """Six-digit numeric one-time code"""
    return f"{secrets.randbelow(900000) + 100000}"


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, order_status, salary_assign, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    try:
        return AuditLog.objects.create(
            user=audit_user if audit_user is not None and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # The audited operation has already succeeded; a lost audit row is only logged
        logger.error(f"Failed to create audit log: {str(e)}")
        return None
