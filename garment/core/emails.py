"""Account emails: welcome, verification and password reset codes"""
import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _send(subject, message, recipient):
    send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [recipient], fail_silently=False)


def send_welcome_email(user):
    try:
        _send(
            'Welcome to the Garment Factory',
            f"Welcome to the Garment Factory portal. Your account has been created with email id: {user.email}",
            user.email,
        )
    except Exception as e:
        # Registration already succeeded
        logger.error(f"Failed to send welcome email to {user.email}: {str(e)}")


def send_verify_otp_email(user, otp):
    _send('Account Verification OTP', f"Your OTP is {otp}. Verify your account using this OTP.", user.email)


def send_reset_otp_email(user, otp):
    _send('Password Reset OTP', f"Your OTP for resetting your password is {otp}.", user.email)
