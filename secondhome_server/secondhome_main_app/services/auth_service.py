"""Authentication service - OTP, registration, password logic"""
import logging
import re
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import get_random_string
from rest_framework_simplejwt.tokens import RefreshToken

from ..models import OTP, OTPAttempt, Profile
from ..utils.constants import UserRole, OTPPurpose, BusinessRules
from ..utils.email_utils import email_configured, send_email
from ..utils.twilio_otp import send_otp_via_twilio, TWILIO_UNVERIFIED_NUMBER_CODE
from ..utils.validators import (
    normalize_email, is_valid_email, normalize_phone, is_valid_phone,
)

logger = logging.getLogger(__name__)

OTP_SUBJECTS = {
    OTPPurpose.REGISTRATION: 'Verify your Second Home account',
    OTPPurpose.LOGIN: 'Your Second Home login code',
    OTPPurpose.PASSWORD_RESET: 'Reset your Second Home password',
}


def _error(message, status_code):
    return {'success': False, 'error': message, 'status_code': status_code}


def get_profile(user):
    profile, _ = Profile.objects.get_or_create(user=user, defaults={'name': user.first_name or ''})
    return profile


def user_summary(user):
    profile = get_profile(user)
    return {
        'id': user.id,
        'email': user.email,
        'name': profile.name,
        'phone': profile.phone,
        'phone_verified': profile.phone_verified,
        'role': profile.role,
    }


class AuthService:
    """Service for authentication operations"""

    def is_dev_mode(self):
        return settings.DEBUG or settings.SKIP_SMS

    def generate_code(self):
        return get_random_string(length=BusinessRules.OTP_LENGTH, allowed_chars='0123456789')

    # Rate limiting

    def check_rate_limit(self, identifier):
        """Count an OTP request, returns an error dict once the identifier is blocked"""
        attempt, _ = OTPAttempt.objects.get_or_create(identifier=identifier)

        if attempt.blocked_until and timezone.now() < attempt.blocked_until:
            return _error('Too many requests', 429)

        if attempt.blocked_until:
            attempt.attempt_count = 0
            attempt.blocked_until = None

        if attempt.attempt_count >= BusinessRules.OTP_MAX_ATTEMPTS:
            attempt.blocked_until = timezone.now() + timedelta(minutes=BusinessRules.OTP_BLOCK_MINUTES)
            attempt.save()
            logger.warning(f'[OTP] Blocking {identifier} for {BusinessRules.OTP_BLOCK_MINUTES} minutes')
            return _error('Too many requests', 429)

        attempt.attempt_count += 1
        attempt.save()
        return None

    def clear_attempts(self, identifier):
        OTPAttempt.objects.filter(identifier=identifier).update(attempt_count=0, blocked_until=None)

    def _store_otp(self, purpose, email=None, phone=None):
        if email:
            OTP.objects.filter(email=email, purpose=purpose).delete()
        else:
            OTP.objects.filter(phone=phone, purpose=purpose).delete()

        return OTP.objects.create(
            email=email,
            phone=phone,
            code=self.generate_code(),
            purpose=purpose,
            expires_at=timezone.now() + timedelta(minutes=BusinessRules.OTP_EXPIRY_MINUTES),
        )

    # Email OTP

    def send_email_otp(self, email, purpose=OTPPurpose.REGISTRATION, user_type=None):
        email = normalize_email(email)
        if not is_valid_email(email):
            return _error('Valid email is required', 400)
        if purpose not in dict(OTPPurpose.CHOICES):
            return _error('Invalid OTP type', 400)

        if purpose == OTPPurpose.PASSWORD_RESET:
            user = User.objects.filter(email__iexact=email).first()
            if not user:
                return _error('If this email exists, an OTP will be sent.', 404)
            if user_type == UserRole.OWNER and not get_profile(user).is_owner:
                return _error('This email is not registered as a property owner', 403)

        if not email_configured():
            logger.error('[OTP] Email credentials not configured')
            return _error('Email service is not configured', 500)

        limited = self.check_rate_limit(email)
        if limited:
            return limited

        otp = self._store_otp(purpose, email=email)
        subject = OTP_SUBJECTS.get(purpose, 'Your Second Home verification code')
        text = (
            f"Your verification code is {otp.code}.\n\n"
            f"It expires in {BusinessRules.OTP_EXPIRY_MINUTES} minutes. "
            "If you did not request this code you can ignore this email."
        )
        if not send_email(email, subject, text):
            otp.delete()
            return _error('Failed to send OTP email', 500)

        logger.info(f'[OTP] Sent {purpose} OTP to {email}')
        return {
            'success': True,
            'message': 'OTP sent successfully',
            'expires_in': BusinessRules.OTP_EXPIRY_MINUTES * 60,
        }

    def verify_email_otp(self, email, code, purpose=OTPPurpose.REGISTRATION):
        email = normalize_email(email)
        if not email or not code:
            return _error('Email and OTP are required', 400)

        otp = OTP.objects.filter(email=email, code=code, purpose=purpose).first()
        if not otp:
            return _error('Invalid OTP', 400)

        if otp.is_expired:
            otp.delete()
            return _error('OTP has expired. Please request a new one.', 400)

        # Password reset OTPs stay valid, marked verified, until the password is actually changed
        if purpose == OTPPurpose.PASSWORD_RESET:
            otp.verified_at = timezone.now()
            otp.save(update_fields=['verified_at'])
        else:
            otp.delete()

        self.clear_attempts(email)
        return {'success': True, 'verified': True}

    # Phone OTP

    def _phone_taken(self, phone, user=None):
        taken = Profile.objects.filter(phone=phone, phone_verified=True)
        if user is not None and user.is_authenticated:
            taken = taken.exclude(user=user)
        return taken.exists()

    def send_phone_otp(self, phone, purpose=OTPPurpose.PHONE_VERIFICATION, user=None):
        if not phone:
            return _error('Phone number is required', 400)

        phone = normalize_phone(phone)
        if not is_valid_phone(phone):
            return _error('Invalid phone number format', 400)

        if purpose == OTPPurpose.PHONE_VERIFICATION and self._phone_taken(phone, user):
            return _error('This phone number is already verified by another account', 409)

        limited = self.check_rate_limit(phone)
        if limited:
            return limited

        otp = self._store_otp(purpose, phone=phone)

        if self.is_dev_mode():
            logger.info(f'[OTP] Development mode, OTP for {phone}: {otp.code}')
            return {
                'success': True,
                'message': 'OTP generated (development mode)',
                'expires_in': BusinessRules.OTP_EXPIRY_MINUTES * 60,
                'dev_mode': True,
                'otp': otp.code,
            }

        if not all([settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_PHONE_NUMBER]):
            otp.delete()
            logger.error('[OTP] Twilio credentials not configured')
            return _error('SMS service is not configured', 500)

        result = send_otp_via_twilio(phone, otp.code)
        if result['status'] == 'success':
            logger.info(f'[OTP] SMS sent to {phone} (sid={result["sid"]})')
            return {
                'success': True,
                'message': 'OTP sent to your phone',
                'expires_in': BusinessRules.OTP_EXPIRY_MINUTES * 60,
            }

        if result.get('code') == TWILIO_UNVERIFIED_NUMBER_CODE:
            logger.warning(f'[OTP] Unverified trial number {phone}, falling back to development mode: {otp.code}')
            return {
                'success': True,
                'message': 'SMS unavailable for this number, OTP generated in development mode',
                'expires_in': BusinessRules.OTP_EXPIRY_MINUTES * 60,
                'dev_mode': True,
                'otp': otp.code,
            }

        otp.delete()
        return _error(f'Failed to send SMS: {result["message"]}', 500)

    def verify_phone_otp(self, phone, code, purpose=OTPPurpose.PHONE_VERIFICATION, user=None):
        if not phone or not code:
            return _error('Phone and OTP are required', 400)

        phone = normalize_phone(phone)
        otp = OTP.objects.filter(phone=phone, code=code, purpose=purpose).first()
        if not otp:
            return _error('Invalid OTP', 400)

        if otp.is_expired:
            otp.delete()
            return _error('OTP has expired. Please request a new one.', 400)

        if purpose == OTPPurpose.PHONE_VERIFICATION:
            if user is None or not user.is_authenticated:
                return _error('Authentication required', 401)
            if self._phone_taken(phone, user):
                return _error('This phone number is already verified by another account', 409)

            profile = get_profile(user)
            profile.phone = phone
            profile.phone_verified = True
            profile.save(update_fields=['phone', 'phone_verified', 'updated_at'])

        otp.delete()
        self.clear_attempts(phone)
        return {'success': True, 'verified': True, 'phone': phone}

    # Accounts

    def _validate_registration(self, name, email, password, otp_code):
        if not name or len(name.strip()) < BusinessRules.MIN_NAME_LENGTH:
            return 'Name must be at least 2 characters'
        if not is_valid_email(email):
            return 'Invalid email address'
        if not password or len(password) < BusinessRules.MIN_PASSWORD_LENGTH:
            return 'Password must be at least 6 characters'
        if not otp_code or not re.fullmatch(r'\d{6}', str(otp_code)):
            return 'OTP must be 6 digits'
        return None

    @transaction.atomic
    def register_with_otp(self, name, email, password, otp_code, phone=None, is_property_owner=False):
        email = normalize_email(email)
        validation_error = self._validate_registration(name, email, password, otp_code)
        if validation_error:
            return _error(validation_error, 400)

        otp = OTP.objects.filter(
            email=email,
            code=otp_code,
            purpose=OTPPurpose.REGISTRATION,
            expires_at__gt=timezone.now(),
        ).first()
        if not otp:
            return _error('Invalid or expired OTP. Please request a new one.', 400)

        existing = User.objects.filter(email__iexact=email)
        if existing.count() > 1:
            otp.delete()
            return _error('Multiple accounts exist for this email. Please contact support to merge your accounts.', 409)

        user = existing.first()
        if user:
            otp.delete()
            profile = get_profile(user)

            if is_property_owner:
                if profile.is_owner:
                    return _error('You are already registered as a property owner', 409)
                profile.role = UserRole.OWNER
                if not user.has_usable_password():
                    user.set_password(password)
                    user.save()
                profile.save(update_fields=['role', 'updated_at'])
                logger.info(f'[AUTH] Upgraded {email} to property owner')
                return {
                    'success': True,
                    'upgraded': True,
                    'message': 'Your account has been upgraded to a property owner account',
                    'user': user_summary(user),
                    'status_code': 200,
                }

            if not user.has_usable_password():
                user.set_password(password)
                user.save()
                logger.info(f'[AUTH] Linked password login for {email}')
                return {
                    'success': True,
                    'linked': True,
                    'message': 'Password set successfully. You can now log in with email and password.',
                    'user': user_summary(user),
                    'status_code': 200,
                }

            return _error('User already exists', 409)

        user = User.objects.create_user(username=email, email=email, password=password)
        profile = get_profile(user)
        profile.name = name.strip()
        profile.phone = normalize_phone(phone) if phone else None
        profile.role = UserRole.OWNER if is_property_owner else UserRole.USER
        profile.email_verified_at = timezone.now()
        profile.save()
        otp.delete()
        self.clear_attempts(email)
        logger.info(f'[AUTH] Registered {email} as {"owner" if is_property_owner else "user"}')

        return {
            'success': True,
            'message': 'User created successfully',
            'user': user_summary(user),
            'status_code': 201,
        }

    def issue_tokens(self, user):
        refresh = RefreshToken.for_user(user)
        return {'access': str(refresh.access_token), 'refresh': str(refresh)}

    def login(self, email, password):
        email = normalize_email(email)
        if not email or not password:
            return _error('Email and password are required', 400)

        user = User.objects.filter(email__iexact=email).first()
        if not user:
            return _error('Invalid email or password', 401)

        if not user.has_usable_password():
            return _error('This account uses social login. Please sign in with Google or reset your password.', 401)

        if not user.check_password(password) or not user.is_active:
            return _error('Invalid email or password', 401)

        return {'success': True, **self.issue_tokens(user), 'user': user_summary(user)}

    def check_email(self, email):
        email = normalize_email(email)
        user = User.objects.filter(email__iexact=email).first() if email else None
        if not user:
            return {'exists': False, 'has_password': False, 'role': None}
        return {
            'exists': True,
            'has_password': user.has_usable_password(),
            'role': get_profile(user).role,
        }

    @transaction.atomic
    def reset_password(self, email, new_password, code=None):
        """Set a new password once the reset OTP was verified, or with the code itself"""
        email = normalize_email(email)
        if not email or not new_password:
            return _error('Email and new password are required', 400)
        if len(new_password) < BusinessRules.MIN_PASSWORD_LENGTH:
            return _error('Password must be at least 6 characters', 400)

        user = User.objects.filter(email__iexact=email).first()
        if not user:
            return _error('User not found', 404)

        otps = OTP.objects.filter(
            email=email,
            purpose=OTPPurpose.PASSWORD_RESET,
            expires_at__gt=timezone.now(),
        )
        otps = otps.filter(code=code) if code else otps.filter(verified_at__isnull=False)
        otp = otps.order_by('-created_at').first()
        if not otp:
            return _error('OTP verification required. Please verify your OTP first.', 400)

        user.set_password(new_password)
        user.save()
        otp.delete()
        logger.info(f'[AUTH] Password reset for {email}')
        return {'success': True, 'message': 'Password reset successfully'}

    @transaction.atomic
    def bootstrap_admin(self, email=None, password=None, name='Admin'):
        """Create or promote the platform admin account"""
        email = normalize_email(email or settings.ADMIN_EMAIL)
        password = password or settings.ADMIN_PASSWORD
        if not email or not password:
            return _error('ADMIN_EMAIL and ADMIN_PASSWORD must be configured', 500)

        user = User.objects.filter(email__iexact=email).first()
        created = user is None
        if created:
            user = User.objects.create_user(username=email, email=email, password=password)
        else:
            user.set_password(password)

        user.is_staff = True
        user.is_superuser = True
        user.save()

        profile = get_profile(user)
        profile.role = UserRole.ADMIN
        profile.name = profile.name or name
        profile.email_verified_at = profile.email_verified_at or timezone.now()
        profile.save()

        logger.info(f'[AUTH] Admin account {"created" if created else "updated"}: {email}')
        return {'success': True, 'created': created, 'email': email}
