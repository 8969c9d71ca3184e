"""User-related models"""
from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone

from ..utils.constants import UserRole, OTPPurpose


class OTP(models.Model):
    email = models.EmailField(null=True, blank=True, db_index=True)
    phone = models.CharField(max_length=20, null=True, blank=True, db_index=True)
    code = models.CharField(max_length=6)
    purpose = models.CharField(max_length=20, choices=OTPPurpose.CHOICES)
    expires_at = models.DateTimeField()
    verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['email', 'purpose'], name='otp_email_purpose_idx'),
            models.Index(fields=['phone', 'purpose'], name='otp_phone_purpose_idx'),
        ]

    def __str__(self):
        return f"{self.email or self.phone} - {self.purpose}"

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at


class OTPAttempt(models.Model):
    identifier = models.CharField(max_length=254, unique=True, db_index=True)
    attempt_count = models.IntegerField(default=0)
    last_attempt = models.DateTimeField(auto_now=True)
    blocked_until = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.identifier} - Attempts: {self.attempt_count}"


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE)
    name = models.CharField(max_length=100, blank=True, default='')
    phone = models.CharField(max_length=20, null=True, blank=True, db_index=True)
    phone_verified = models.BooleanField(default=False)
    role = models.CharField(max_length=10, choices=UserRole.CHOICES, default=UserRole.USER)
    email_verified_at = models.DateTimeField(null=True, blank=True)
    favorites = models.ManyToManyField('Property', blank=True, related_name='favorited_by')

    # Payout details for property owners
    account_holder_name = models.CharField(max_length=100, blank=True, default='')
    account_number = models.CharField(max_length=30, blank=True, default='')
    ifsc_code = models.CharField(max_length=11, blank=True, default='')
    bank_name = models.CharField(max_length=100, blank=True, default='')
    upi_id = models.CharField(max_length=100, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.user.username

    @property
    def is_owner(self):
        return self.role in (UserRole.OWNER, UserRole.ADMIN)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN
