"""Booking-related models"""
from django.db import models
from django.contrib.auth.models import User

from ..utils.constants import BookingStatus, PaymentStatus, PaymentMethod


class Booking(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    property = models.ForeignKey('Property', on_delete=models.PROTECT, related_name='bookings')
    move_in_date = models.DateField()
    duration_months = models.PositiveIntegerField(default=1)
    monthly_rent = models.DecimalField(max_digits=10, decimal_places=2)
    security_deposit = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=BookingStatus.CHOICES, default=BookingStatus.PENDING)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.CHOICES, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.CHOICES, default=PaymentMethod.UPI)
    # Razorpay order id, payment link id or manual UPI reference
    payment_id = models.CharField(max_length=100, blank=True, default='', db_index=True)
    payment_details = models.JSONField(default=dict, blank=True)
    contact_name = models.CharField(max_length=100, blank=True, default='')
    contact_phone = models.CharField(max_length=20, blank=True, default='')
    contact_email = models.EmailField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['user', '-created_at'], name='booking_user_created_idx'),
            models.Index(fields=['property', 'status'], name='booking_property_status_idx'),
        ]

    def __str__(self):
        return f"Booking {self.id} by {self.user.username} - {self.property.title}"


class VisitRequest(models.Model):
    STATUS_CHOICES = [
        ('requested', 'Requested'),
        ('confirmed', 'Confirmed'),
        ('cancelled', 'Cancelled'),
    ]

    property = models.ForeignKey('Property', on_delete=models.CASCADE, related_name='visit_requests')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20)
    email = models.EmailField()
    visit_date = models.DateField()
    visit_time = models.CharField(max_length=20)
    notes = models.TextField(blank=True, default='')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='requested')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Visit {self.property.title} on {self.visit_date} {self.visit_time}"
