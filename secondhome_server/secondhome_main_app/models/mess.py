"""Mess (food subscription) models"""
from django.db import models
from django.contrib.auth.models import User

from .moderation import ModeratedListing
from ..utils.constants import SubscriptionStatus


class Mess(ModeratedListing):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='messes')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    address = models.CharField(max_length=255, blank=True, default='')
    location = models.CharField(max_length=150, blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='', db_index=True)
    state = models.CharField(max_length=100, blank=True, default='')
    pincode = models.CharField(max_length=6, blank=True, default='')
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    monthly_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    daily_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    trial_days = models.IntegerField(default=0)
    home_delivery_available = models.BooleanField(default=False)
    delivery_radius_km = models.FloatField(null=True, blank=True)
    delivery_charges = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    packaging_available = models.BooleanField(default=False)
    packaging_price = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    images = models.JSONField(default=list, blank=True)
    meal_types = models.JSONField(default=list, blank=True)
    cuisine_types = models.JSONField(default=list, blank=True)
    diet_types = models.JSONField(default=list, blank=True)
    menu = models.JSONField(default=dict, blank=True)
    opening_hours = models.JSONField(default=dict, blank=True)
    amenities = models.JSONField(default=list, blank=True)
    capacity = models.IntegerField(null=True, blank=True)
    contact_name = models.CharField(max_length=100, blank=True, default='')
    contact_phone = models.CharField(max_length=20, blank=True, default='')
    contact_email = models.EmailField(blank=True, default='')
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    reviews_count = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'messes'

    def __str__(self):
        return f"{self.name} ({self.city})"


class MessSubscription(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='mess_subscriptions')
    mess = models.ForeignKey(Mess, on_delete=models.CASCADE, related_name='subscriptions')
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='mess_subscribers')
    start_date = models.DateField()
    end_date = models.DateField()
    monthly_price = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=10, choices=SubscriptionStatus.CHOICES, default=SubscriptionStatus.PENDING)
    subscriber_name = models.CharField(max_length=100, blank=True, default='')
    subscriber_email = models.EmailField(blank=True, default='')
    subscriber_phone = models.CharField(max_length=20, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['user', '-created_at'], name='messsub_user_created_idx')]

    def __str__(self):
        return f"{self.subscriber_name or self.user.username} -> {self.mess.name}"
