"""Property listing models"""
from django.db import models
from django.contrib.auth.models import User

from .moderation import ModeratedListing
from ..utils.constants import PropertyType, Gender, VerificationStatus


class Property(ModeratedListing):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='properties')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    property_type = models.CharField(max_length=10, choices=PropertyType.CHOICES, default=PropertyType.PG)
    gender = models.CharField(max_length=10, choices=Gender.CHOICES, default=Gender.UNISEX)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    security_deposit = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    address = models.CharField(max_length=255, blank=True, default='')
    location = models.CharField(max_length=150, blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='', db_index=True)
    state = models.CharField(max_length=100, blank=True, default='')
    pincode = models.CharField(max_length=6, blank=True, default='')
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    amenities = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    reviews_count = models.IntegerField(default=0)
    views_count = models.IntegerField(default=0)
    verification_status = models.CharField(
        max_length=10, choices=VerificationStatus.CHOICES, default=VerificationStatus.PENDING
    )
    # [{'name': ..., 'distance': km}]
    nearby_colleges = models.JSONField(default=list, blank=True)
    # [{'name': ..., 'distance': km, 'type': 'hospital'|'bus_stop'|'metro_station'}]
    nearby_places = models.JSONField(default=list, blank=True)
    # {'college': km, 'hospital': km, 'bus_stop': km, 'metro': km}
    distance = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'properties'
        indexes = [
            models.Index(fields=['is_approved', 'is_rejected'], name='property_moderation_idx'),
            models.Index(fields=['owner', '-created_at'], name='property_owner_created_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.location}, {self.city})"

    @property
    def has_coordinates(self):
        return self.latitude is not None and self.longitude is not None
