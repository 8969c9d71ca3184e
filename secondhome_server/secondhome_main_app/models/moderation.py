"""Moderation fields shared by every public listing"""
from django.db import models
from django.contrib.auth.models import User


class ModeratedListing(models.Model):
    is_approved = models.BooleanField(default=False)
    is_rejected = models.BooleanField(default=False)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    rejection_reason = models.TextField(blank=True, default='')
    ai_review = models.JSONField(null=True, blank=True)

    class Meta:
        abstract = True

    @property
    def moderation_state(self):
        if self.is_rejected:
            return 'rejected'
        if self.is_approved:
            return 'approved'
        return 'pending'
