"""In-app notifications"""
from django.db import models
from django.contrib.auth.models import User

from ..utils.constants import NotificationType, NotificationPriority


class Notification(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=20, choices=NotificationType.CHOICES, default=NotificationType.SYSTEM)
    title = models.CharField(max_length=200)
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True, default='')
    image = models.CharField(max_length=500, blank=True, default='')
    priority = models.CharField(max_length=10, choices=NotificationPriority.CHOICES, default=NotificationPriority.MEDIUM)
    read = models.BooleanField(default=False)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'read', '-created_at'], name='notification_user_read_idx')]

    def __str__(self):
        return f"{self.user.username}: {self.title}"
