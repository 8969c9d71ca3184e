"""Notification service - in-app notifications"""
import logging

from django.contrib.auth.models import User

from ..models import Notification
from ..utils.constants import NotificationType, NotificationPriority

logger = logging.getLogger(__name__)


class NotificationService:
    def create_notification(self, title, message, user_id=None, user_email=None,
                            type=NotificationType.SYSTEM, link='', image='',
                            priority=NotificationPriority.MEDIUM, metadata=None):
        """Create a notification for one user, looked up by id or email"""
        user = None
        if user_id:
            user = User.objects.filter(id=user_id).first()
        elif user_email:
            user = User.objects.filter(email__iexact=user_email).first()

        if not user:
            logger.warning(f'[NOTIFICATION] User not found for "{title}" (id={user_id}, email={user_email})')
            return {'success': False, 'error': 'User not found'}

        notification = Notification.objects.create(
            user=user,
            type=type,
            title=title,
            message=message,
            link=link or '',
            image=image or '',
            priority=priority,
            metadata=metadata or {},
        )
        return {'success': True, 'notification': notification}

    def create_for_all_users(self, title, message, type=NotificationType.SYSTEM, link='',
                             priority=NotificationPriority.MEDIUM, metadata=None):
        """Broadcast a notification to every active user"""
        successful = 0
        failed = 0
        for user in User.objects.filter(is_active=True).only('id'):
            result = self.create_notification(
                title, message, user_id=user.id, type=type, link=link,
                priority=priority, metadata=metadata,
            )
            if result['success']:
                successful += 1
            else:
                failed += 1

        logger.info(f'[NOTIFICATION] Broadcast "{title}": {successful} sent, {failed} failed')
        return {'success': True, 'successful': successful, 'failed': failed}

    def mark_read(self, user, notification_id):
        updated = Notification.objects.filter(user=user, id=notification_id).update(read=True)
        return updated > 0

    def mark_all_read(self, user):
        return Notification.objects.filter(user=user, read=False).update(read=True)
