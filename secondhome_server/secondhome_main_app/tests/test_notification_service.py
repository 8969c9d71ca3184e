"""Tests for notification service"""
from django.test import TestCase

from ..models import Notification
from ..services.notification_service import NotificationService
from .helpers import make_user


class NotificationServiceTest(TestCase):
    def setUp(self):
        self.service = NotificationService()
        self.user = make_user('student@example.com')

    def test_create_by_id_or_email(self):
        self.assertTrue(self.service.create_notification('Hi', 'by id', user_id=self.user.id)['success'])
        self.assertTrue(self.service.create_notification('Hi', 'by email', user_email='STUDENT@example.com')['success'])
        self.assertEqual(Notification.objects.filter(user=self.user).count(), 2)

    def test_unknown_user(self):
        result = self.service.create_notification('Hi', 'nobody', user_email='nobody@example.com')
        self.assertFalse(result['success'])

    def test_broadcast_skips_inactive_users(self):
        inactive = make_user('gone@example.com')
        inactive.is_active = False
        inactive.save()
        make_user('other@example.com')

        result = self.service.create_for_all_users('Maintenance', 'Back soon')
        self.assertEqual(result['successful'], 2)
        self.assertFalse(Notification.objects.filter(user=inactive).exists())

    def test_mark_read(self):
        notification = self.service.create_notification('Hi', 'there', user_id=self.user.id)['notification']
        other = make_user('other@example.com')

        self.assertFalse(self.service.mark_read(other, notification.id))
        self.assertTrue(self.service.mark_read(self.user, notification.id))

        self.service.create_notification('Again', 'there', user_id=self.user.id)
        self.assertEqual(self.service.mark_all_read(self.user), 1)
