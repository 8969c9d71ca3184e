"""Notification views"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Notification
from ..permissions import IsAdminRole
from ..serializers import NotificationSerializer
from ..services import NotificationService
from ..utils.constants import NotificationType, NotificationPriority


class NotificationViewSet(viewsets.ViewSet):
    authentication_classes = [JWTAuthentication]

    def get_permissions(self):
        if self.action == 'broadcast':
            return [IsAdminRole()]
        return [IsAuthenticated()]

    def list(self, request):
        notifications = Notification.objects.filter(user=request.user)
        if request.query_params.get('unread') in ('1', 'true'):
            notifications = notifications.filter(read=False)
        return Response({
            'notifications': NotificationSerializer(notifications[:100], many=True).data,
            'unread_count': Notification.objects.filter(user=request.user, read=False).count(),
        })

    @action(detail=True, methods=['post'], url_path='read')
    def mark_read(self, request, pk=None):
        if not str(pk).isdigit() or not NotificationService().mark_read(request.user, pk):
            return Response({'error': 'Notification not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'success': True}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='read-all')
    def mark_all_read(self, request):
        updated = NotificationService().mark_all_read(request.user)
        return Response({'success': True, 'updated': updated}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='broadcast')
    def broadcast(self, request):
        title = (request.data.get('title') or '').strip()
        message = (request.data.get('message') or '').strip()
        if not title or not message:
            return Response({'error': 'Title and message are required'}, status=status.HTTP_400_BAD_REQUEST)

        notification_type = request.data.get('type', NotificationType.SYSTEM)
        if notification_type not in dict(NotificationType.CHOICES):
            notification_type = NotificationType.SYSTEM
        priority = request.data.get('priority', NotificationPriority.MEDIUM)
        if priority not in dict(NotificationPriority.CHOICES):
            priority = NotificationPriority.MEDIUM

        result = NotificationService().create_for_all_users(
            title, message, type=notification_type, link=request.data.get('link', ''), priority=priority,
        )
        return Response(result, status=status.HTTP_200_OK)
