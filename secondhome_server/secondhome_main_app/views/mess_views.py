"""Mess listing and subscription views"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Mess, MessSubscription
from ..permissions import IsOwnerOrAdmin, IsListingOwnerOrAdmin
from ..serializers import MessSerializer, MessSubscriptionSerializer
from ..services import MessService, SubscriptionError
from .property_views import can_see_unpublished


class MessViewSet(viewsets.ModelViewSet):
    authentication_classes = [JWTAuthentication]
    serializer_class = MessSerializer
    queryset = Mess.objects.all()

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [AllowAny()]
        if self.action == 'create':
            return [IsAuthenticated(), IsOwnerOrAdmin()]
        if self.action in ['update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsListingOwnerOrAdmin()]
        return [IsAuthenticated()]

    def list(self, request, *args, **kwargs):
        messes = MessService().public_queryset(request.query_params)
        return Response(self.get_serializer(messes, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        mess = self.get_object()
        if (not mess.is_approved or mess.is_rejected) and not can_see_unpublished(request.user, mess):
            return Response({'error': 'Mess not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(self.get_serializer(mess).data)

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)

    @action(detail=True, methods=['post'], url_path='subscribe')
    def subscribe(self, request, pk=None):
        try:
            subscription = MessService().subscribe(
                request.user,
                pk,
                request.data.get('start_date'),
                subscriber_name=request.data.get('name', ''),
                subscriber_email=request.data.get('email', ''),
                subscriber_phone=request.data.get('phone', ''),
            )
        except SubscriptionError as e:
            return Response({'error': e.message}, status=e.status_code)
        return Response(MessSubscriptionSerializer(subscription).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path='mine')
    def mine(self, request):
        messes = Mess.objects.filter(owner=request.user).order_by('-created_at')
        return Response(self.get_serializer(messes, many=True).data)


class MessSubscriptionViewSet(viewsets.ReadOnlyModelViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]
    serializer_class = MessSubscriptionSerializer

    def get_queryset(self):
        return MessSubscription.objects.filter(user=self.request.user).select_related('mess').order_by('-created_at')

    @action(detail=True, methods=['post'], url_path='cancel')
    def cancel(self, request, pk=None):
        try:
            subscription = MessService().cancel(request.user, pk)
        except SubscriptionError as e:
            return Response({'error': e.message}, status=e.status_code)
        return Response(self.get_serializer(subscription).data, status=status.HTTP_200_OK)
