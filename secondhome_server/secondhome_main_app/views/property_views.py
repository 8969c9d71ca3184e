"""Property listing views"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Property
from ..permissions import IsOwnerOrAdmin, IsListingOwnerOrAdmin, get_role
from ..serializers import PropertySerializer, PropertyListSerializer
from ..services import PropertyService, PropertyFilters, ModerationService
from ..services.auth_service import get_profile
from ..utils.constants import UserRole

logger = logging.getLogger(__name__)


def can_see_unpublished(user, listing):
    if not user or not user.is_authenticated:
        return False
    return listing.owner_id == user.id or get_role(user) == UserRole.ADMIN


class PropertyViewSet(viewsets.ModelViewSet):
    authentication_classes = [JWTAuthentication]
    serializer_class = PropertySerializer
    queryset = Property.objects.select_related('owner', 'owner__profile')

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'track_view']:
            return [AllowAny()]
        if self.action == 'create':
            return [IsAuthenticated(), IsOwnerOrAdmin()]
        if self.action in ['update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsListingOwnerOrAdmin()]
        return [IsAuthenticated()]

    def list(self, request, *args, **kwargs):
        service = PropertyService()
        properties = service.search(PropertyFilters.from_query_params(request.query_params))
        return Response({
            'properties': PropertyListSerializer(properties, many=True).data,
            'count': len(properties),
            'facets': service.facets(),
        })

    def retrieve(self, request, *args, **kwargs):
        prop = self.get_object()
        if not prop.is_approved or prop.is_rejected:
            if not can_see_unpublished(request.user, prop):
                return Response({'error': 'Property not found'}, status=status.HTTP_404_NOT_FOUND)
        prop = PropertyService().get_detail(prop)
        return Response(self.get_serializer(prop).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prop = serializer.save(owner=request.user)
        logger.info(f'[PROPERTY] Property {prop.id} submitted by {request.user.email}')

        ModerationService().notify_admin_new_property(prop)
        return Response(
            {'message': 'Property submitted for approval', 'property': self.get_serializer(prop).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'], url_path='view')
    def track_view(self, request, pk=None):
        prop = get_object_or_404(Property, pk=pk)
        result = PropertyService().track_view(prop, request.user)
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'], url_path='favorite')
    def favorite(self, request, pk=None):
        prop = get_object_or_404(Property, pk=pk)
        favorited = PropertyService().toggle_favorite(get_profile(request.user), prop)
        return Response({'favorited': favorited, 'property_id': prop.id}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='favorites')
    def favorites(self, request):
        favorites = get_profile(request.user).favorites.filter(is_approved=True, is_rejected=False)
        return Response(PropertyListSerializer(favorites, many=True).data)

    @action(detail=False, methods=['get'], url_path='mine')
    def mine(self, request):
        properties = Property.objects.filter(owner=request.user).order_by('-created_at')
        return Response(self.get_serializer(properties, many=True).data)
