"""Admin moderation views"""
import logging

from openai import OpenAIError
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..permissions import IsAdminRole
from ..serializers import PropertySerializer, MessSerializer
from ..services import ModerationService, ListingNotFoundError, StatsService
from ..utils.llm import LLMNotConfiguredError

logger = logging.getLogger(__name__)

SERIALIZERS = {
    'property': PropertySerializer,
    'mess': MessSerializer,
}


class AdminModerationViewSet(viewsets.ViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAdminRole]

    def _listings(self, request, kind):
        state = request.query_params.get('status', 'pending')
        listings = ModerationService().listings_by_state(kind, state)
        data = SERIALIZERS[kind](listings, many=True).data
        for item, listing in zip(data, listings):
            item['ai_review'] = listing.ai_review
            item['owner_email'] = listing.owner.email
        return Response({'results': data, 'count': len(data), 'status': state})

    @action(detail=False, methods=['get'], url_path='properties')
    def properties(self, request):
        return self._listings(request, 'property')

    @action(detail=False, methods=['get'], url_path='messes')
    def messes(self, request):
        return self._listings(request, 'mess')

    def _target(self, request):
        kind = request.data.get('type', 'property')
        listing_id = request.data.get('id')
        if kind not in SERIALIZERS or not listing_id:
            return None, None
        return kind, listing_id

    @action(detail=False, methods=['post'], url_path='approve')
    def approve(self, request):
        kind, listing_id = self._target(request)
        if not kind:
            return Response({'error': 'Listing type and id are required'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            listing = ModerationService().approve(kind, listing_id, request.user)
        except ListingNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response({'message': f'{kind.title()} approved', 'id': listing.id}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='reject')
    def reject(self, request):
        kind, listing_id = self._target(request)
        if not kind:
            return Response({'error': 'Listing type and id are required'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            listing = ModerationService().reject(kind, listing_id, request.user, request.data.get('reason', ''))
        except ListingNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response({'message': f'{kind.title()} rejected', 'id': listing.id}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='ai-review')
    def ai_review(self, request):
        kind, listing_id = self._target(request)
        if not kind:
            return Response({'error': 'Listing type and id are required'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            review = ModerationService().ai_review(kind, listing_id)
        except ListingNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LLMNotConfiguredError:
            return Response({'error': 'GROQ_API_KEY not configured'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except OpenAIError as e:
            logger.error(f'[MODERATION] AI review failed for {kind} {listing_id}: {e}')
            return Response({'error': 'Failed to get AI review', 'details': str(e)},
                            status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({'success': True, 'aiReview': review}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='dashboard')
    def dashboard(self, request):
        return Response(ModerationService().dashboard_stats())


class StatsViewSet(viewsets.ViewSet):
    authentication_classes = []
    permission_classes = []

    def list(self, request):
        return Response(StatsService().public_stats())
