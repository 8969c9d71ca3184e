"""Booking and visit views using BookingService"""
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Property
from ..serializers import BookingSerializer, BookingCreateSerializer, VisitRequestSerializer
from ..services import (
    BookingService, PropertyUnavailableError, BookingAlreadyCancelledError,
    BookingPermissionError, VisitRequestError,
)
from ..utils.constants import BookingStatus


class BookingViewSet(viewsets.ModelViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]
    serializer_class = BookingSerializer
    http_method_names = ['get', 'post', 'head', 'options']

    def get_queryset(self):
        return BookingService().bookings_for(self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            booking = BookingService().create_booking(
                request.user,
                data['property'],
                data['move_in_date'],
                duration_months=data['duration_months'],
                payment_method=data['payment_method'],
                contact_name=data.get('contact_name', ''),
                contact_phone=data.get('contact_phone', ''),
                contact_email=data.get('contact_email', ''),
            )
        except Property.DoesNotExist:
            return Response({'error': 'Property not found'}, status=status.HTTP_404_NOT_FOUND)
        except PropertyUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self.get_serializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='cancel')
    def cancel_booking(self, request, pk=None):
        booking = self.get_object()
        try:
            BookingService().cancel_booking(booking, request.user)
        except BookingPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except BookingAlreadyCancelledError:
            return Response({'error': 'Booking already cancelled'}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Booking cancelled successfully'}, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'], url_path='confirm')
    def confirm_booking(self, request, pk=None):
        booking = self.get_object()
        if booking.status != BookingStatus.PENDING:
            return Response({'error': 'Only pending bookings can be confirmed'},
                            status=status.HTTP_400_BAD_REQUEST)
        return self._update_status(booking, BookingStatus.CONFIRMED)

    @action(detail=True, methods=['post'], url_path='complete')
    def complete_booking(self, request, pk=None):
        booking = self.get_object()
        if booking.status != BookingStatus.CONFIRMED:
            return Response({'error': 'Only confirmed bookings can be completed'},
                            status=status.HTTP_400_BAD_REQUEST)
        return self._update_status(booking, BookingStatus.COMPLETED)

    def _update_status(self, booking, new_status):
        try:
            booking = BookingService().update_status(booking, self.request.user, new_status)
        except BookingPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except BookingAlreadyCancelledError:
            return Response({'error': 'Booking already cancelled'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(booking).data, status=status.HTTP_200_OK)


class VisitRequestViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]
    authentication_classes = [JWTAuthentication]

    def create(self, request):
        prop = get_object_or_404(Property, pk=request.data.get('property'), is_approved=True, is_rejected=False)
        try:
            result = BookingService().schedule_visit(
                prop,
                request.data.get('name'),
                request.data.get('phone'),
                request.data.get('email'),
                request.data.get('date'),
                request.data.get('time'),
                notes=request.data.get('notes', ''),
                user=request.user,
            )
        except VisitRequestError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'visit': VisitRequestSerializer(result['visit']).data,
            'whatsapp_link': result['whatsapp_link'],
            'whatsapp_sent': result['whatsapp_sent'],
        }, status=status.HTTP_201_CREATED)
