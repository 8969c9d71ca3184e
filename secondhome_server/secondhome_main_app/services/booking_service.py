"""Booking service - business logic for booking and visit operations"""
import logging
from datetime import datetime

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from ..models import Property, Booking, VisitRequest
from ..utils.constants import (
    BookingStatus, PaymentStatus, PaymentMethod, NotificationType, NotificationPriority,
)
from ..utils.validators import is_valid_email, normalize_email
from ..utils.whatsapp import build_whatsapp_link, send_whatsapp_message
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class PropertyUnavailableError(Exception):
    """Raised when booking a listing that is not approved"""
    pass


class BookingAlreadyCancelledError(Exception):
    """Raised when trying to cancel already cancelled booking"""
    pass


class BookingPermissionError(Exception):
    """Raised when the user may not act on the booking"""
    pass


class VisitRequestError(Exception):
    """Raised when a visit request is incomplete"""
    pass


def can_manage_booking(user, booking):
    profile = getattr(user, 'profile', None)
    is_admin = bool(profile and profile.is_admin)
    return is_admin or booking.property.owner_id == user.id


class BookingService:
    """Service for booking operations"""

    def __init__(self):
        self.notifications = NotificationService()

    @transaction.atomic
    def create_booking(self, user, property_id, move_in_date, duration_months=1,
                       payment_method=PaymentMethod.UPI, contact_name='', contact_phone='', contact_email=''):
        """
        Create a pending booking for an approved property

        Returns:
            Booking object

        Raises:
            Property.DoesNotExist: If the property does not exist
            PropertyUnavailableError: If the property is not approved
        """
        prop = Property.objects.select_for_update().get(id=property_id)
        if not prop.is_approved or prop.is_rejected:
            raise PropertyUnavailableError('This property is not available for booking')

        duration_months = max(int(duration_months or 1), 1)
        total = prop.price * duration_months + prop.security_deposit

        booking = Booking.objects.create(
            user=user,
            property=prop,
            move_in_date=move_in_date,
            duration_months=duration_months,
            monthly_rent=prop.price,
            security_deposit=prop.security_deposit,
            total_amount=total,
            payment_method=payment_method,
            contact_name=contact_name or '',
            contact_phone=contact_phone or '',
            contact_email=contact_email or user.email,
        )

        self.notifications.create_notification(
            'Booking Received',
            f'New booking request for {prop.title} from {booking.contact_name or user.email}, moving in {move_in_date}.',
            user_id=prop.owner_id,
            type=NotificationType.BOOKING,
            priority=NotificationPriority.HIGH,
            link='/dashboard/bookings',
            metadata={'booking_id': booking.id, 'property_id': prop.id},
        )
        self.notifications.create_notification(
            'Booking Created',
            f'Your booking for {prop.title} is created. Complete the payment of INR {total} to confirm it.',
            user_id=user.id,
            type=NotificationType.BOOKING,
            link=f'/bookings/{booking.id}',
            metadata={'booking_id': booking.id, 'property_id': prop.id},
        )
        logger.info(f'[BOOKING] Booking {booking.id} created for property {prop.id} by {user.email}')
        return booking

    def bookings_for(self, user):
        queryset = Booking.objects.select_related('property', 'user').order_by('-created_at')
        profile = getattr(user, 'profile', None)
        if profile and profile.is_admin:
            return queryset
        if profile and profile.is_owner:
            return queryset.filter(Q(property__owner=user) | Q(user=user))
        return queryset.filter(user=user)

    @transaction.atomic
    def cancel_booking(self, booking, user):
        if booking.user_id != user.id and not can_manage_booking(user, booking):
            raise BookingPermissionError('You do not have permission to cancel this booking')
        if booking.status == BookingStatus.CANCELLED:
            raise BookingAlreadyCancelledError('Booking already cancelled')

        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = timezone.now()
        if booking.payment_status == PaymentStatus.PAID:
            booking.payment_status = PaymentStatus.REFUNDED
        booking.save()

        self.notifications.create_notification(
            'Booking Cancelled',
            f'Booking {booking.id} for {booking.property.title} has been cancelled.',
            user_id=booking.user_id,
            type=NotificationType.BOOKING,
            metadata={'booking_id': booking.id},
        )
        logger.info(f'[BOOKING] Booking {booking.id} cancelled by {user.email}')
        return booking

    def update_status(self, booking, user, new_status):
        if not can_manage_booking(user, booking):
            raise BookingPermissionError('Only the property owner can update this booking')
        if booking.status == BookingStatus.CANCELLED:
            raise BookingAlreadyCancelledError('Booking already cancelled')

        booking.status = new_status
        booking.save(update_fields=['status', 'updated_at'])
        self.notifications.create_notification(
            f'Booking {new_status.title()}',
            f'Your booking for {booking.property.title} is now {new_status}.',
            user_id=booking.user_id,
            type=NotificationType.BOOKING,
            metadata={'booking_id': booking.id},
        )
        return booking

    def build_visit_message(self, prop, name, phone, email, visit_date, visit_time, notes=''):
        lines = [
            'Hi Second Home, I would like to schedule a visit.',
            f'Property: {prop.title}',
            f'Location: {prop.location or prop.address}, {prop.city}',
            f'Date: {visit_date}',
            f'Time: {visit_time}',
            f'Name: {name}',
            f'Phone: {phone}',
            f'Email: {email}',
        ]
        if notes:
            lines.append(f'Notes: {notes}')
        return '\n'.join(lines)

    def schedule_visit(self, prop, name, phone, email, visit_date, visit_time, notes='', user=None):
        """Store a visit request and hand it to WhatsApp"""
        email = normalize_email(email)
        if not name or not phone or not visit_time:
            raise VisitRequestError('Name, phone, date and time are required')
        if not is_valid_email(email):
            raise VisitRequestError('Valid email is required')
        try:
            parsed_date = datetime.strptime(str(visit_date), '%Y-%m-%d').date()
        except ValueError:
            raise VisitRequestError('Invalid visit date, expected YYYY-MM-DD')
        if parsed_date < timezone.localdate():
            raise VisitRequestError('Visit date cannot be in the past')

        visit = VisitRequest.objects.create(
            property=prop,
            user=user if user is not None and user.is_authenticated else None,
            name=name,
            phone=phone,
            email=email,
            visit_date=parsed_date,
            visit_time=visit_time,
            notes=notes or '',
        )

        message = self.build_visit_message(prop, name, phone, email, parsed_date.isoformat(), visit_time, notes)
        result = send_whatsapp_message(settings.WHATSAPP_BUSINESS_NUMBER, message)
        if result['status'] != 'success':
            logger.info(f'[VISIT] WhatsApp delivery skipped for visit {visit.id}: {result["message"]}')

        self.notifications.create_notification(
            'Visit Requested',
            f'{name} wants to visit {prop.title} on {parsed_date.isoformat()} at {visit_time}.',
            user_id=prop.owner_id,
            type=NotificationType.PROPERTY,
            priority=NotificationPriority.HIGH,
            metadata={'property_id': prop.id, 'visit_id': visit.id},
        )

        return {
            'visit': visit,
            'whatsapp_link': build_whatsapp_link(message),
            'whatsapp_sent': result['status'] == 'success',
        }
