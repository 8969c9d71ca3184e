"""Mess service - listings and monthly subscriptions"""
import calendar
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.db import transaction

from ..models import Mess, MessSubscription
from ..utils.constants import NotificationType, NotificationPriority, SubscriptionStatus
from ..utils.email_utils import send_email
from ..utils.validators import normalize_local_phone
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class SubscriptionError(Exception):
    """Raised when a subscription request cannot be honoured"""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def add_one_month(start):
    """Same day next month, clamped to the last day of a shorter month"""
    year = start.year + (1 if start.month == 12 else 0)
    month = 1 if start.month == 12 else start.month + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class MessService:
    """Service for mess listings and subscriptions"""

    def public_queryset(self, params=None):
        queryset = Mess.objects.filter(is_approved=True, is_rejected=False).order_by('-created_at')
        if not params:
            return queryset

        if params.get('city'):
            queryset = queryset.filter(city__iexact=params['city'])
        if params.get('max_price'):
            try:
                queryset = queryset.filter(monthly_price__lte=Decimal(str(params['max_price'])))
            except InvalidOperation:
                pass

        messes = list(queryset)
        for field, param in (('diet_types', 'diet'), ('meal_types', 'meal')):
            wanted = (params.get(param) or '').strip().lower()
            if wanted:
                messes = [m for m in messes if wanted in {str(v).lower() for v in getattr(m, field) or []}]
        return messes

    @transaction.atomic
    def subscribe(self, user, mess_id, start_date, subscriber_name='', subscriber_email='', subscriber_phone=''):
        """Create a pending monthly subscription.

        Raises SubscriptionError with the HTTP status to report.
        """
        try:
            mess = Mess.objects.select_related('owner').get(id=mess_id)
        except (Mess.DoesNotExist, ValueError):
            raise SubscriptionError('Mess not found', 404)

        if not mess.is_approved or mess.is_rejected:
            raise SubscriptionError('This mess is not available for subscriptions', 403)

        try:
            start = datetime.strptime(str(start_date), '%Y-%m-%d').date()
        except ValueError:
            raise SubscriptionError('Invalid start date, expected YYYY-MM-DD')

        price = mess.monthly_price
        if not price or price <= 0:
            raise SubscriptionError('Monthly price must be greater than 0')

        profile = getattr(user, 'profile', None)
        subscription = MessSubscription.objects.create(
            user=user,
            mess=mess,
            owner=mess.owner,
            start_date=start,
            end_date=add_one_month(start),
            monthly_price=price,
            status=SubscriptionStatus.PENDING,
            subscriber_name=subscriber_name or (profile.name if profile else '') or user.username,
            subscriber_email=subscriber_email or user.email,
            subscriber_phone=normalize_local_phone(subscriber_phone or (profile.phone if profile else '')),
        )

        notifications = NotificationService()
        notifications.create_notification(
            'Subscription Requested',
            f'Your subscription to {mess.name} starting {start.isoformat()} is pending confirmation.',
            user_id=user.id,
            type=NotificationType.BOOKING,
            link=f'/messes/{mess.id}',
            metadata={'mess_id': mess.id, 'subscription_id': subscription.id},
        )
        notifications.create_notification(
            'New Mess Subscription',
            f'{subscription.subscriber_name} subscribed to {mess.name} from {start.isoformat()}.',
            user_id=mess.owner_id,
            type=NotificationType.BOOKING,
            priority=NotificationPriority.HIGH,
            metadata={'mess_id': mess.id, 'subscription_id': subscription.id},
        )

        owner_email = mess.contact_email or mess.owner.email
        if owner_email:
            send_email(
                owner_email,
                f'New subscription for {mess.name}',
                (
                    f'Hello {mess.contact_name or "there"},\n\n'
                    f'{subscription.subscriber_name} has subscribed to {mess.name}.\n'
                    f'Start date: {start.isoformat()}\n'
                    f'End date: {subscription.end_date.isoformat()}\n'
                    f'Monthly price: INR {price}\n'
                    f'Email: {subscription.subscriber_email}\n'
                    f'Phone: {subscription.subscriber_phone or "not provided"}\n'
                ),
            )

        logger.info(f'[MESS] Subscription {subscription.id} created for mess {mess.id} by {user.email}')
        return subscription

    def cancel(self, user, subscription_id):
        try:
            subscription = MessSubscription.objects.get(id=subscription_id, user=user)
        except MessSubscription.DoesNotExist:
            raise SubscriptionError('Subscription not found', 404)

        if subscription.status == SubscriptionStatus.CANCELLED:
            raise SubscriptionError('Subscription already cancelled')

        subscription.status = SubscriptionStatus.CANCELLED
        subscription.save(update_fields=['status'])
        return subscription
