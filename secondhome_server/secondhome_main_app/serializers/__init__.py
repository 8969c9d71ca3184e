"""Serializers package - domain-based organization"""

from .user_serializers import UserSerializer, ProfileSerializer, BankAccountSerializer
from .property_serializers import PropertySerializer, PropertyListSerializer
from .mess_serializers import MessSerializer, MessSubscriptionSerializer
from .booking_serializers import BookingSerializer, BookingCreateSerializer, VisitRequestSerializer
from .review_serializers import ReviewSerializer
from .notification_serializers import NotificationSerializer
from .chat_serializers import ConversationSerializer, ConversationMessageSerializer

__all__ = [
    'UserSerializer', 'ProfileSerializer', 'BankAccountSerializer',
    'PropertySerializer', 'PropertyListSerializer',
    'MessSerializer', 'MessSubscriptionSerializer',
    'BookingSerializer', 'BookingCreateSerializer', 'VisitRequestSerializer',
    'ReviewSerializer', 'NotificationSerializer',
    'ConversationSerializer', 'ConversationMessageSerializer',
]
