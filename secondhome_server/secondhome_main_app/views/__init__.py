"""Views package - HTTP request handlers"""

from .auth_views import AuthViewSet, ProfileView
from .property_views import PropertyViewSet
from .mess_views import MessViewSet, MessSubscriptionViewSet
from .booking_views import BookingViewSet, VisitRequestViewSet
from .payment_views import PaymentViewSet, razorpay_webhook
from .admin_views import AdminModerationViewSet, StatsViewSet
from .review_views import ReviewViewSet
from .location_views import LocationViewSet
from .chat_views import ChatViewSet, ConversationViewSet, AgentConversationViewSet
from .notification_views import NotificationViewSet

__all__ = [
    'AuthViewSet', 'ProfileView',
    'PropertyViewSet', 'MessViewSet', 'MessSubscriptionViewSet',
    'BookingViewSet', 'VisitRequestViewSet',
    'PaymentViewSet', 'razorpay_webhook',
    'AdminModerationViewSet', 'StatsViewSet',
    'ReviewViewSet', 'LocationViewSet',
    'ChatViewSet', 'ConversationViewSet', 'AgentConversationViewSet',
    'NotificationViewSet',
]
