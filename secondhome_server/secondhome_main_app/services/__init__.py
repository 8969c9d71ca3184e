"""Services package - business logic layer"""

from .auth_service import AuthService
from .notification_service import NotificationService
from .property_service import PropertyService, PropertyFilters
from .mess_service import MessService, SubscriptionError
from .booking_service import (
    BookingService, PropertyUnavailableError, BookingAlreadyCancelledError,
    BookingPermissionError, VisitRequestError,
)
from .payment_service import PaymentService
from .moderation_service import ModerationService, ListingNotFoundError
from .location_service import LocationService, ProviderUnavailableError, LocationNotFoundError
from .weather_service import WeatherService
from .route_service import RouteService
from .community_service import CommunityReviewService
from .chat_service import ChatService, ConversationError
from .stats_service import StatsService

__all__ = [
    'AuthService',
    'NotificationService',
    'PropertyService',
    'PropertyFilters',
    'MessService',
    'SubscriptionError',
    'BookingService',
    'PropertyUnavailableError',
    'BookingAlreadyCancelledError',
    'BookingPermissionError',
    'VisitRequestError',
    'PaymentService',
    'ModerationService',
    'ListingNotFoundError',
    'LocationService',
    'ProviderUnavailableError',
    'LocationNotFoundError',
    'WeatherService',
    'RouteService',
    'CommunityReviewService',
    'ChatService',
    'ConversationError',
    'StatsService',
]
