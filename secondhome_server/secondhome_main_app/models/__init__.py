"""Models package - domain-based organization"""

# User models
from .user import OTP, OTPAttempt, Profile

# Listing models
from .property import Property
from .mess import Mess, MessSubscription

# Booking models
from .booking import Booking, VisitRequest

# Review models
from .review import Review

# Notification and support models
from .notification import Notification
from .chat import Conversation, ConversationMessage

__all__ = [
    'OTP', 'OTPAttempt', 'Profile', 'Property', 'Mess', 'MessSubscription',
    'Booking', 'VisitRequest', 'Review', 'Notification', 'Conversation', 'ConversationMessage',
]
