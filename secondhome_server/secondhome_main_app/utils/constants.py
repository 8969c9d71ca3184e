"""Centralized constants and business rules"""

class UserRole:
    USER = 'user'
    OWNER = 'owner'
    ADMIN = 'admin'

    CHOICES = [
        (USER, 'Student'),
        (OWNER, 'Property Owner'),
        (ADMIN, 'Admin'),
    ]

class OTPPurpose:
    REGISTRATION = 'registration'
    LOGIN = 'login'
    PASSWORD_RESET = 'password-reset'
    PHONE_VERIFICATION = 'phone-verification'

    CHOICES = [
        (REGISTRATION, 'Registration'),
        (LOGIN, 'Login'),
        (PASSWORD_RESET, 'Password Reset'),
        (PHONE_VERIFICATION, 'Phone Verification'),
    ]

class PropertyType:
    PG = 'PG'
    FLAT = 'Flat'

    CHOICES = [
        (PG, 'PG'),
        (FLAT, 'Flat'),
    ]

class Gender:
    MALE = 'male'
    FEMALE = 'female'
    UNISEX = 'unisex'

    CHOICES = [
        (MALE, 'Male'),
        (FEMALE, 'Female'),
        (UNISEX, 'Unisex'),
    ]

class VerificationStatus:
    PENDING = 'pending'
    VERIFIED = 'verified'

    CHOICES = [
        (PENDING, 'Pending'),
        (VERIFIED, 'Verified'),
    ]

class BookingStatus:
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'

    CHOICES = [
        (PENDING, 'Pending'),
        (CONFIRMED, 'Confirmed'),
        (CANCELLED, 'Cancelled'),
        (COMPLETED, 'Completed'),
    ]

class PaymentStatus:
    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'
    REFUNDED = 'refunded'

    CHOICES = [
        (PENDING, 'Pending'),
        (PAID, 'Paid'),
        (FAILED, 'Failed'),
        (REFUNDED, 'Refunded'),
    ]

class PaymentMethod:
    UPI = 'upi'
    RAZORPAY = 'razorpay'
    CASH = 'cash'

    CHOICES = [
        (UPI, 'UPI'),
        (RAZORPAY, 'Razorpay'),
        (CASH, 'Cash'),
    ]

class SubscriptionStatus:
    PENDING = 'pending'
    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'

    CHOICES = [
        (PENDING, 'Pending'),
        (ACTIVE, 'Active'),
        (CANCELLED, 'Cancelled'),
        (EXPIRED, 'Expired'),
    ]

class NotificationType:
    BOOKING = 'booking'
    PROPERTY = 'property'
    OFFER = 'offer'
    REVIEW = 'review'
    SYSTEM = 'system'
    PAYMENT = 'payment'
    MESSAGE = 'message'
    PROFILE = 'profile'
    ARTICLE = 'article'
    LISTING = 'listing'

    CHOICES = [(value, value.title()) for value in [
        BOOKING, PROPERTY, OFFER, REVIEW, SYSTEM, PAYMENT, MESSAGE, PROFILE, ARTICLE, LISTING,
    ]]

class NotificationPriority:
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    CHOICES = [
        (LOW, 'Low'),
        (MEDIUM, 'Medium'),
        (HIGH, 'High'),
    ]

class ConversationStatus:
    WAITING = 'waiting'
    CONNECTED = 'connected'
    CLOSED = 'closed'

    CHOICES = [
        (WAITING, 'Waiting'),
        (CONNECTED, 'Connected'),
        (CLOSED, 'Closed'),
    ]

class AIRecommendation:
    APPROVE = 'APPROVE'
    REJECT = 'REJECT'
    MANUAL_REVIEW = 'MANUAL_REVIEW'

    VALUES = [APPROVE, REJECT, MANUAL_REVIEW]

class BusinessRules:
    """Business rules and limits"""
    OTP_LENGTH = 6
    OTP_EXPIRY_MINUTES = 10
    OTP_MAX_ATTEMPTS = 5
    OTP_BLOCK_MINUTES = 30
    MIN_PASSWORD_LENGTH = 6
    MIN_NAME_LENGTH = 2
    PAYMENT_AMOUNT_TOLERANCE = 0.01
    RECEIPT_MAX_LENGTH = 40
    PAYMENT_POLL_INTERVAL_SECONDS = 3
    PAYMENT_POLL_TIMEOUT_SECONDS = 300
    PROPERTY_VIEW_DEDUPE_HOURS = 1
    MIN_PRICE_SLIDER_MAX = 100000
    DEFAULT_POI_RADIUS_METERS = 2000
    DEFAULT_TRENDING_RADIUS_KM = 10
    DEFAULT_TRENDING_LIMIT = 5
    KM_PER_DEGREE = 111
    MAX_CHAT_SUGGESTIONS = 6
    MAX_GEOCODE_CANDIDATES = 6

class InsightRules:
    """Neighbourhood scoring heuristics (counts that earn a full 100)"""
    FOOD_FULL = 10
    HEALTH_FULL = 5
    CONNECTIVITY_FULL = 15
    SAFETY_FULL = 2
    CONVENIENCE_FULL = 10
    FITNESS_FULL = 3
    WALKABILITY_FULL = 15
    WIFI_FULL = 8

    WEIGHTS = {
        'food': 0.20,
        'health': 0.10,
        'connectivity': 0.20,
        'safety': 0.15,
        'convenience': 0.15,
        'fitness': 0.05,
        'walkability': 0.05,
        'night_safety': 0.05,
        'wifi': 0.05,
    }

    FOOD_COST_BASE = 6000
    FOOD_COST_MIN = 3000
    FOOD_COST_PER_RESTAURANT = 100
    TRANSPORT_COST_BASE = 2000
    TRANSPORT_COST_MIN = 500
    TRANSPORT_COST_PER_STOP = 50
    MISC_COST = 2000

class CommunityRules:
    MIN_RELEVANCE = 10
    SPECIFIC_BUILDING_THRESHOLD = 20
    MAX_POSTS = 8
    NAME_TOKEN_SCORE = 10
    CATEGORY_SCORE = 3
    TITLE_TOKEN_SCORE = 5
    REMOVED_PENALTY = 100
