"""Property service - listing search, detail enrichment and engagement"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import F, Q
from django.utils import timezone

from ..models import Property, Notification
from ..utils.constants import (
    BusinessRules, NotificationType, NotificationPriority, VerificationStatus,
)
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    'recent': ['-created_at'],
    'price-low': ['price', '-created_at'],
    'price-high': ['-price', '-created_at'],
    'rating': ['-rating', '-created_at'],
    'popular': ['-reviews_count', '-created_at'],
}

NEARBY_DISTANCE_KEYS = {
    'hospital': 'hospital',
    'bus_stop': 'bus_stop',
    'metro_station': 'metro',
}


class PropertyFilters:
    """Parsed listing filters"""

    def __init__(self, query='', min_price=None, max_price=None, types=None, genders=None,
                 amenities=None, min_rating=None, verified=False, city='', sort='recent'):
        self.query = (query or '').strip()
        self.min_price = min_price
        self.max_price = max_price
        self.types = types or []
        self.genders = genders or []
        self.amenities = amenities or []
        self.min_rating = min_rating
        self.verified = verified
        self.city = (city or '').strip()
        self.sort = sort if sort in SORT_ORDERS else 'recent'

    @classmethod
    def from_query_params(cls, params):
        def as_list(name):
            values = params.getlist(name) if hasattr(params, 'getlist') else params.get(name, [])
            if isinstance(values, str):
                values = [values]
            items = []
            for value in values:
                items.extend(v.strip() for v in value.split(',') if v.strip())
            return items

        def as_decimal(name):
            value = params.get(name)
            if value in (None, ''):
                return None
            try:
                return Decimal(str(value))
            except ArithmeticError:
                return None

        return cls(
            query=params.get('query', ''),
            min_price=as_decimal('min_price'),
            max_price=as_decimal('max_price'),
            types=as_list('types'),
            genders=[g.lower() for g in as_list('genders')],
            amenities=as_list('amenities'),
            min_rating=as_decimal('min_rating'),
            verified=str(params.get('verified', '')).lower() in ('1', 'true', 'yes'),
            city=params.get('city', ''),
            sort=params.get('sort', 'recent'),
        )


class PropertyService:
    """Service for property listing operations"""

    def public_queryset(self):
        return Property.objects.filter(is_approved=True, is_rejected=False)

    def search(self, filters):
        """Apply listing filters, verified listings always sort first"""
        queryset = self.public_queryset()

        if filters.query:
            queryset = queryset.filter(
                Q(title__icontains=filters.query)
                | Q(location__icontains=filters.query)
                | Q(description__icontains=filters.query)
                | Q(address__icontains=filters.query)
            )
        if filters.city:
            queryset = queryset.filter(city__iexact=filters.city)
        if filters.min_price is not None:
            queryset = queryset.filter(price__gte=filters.min_price)
        if filters.max_price is not None:
            queryset = queryset.filter(price__lte=filters.max_price)
        if filters.types:
            queryset = queryset.filter(property_type__in=filters.types)
        if filters.genders:
            queryset = queryset.filter(gender__in=filters.genders)
        if filters.min_rating is not None:
            queryset = queryset.filter(rating__gte=filters.min_rating)
        if filters.verified:
            queryset = queryset.filter(verification_status=VerificationStatus.VERIFIED)

        properties = list(queryset.order_by(*SORT_ORDERS[filters.sort]))

        # JSON list containment is not portable across databases
        if filters.amenities:
            wanted = {a.lower() for a in filters.amenities}
            properties = [
                p for p in properties
                if wanted.issubset({str(a).lower() for a in (p.amenities or [])})
            ]

        # Stable sort keeps the requested order within each group
        properties.sort(key=lambda p: p.verification_status != VerificationStatus.VERIFIED)
        return properties

    def facets(self):
        amenities = set()
        genders = set()
        max_price = Decimal(0)
        for prop in self.public_queryset().only('amenities', 'gender', 'price'):
            amenities.update(str(a) for a in (prop.amenities or []) if a)
            if prop.gender:
                genders.add(prop.gender)
            max_price = max(max_price, prop.price or Decimal(0))

        return {
            'amenities': sorted(amenities),
            'genders': sorted(genders),
            'max_price': max(int(max_price), BusinessRules.MIN_PRICE_SLIDER_MAX),
        }

    def compute_distance_summary(self, prop):
        """Nearest college, hospital, bus stop and metro distances in km"""
        summary = {}

        college_distances = [
            c.get('distance') for c in (prop.nearby_colleges or [])
            if isinstance(c.get('distance'), (int, float))
        ]
        if college_distances:
            summary['college'] = round(min(college_distances), 1)

        for place in prop.nearby_places or []:
            key = NEARBY_DISTANCE_KEYS.get(place.get('type'))
            distance = place.get('distance')
            if not key or not isinstance(distance, (int, float)):
                continue
            if key not in summary or distance < summary[key]:
                summary[key] = distance

        return {k: round(v, 1) for k, v in summary.items()}

    def get_detail(self, prop):
        if not prop.distance:
            summary = self.compute_distance_summary(prop)
            if summary:
                prop.distance = summary
                prop.save(update_fields=['distance'])
        return prop

    def track_view(self, prop, user=None):
        """Record a listing view; signed-in viewers get an hourly deduped notification"""
        Property.objects.filter(id=prop.id).update(views_count=F('views_count') + 1)

        if user is None or not user.is_authenticated:
            return {'success': True, 'notified': False}

        since = timezone.now() - timedelta(hours=BusinessRules.PROPERTY_VIEW_DEDUPE_HOURS)
        recent = Notification.objects.filter(
            user=user,
            type=NotificationType.PROPERTY,
            created_at__gte=since,
            metadata__property_id=prop.id,
        ).exists()
        if recent:
            return {'success': True, 'notified': False}

        NotificationService().create_notification(
            'Property Viewed',
            f'You viewed {prop.title} in {prop.location or prop.city}',
            user_id=user.id,
            type=NotificationType.PROPERTY,
            link=f'/listings/{prop.id}',
            image=(prop.images or [''])[0],
            priority=NotificationPriority.LOW,
            metadata={'property_id': prop.id, 'action': 'viewed'},
        )
        return {'success': True, 'notified': True}

    def toggle_favorite(self, profile, prop):
        if profile.favorites.filter(id=prop.id).exists():
            profile.favorites.remove(prop)
            return False
        profile.favorites.add(prop)
        return True
