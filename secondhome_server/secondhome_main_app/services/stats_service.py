"""Public platform statistics"""
import logging
from datetime import timedelta

from django.core.cache import cache
from django.db import DatabaseError
from django.utils import timezone

from ..models import Profile, Booking, Property
from ..utils.cache_keys import CacheKeys
from ..utils.constants import UserRole

logger = logging.getLogger(__name__)


def format_number(value):
    if value >= 1_000_000:
        return f'{value / 1_000_000:.1f}M'
    if value >= 1_000:
        return f'{value / 1_000:.1f}K'
    return str(value)


class StatsService:
    def public_stats(self):
        cached = cache.get(CacheKeys.public_stats())
        if cached:
            return cached

        try:
            owners = Profile.objects.filter(role=UserRole.OWNER).count()
            last_year = Booking.objects.filter(created_at__gte=timezone.now() - timedelta(days=365)).count()
            bookings = last_year or Booking.objects.count()
            total_properties = Property.objects.count()
            approved = Property.objects.filter(is_approved=True, is_rejected=False).count()
        except DatabaseError as e:
            logger.error(f'[STATS] Failed to compute stats: {e}')
            return {
                'property_owners': 0, 'property_owners_formatted': '0',
                'student_bookings': 0, 'student_bookings_formatted': '0',
                'success_rate': 0,
            }

        stats = {
            'property_owners': owners,
            'property_owners_formatted': format_number(owners),
            'student_bookings': bookings,
            'student_bookings_formatted': format_number(bookings),
            'success_rate': round(approved / total_properties * 100) if total_properties else 0,
        }
        cache.set(CacheKeys.public_stats(), stats, timeout=300)
        return stats
