"""Centralized cache key patterns"""
import hashlib


def _digest(*parts):
    raw = '|'.join(str(p or '').lower() for p in parts)
    return hashlib.md5(raw.encode('utf-8')).hexdigest()


class CacheKeys:
    """Cache key generators for consistent naming"""

    @staticmethod
    def geocode(query):
        return f'geocode:{_digest(query)}'

    @staticmethod
    def nearby_places(lat, lon, radius, categories):
        return f'poi:{round(lat, 4)}:{round(lon, 4)}:{radius}:{",".join(sorted(categories))}'

    @staticmethod
    def weather(lat, lon):
        return f'weather:{round(lat, 2)}:{round(lon, 2)}'

    @staticmethod
    def community_reviews(name, address):
        return f'community:{_digest(name, address)}'

    @staticmethod
    def public_stats():
        return 'stats:public'
