"""Location intelligence - geocoding, nearby places and neighbourhood insights"""
import logging
import math
import re
from collections import defaultdict

import requests
from django.conf import settings
from django.core.cache import cache
from geopy.distance import geodesic
from shapely.geometry import MultiPoint

from ..models import Property
from ..utils.cache_keys import CacheKeys
from ..utils.constants import BusinessRules, InsightRules

logger = logging.getLogger(__name__)

NOMINATIM_URL = 'https://nominatim.openstreetmap.org'
PHOTON_URL = 'https://photon.komoot.io/api/'
OVERPASS_ENDPOINTS = [
    'https://overpass-api.de/api/interpreter',
    'https://overpass.kumi.systems/api/interpreter',
    'https://overpass.openstreetmap.ru/api/interpreter',
]
OVERPASS_TIMEOUT = 25

# category -> (OSM key, value) pairs, and whether the category is on by default
POI_CATEGORIES = {
    'restaurant': {'tags': [('amenity', 'restaurant'), ('amenity', 'fast_food')], 'default': True},
    'hospital': {'tags': [('amenity', 'hospital'), ('amenity', 'clinic')], 'default': True},
    'transport': {'tags': [('highway', 'bus_stop'), ('public_transport', 'station')], 'default': True},
    'college': {
        'tags': [('amenity', 'university'), ('amenity', 'college'), ('building', 'university'), ('building', 'college')],
        'default': True,
    },
    'atm': {'tags': [('amenity', 'atm'), ('amenity', 'bank')], 'default': True},
    'gym': {'tags': [('leisure', 'fitness_centre'), ('leisure', 'sports_centre')], 'default': False},
    'grocery': {'tags': [('shop', 'supermarket'), ('shop', 'convenience'), ('shop', 'grocery')], 'default': True},
    'pharmacy': {'tags': [('amenity', 'pharmacy')], 'default': True},
    'police': {'tags': [('amenity', 'police')], 'default': True},
}

# Extra tags fetched alongside the selected categories for insight scoring
INSIGHT_EXTRA_TAGS = [('shop', 'laundry'), ('amenity', 'laundry')]

PINCODE_PATTERN = re.compile(r'^\d{6}$')
INDIA_PATTERN = re.compile(r'\bindia\b', re.IGNORECASE)


class ProviderUnavailableError(Exception):
    """Raised when every upstream location provider failed"""
    pass


class LocationNotFoundError(Exception):
    """Raised when geocoding finds no match"""
    pass


def distance_km(lat1, lon1, lat2, lon2):
    return geodesic((lat1, lon1), (lat2, lon2)).km


def build_query_candidates(address, city='', state='', pincode='', country='India'):
    address = (address or '').strip()
    city = (city or '').strip()
    state = (state or '').strip()
    pincode = (pincode or '').strip()
    country = (country or 'India').strip()
    pin = pincode if PINCODE_PATTERN.match(pincode) else ''

    def join(*parts):
        return ', '.join(p for p in parts if p)

    candidates = [address, join(address, city, state, pin, country)]
    context_only = join(city, state, pin, country)
    if context_only:
        candidates.append(context_only)
    if address and city and state and len(address) < 25:
        candidates.append(f'{address}, {city}, {state}, {country}')
    if address and not INDIA_PATTERN.search(address):
        candidates.append(f'{address}, {country}')

    seen = set()
    result = []
    for candidate in candidates:
        query = re.sub(r'\s+', ' ', candidate).strip()
        if len(query) < 3 or query.lower() in seen:
            continue
        seen.add(query.lower())
        result.append(query)
    return result[:BusinessRules.MAX_GEOCODE_CANDIDATES]


def build_overpass_query(lat, lon, radius, tags):
    parts = []
    for key, value in tags:
        parts.append(f'node["{key}"="{value}"](around:{radius},{lat},{lon});')
        parts.append(f'way["{key}"="{value}"](around:{radius},{lat},{lon});')
    return f'[out:json][timeout:20];({"".join(parts)});out center;'


def classify_element(tags):
    """Map an OSM element's tags to its category, None when unrelated"""
    for category, config in POI_CATEGORIES.items():
        for key, value in config['tags']:
            if tags.get(key) == value:
                return category
    return None


def is_open_24x7(opening_hours):
    return bool(opening_hours) and ('24/7' in opening_hours or '00:00-24:00' in opening_hours)


def round_half_up(value):
    return int(math.floor(value + 0.5))


def _capped(count, full):
    return min(100, count / full * 100)


def compute_insights(places):
    """Neighbourhood scores from a list of classified places"""
    counts = defaultdict(int)
    cafes = 0
    laundries = 0
    has_24x7 = False
    for place in places:
        counts[place['type']] += 1
        tags = place.get('tags') or {}
        if place['type'] == 'restaurant' and tags.get('cuisine') == 'cafe':
            cafes += 1
        if tags.get('shop') == 'laundry' or tags.get('amenity') == 'laundry':
            laundries += 1
        if is_open_24x7(place.get('opening_hours')):
            has_24x7 = True

    restaurants = counts['restaurant']
    transport = counts['transport']

    raw = {
        'food': _capped(restaurants, InsightRules.FOOD_FULL),
        'health': _capped(counts['hospital'] + counts['pharmacy'], InsightRules.HEALTH_FULL),
        'connectivity': _capped(transport, InsightRules.CONNECTIVITY_FULL),
        'safety': _capped(counts['police'], InsightRules.SAFETY_FULL),
        'convenience': _capped(counts['grocery'] + counts['atm'], InsightRules.CONVENIENCE_FULL),
        'fitness': _capped(counts['gym'], InsightRules.FITNESS_FULL),
        'walkability': _capped(restaurants + counts['grocery'] + counts['atm'], InsightRules.WALKABILITY_FULL),
        'night_safety': min(100, (counts['police'] * 30 + (20 if has_24x7 else 0) + restaurants * 2) / 2),
        'wifi': _capped(cafes + restaurants, InsightRules.WIFI_FULL),
    }
    scores = {key: round_half_up(value) for key, value in raw.items()}
    overall = round_half_up(sum(raw[key] * weight for key, weight in InsightRules.WEIGHTS.items()))

    food_cost = max(InsightRules.FOOD_COST_MIN, InsightRules.FOOD_COST_BASE - restaurants * InsightRules.FOOD_COST_PER_RESTAURANT)
    transport_cost = max(InsightRules.TRANSPORT_COST_MIN, InsightRules.TRANSPORT_COST_BASE - transport * InsightRules.TRANSPORT_COST_PER_STOP)

    return {
        'counts': {**{category: counts[category] for category in POI_CATEGORIES}, 'cafe': cafes, 'laundry': laundries},
        'scores': scores,
        'overall': overall,
        'rating': rating_label(overall),
        'has_24x7': has_24x7,
        'cost_estimate': {
            'food': food_cost,
            'transport': transport_cost,
            'misc': InsightRules.MISC_COST,
            'total': food_cost + transport_cost + InsightRules.MISC_COST,
        },
    }


def rating_label(overall):
    if overall >= 80:
        return 'Excellent'
    if overall >= 60:
        return 'Good'
    if overall >= 40:
        return 'Average'
    return 'Limited'


class LocationService:
    """Geocoding, POI lookup and neighbourhood analytics"""

    def __init__(self, session=None):
        self.session = session or requests.Session()

    def _nominatim_headers(self):
        return {
            'User-Agent': settings.GEOCODER_USER_AGENT,
            'Accept-Language': 'en',
            'Referer': settings.SITE_URL,
        }

    def _pick_nominatim(self, results, city, state, pincode):
        best = None
        best_key = None
        for result in results:
            addr = result.get('address') or {}
            result_city = str(addr.get('city') or addr.get('town') or addr.get('village') or addr.get('county') or '').lower()
            score = 0
            if city and city.lower() in result_city:
                score += 3
            if state and state.lower() in str(addr.get('state') or '').lower():
                score += 2
            if pincode and str(addr.get('postcode') or '') == pincode:
                score += 3
            key = (score, float(result.get('importance') or 0))
            if best_key is None or key > best_key:
                best, best_key = result, key
        if not best:
            return None
        try:
            return {'lat': float(best['lat']), 'lon': float(best['lon']), 'display_name': best.get('display_name', '')}
        except (KeyError, TypeError, ValueError):
            return None

    def _pick_photon(self, features):
        if not features:
            return None
        best = features[0]
        coords = (best.get('geometry') or {}).get('coordinates') or []
        if len(coords) < 2:
            return None
        props = best.get('properties') or {}
        label = ', '.join(p for p in [props.get('name'), props.get('city'), props.get('state')] if p)
        return {'lat': float(coords[1]), 'lon': float(coords[0]), 'display_name': label}

    def geocode(self, address, city='', state='', pincode='', country='India'):
        """Forward geocode, Nominatim first then Photon.

        Raises LocationNotFoundError when no provider matches.
        """
        candidates = build_query_candidates(address, city, state, pincode, country)
        if not candidates:
            raise LocationNotFoundError('Address is required')

        cache_key = CacheKeys.geocode('|'.join(candidates))
        cached = cache.get(cache_key)
        if cached:
            return cached

        result = None
        for query in candidates:
            try:
                response = self.session.get(
                    f'{NOMINATIM_URL}/search',
                    params={'format': 'json', 'addressdetails': 1, 'limit': 5, 'q': query},
                    headers=self._nominatim_headers(),
                    timeout=10,
                )
                response.raise_for_status()
                picked = self._pick_nominatim(response.json(), city, state, pincode)
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.warning(f'[GEOCODE] Nominatim failed for "{query}": {e}')
                continue
            if picked:
                result = {**picked, 'provider': 'nominatim', 'query': query}
                break

        if result is None:
            for query in candidates:
                try:
                    response = self.session.get(PHOTON_URL, params={'limit': 5, 'lang': 'en', 'q': query}, timeout=10)
                    response.raise_for_status()
                    picked = self._pick_photon(response.json().get('features') or [])
                except (requests.exceptions.RequestException, ValueError) as e:
                    logger.warning(f'[GEOCODE] Photon failed for "{query}": {e}')
                    continue
                if picked:
                    result = {**picked, 'provider': 'photon', 'query': query}
                    break

        if result is None:
            raise LocationNotFoundError('Could not find coordinates for this address')

        cache.set(cache_key, result, timeout=24 * 3600)
        return result

    def reverse_geocode(self, lat, lon):
        try:
            response = self.session.get(
                f'{NOMINATIM_URL}/reverse',
                params={'format': 'json', 'addressdetails': 1, 'lat': lat, 'lon': lon},
                headers=self._nominatim_headers(),
                timeout=10,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ProviderUnavailableError(f'Reverse geocoding failed: {e}')

        if not data or 'error' in data:
            raise LocationNotFoundError('No address found for these coordinates')
        addr = data.get('address') or {}
        return {
            'display_name': data.get('display_name', ''),
            'city': addr.get('city') or addr.get('town') or addr.get('village') or '',
            'state': addr.get('state', ''),
            'pincode': addr.get('postcode', ''),
            'locality': addr.get('suburb') or addr.get('neighbourhood') or '',
        }

    def _run_overpass(self, query):
        last_error = None
        for endpoint in OVERPASS_ENDPOINTS:
            try:
                response = self.session.post(endpoint, data={'data': query}, timeout=OVERPASS_TIMEOUT)
                response.raise_for_status()
                return response.json().get('elements', [])
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.warning(f'[POI] Overpass endpoint {endpoint} failed: {e}')
                last_error = e
        raise ProviderUnavailableError(f'All Overpass endpoints failed: {last_error}')

    def nearby_places(self, lat, lon, radius=None, categories=None):
        """Points of interest around a coordinate grouped by category"""
        radius = int(radius or BusinessRules.DEFAULT_POI_RADIUS_METERS)
        if categories:
            categories = [c for c in categories if c in POI_CATEGORIES]
        else:
            categories = [c for c, config in POI_CATEGORIES.items() if config['default']]

        cache_key = CacheKeys.nearby_places(lat, lon, radius, categories)
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        tags = [tag for category in categories for tag in POI_CATEGORIES[category]['tags']]
        elements = self._run_overpass(build_overpass_query(lat, lon, radius, tags + INSIGHT_EXTRA_TAGS))

        places = []
        seen = set()
        for element in elements:
            element_tags = element.get('tags') or {}
            category = classify_element(element_tags)
            if category not in categories and not (
                element_tags.get('shop') == 'laundry' or element_tags.get('amenity') == 'laundry'
            ):
                continue

            element_lat = element.get('lat') or (element.get('center') or {}).get('lat')
            element_lon = element.get('lon') or (element.get('center') or {}).get('lon')
            if element_lat is None or element_lon is None or element.get('id') in seen:
                continue
            seen.add(element.get('id'))

            places.append({
                'id': element.get('id'),
                'name': element_tags.get('name') or category or 'laundry',
                'type': category or 'laundry',
                'lat': element_lat,
                'lon': element_lon,
                'distance': round(distance_km(lat, lon, element_lat, element_lon), 2),
                'tags': element_tags,
                'opening_hours': element_tags.get('opening_hours', ''),
            })

        places.sort(key=lambda p: p['distance'])
        cache.set(cache_key, places, timeout=3600)
        return places

    def nearest_college(self, lat, lon, places):
        """Nearest college using the flat-earth approximation the map overlay uses"""
        nearest = None
        for place in places:
            if place['type'] != 'college':
                continue
            km = ((place['lat'] - lat) ** 2 + (place['lon'] - lon) ** 2) ** 0.5 * BusinessRules.KM_PER_DEGREE
            if nearest is None or km < nearest['distance']:
                nearest = {'name': place['name'], 'distance': round(km, 2), 'lat': place['lat'], 'lon': place['lon']}
        return nearest

    def insights(self, lat, lon, radius=None):
        places = self.nearby_places(lat, lon, radius, categories=list(POI_CATEGORIES))
        insights = compute_insights(places)
        insights['nearest_college'] = self.nearest_college(lat, lon, places)
        return insights

    def trending_areas(self, lat, lon, radius_km=None, limit=None):
        """Localities around a point ranked by listing count then total views"""
        radius_km = float(radius_km or BusinessRules.DEFAULT_TRENDING_RADIUS_KM)
        limit = int(limit or BusinessRules.DEFAULT_TRENDING_LIMIT)

        groups = defaultdict(list)
        queryset = Property.objects.filter(
            is_approved=True, is_rejected=False, latitude__isnull=False, longitude__isnull=False,
        )
        for prop in queryset:
            if distance_km(lat, lon, prop.latitude, prop.longitude) <= radius_km:
                groups[(prop.location or prop.city or 'Unknown').strip()].append(prop)

        areas = []
        for name, props in groups.items():
            center = MultiPoint([(p.longitude, p.latitude) for p in props]).centroid
            prices = [float(p.price) for p in props]
            areas.append({
                'name': name,
                'city': props[0].city,
                'listings': len(props),
                'views': sum(p.views_count for p in props),
                'average_price': round(sum(prices) / len(prices)),
                'lat': round(center.y, 6),
                'lon': round(center.x, 6),
                'distance': round(distance_km(lat, lon, center.y, center.x), 2),
            })

        areas.sort(key=lambda a: (-a['listings'], -a['views'], a['distance']))
        return areas[:limit]
