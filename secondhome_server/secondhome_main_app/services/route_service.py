"""Route planning service using Google Maps, OSRM when no key is set"""
import logging

import googlemaps
import polyline
import requests
from django.conf import settings
from googlemaps.exceptions import ApiError, TransportError, Timeout

from .location_service import ProviderUnavailableError, distance_km

logger = logging.getLogger(__name__)

OSRM_URL = 'https://router.project-osrm.org/route/v1/{profile}/{coords}'
OSRM_PROFILES = {'driving': 'driving', 'walking': 'foot', 'bicycling': 'bike'}


class RouteService:
    def __init__(self, api_key=None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.gmaps = googlemaps.Client(key=self.api_key) if self.api_key else None

    def get_route(self, origin, destination, mode='driving'):
        """Route between two (lat, lon) points with decoded polyline points"""
        if mode not in OSRM_PROFILES:
            mode = 'driving'
        if self.gmaps:
            return self._google_route(origin, destination, mode)
        return self._osrm_route(origin, destination, mode)

    def _google_route(self, origin, destination, mode):
        try:
            routes = self.gmaps.directions(origin, destination, mode=mode, region='in')
        except (ApiError, TransportError, Timeout) as e:
            raise ProviderUnavailableError(f'Google Directions failed: {e}')
        if not routes:
            raise ProviderUnavailableError('No route found')

        route = routes[0]
        leg = route['legs'][0]
        return {
            'provider': 'google',
            'summary': route.get('summary', ''),
            'distance_km': round(leg['distance']['value'] / 1000, 2),
            'duration_minutes': round(leg['duration']['value'] / 60),
            'points': polyline.decode(route['overview_polyline']['points']),
        }

    def _osrm_route(self, origin, destination, mode):
        coords = f'{origin[1]},{origin[0]};{destination[1]},{destination[0]}'
        url = OSRM_URL.format(profile=OSRM_PROFILES[mode], coords=coords)
        try:
            response = requests.get(url, params={'overview': 'full', 'geometries': 'polyline'}, timeout=15)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ProviderUnavailableError(f'OSRM routing failed: {e}')

        if data.get('code') != 'Ok' or not data.get('routes'):
            raise ProviderUnavailableError('No route found')

        route = data['routes'][0]
        return {
            'provider': 'osrm',
            'summary': '',
            'distance_km': round(route['distance'] / 1000, 2),
            'duration_minutes': round(route['duration'] / 60),
            'points': polyline.decode(route['geometry']),
        }

    def straight_line(self, origin, destination):
        return {'distance_km': round(distance_km(origin[0], origin[1], destination[0], destination[1]), 2)}
