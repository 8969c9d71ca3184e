"""Weather service - current conditions from OpenWeather"""
import logging

import requests
from django.conf import settings
from django.core.cache import cache

from ..utils.cache_keys import CacheKeys

logger = logging.getLogger(__name__)

OPENWEATHER_URL = 'https://api.openweathermap.org/data/2.5/weather'


def mock_weather(lat, lon):
    return {
        'temperature': 28.0,
        'feels_like': 30.0,
        'humidity': 60,
        'condition': 'Clear',
        'description': 'clear sky',
        'wind_speed': 2.5,
        'icon': '01d',
        'location': f'{round(lat, 3)}, {round(lon, 3)}',
        'is_mock_data': True,
    }


class WeatherService:
    def __init__(self, api_key=None):
        self.api_key = api_key if api_key is not None else settings.OPENWEATHER_API_KEY

    def current(self, lat, lon):
        """Current weather, a flagged mock payload when unavailable"""
        if not self.api_key:
            return mock_weather(lat, lon)

        cache_key = CacheKeys.weather(lat, lon)
        cached = cache.get(cache_key)
        if cached:
            return cached

        try:
            response = requests.get(
                OPENWEATHER_URL,
                params={'lat': lat, 'lon': lon, 'appid': self.api_key, 'units': 'metric'},
                timeout=10,
            )
            response.raise_for_status()
            data = response.json()
            weather = (data.get('weather') or [{}])[0]
            result = {
                'temperature': data['main']['temp'],
                'feels_like': data['main'].get('feels_like'),
                'humidity': data['main'].get('humidity'),
                'condition': weather.get('main', ''),
                'description': weather.get('description', ''),
                'wind_speed': (data.get('wind') or {}).get('speed'),
                'icon': weather.get('icon', ''),
                'location': data.get('name', ''),
                'is_mock_data': False,
            }
        except (requests.exceptions.RequestException, KeyError, ValueError) as e:
            logger.warning(f'[WEATHER] OpenWeather request failed, using mock data: {e}')
            return mock_weather(lat, lon)

        cache.set(cache_key, result, timeout=600)
        return result
