"""Tests for location, weather and route services"""
from unittest import mock

import requests
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase, override_settings
from googlemaps.exceptions import ApiError

from ..services.location_service import (
    LocationService, LocationNotFoundError, ProviderUnavailableError,
    build_query_candidates, classify_element, compute_insights, rating_label,
)
from ..services.route_service import RouteService
from ..services.weather_service import WeatherService
from ..utils.constants import UserRole
from .helpers import make_user, make_property

ENCODED_POLYLINE = '_p~iF~ps|U_ulLnnqC_mqNvxq`@'


def fake_response(payload):
    response = mock.Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class QueryCandidatesTest(SimpleTestCase):
    def test_candidates_are_deduplicated(self):
        candidates = build_query_candidates('MG Road', 'Bangalore', 'Karnataka', '560001')
        self.assertEqual(candidates, [
            'MG Road',
            'MG Road, Bangalore, Karnataka, 560001, India',
            'Bangalore, Karnataka, 560001, India',
            'MG Road, Bangalore, Karnataka, India',
            'MG Road, India',
        ])

    def test_invalid_pincode_dropped(self):
        candidates = build_query_candidates('Koramangala, India', 'Bangalore', pincode='56')
        self.assertEqual(candidates, [
            'Koramangala, India',
            'Koramangala, India, Bangalore, India',
            'Bangalore, India',
        ])

    def test_empty_address(self):
        self.assertEqual(build_query_candidates('', ''), ['India'])


class InsightsTest(SimpleTestCase):
    def place(self, type, **tags):
        return {'type': type, 'tags': tags, 'opening_hours': tags.get('opening_hours', '')}

    def test_classify_element(self):
        self.assertEqual(classify_element({'amenity': 'fast_food'}), 'restaurant')
        self.assertEqual(classify_element({'highway': 'bus_stop'}), 'transport')
        self.assertIsNone(classify_element({'shop': 'clothes'}))

    def test_compute_insights(self):
        places = [self.place('restaurant') for _ in range(4)]
        places.append(self.place('restaurant', cuisine='cafe'))
        places += [self.place('transport'), self.place('transport'), self.place('police')]
        places.append(self.place('hospital', opening_hours='24/7'))
        places.append(self.place('laundry', shop='laundry'))

        insights = compute_insights(places)

        self.assertEqual(insights['counts']['restaurant'], 5)
        self.assertEqual(insights['counts']['cafe'], 1)
        self.assertEqual(insights['counts']['laundry'], 1)
        self.assertTrue(insights['has_24x7'])
        self.assertEqual(insights['scores'], {
            'food': 50,
            'health': 20,
            'connectivity': 13,
            'safety': 50,
            'convenience': 0,
            'fitness': 0,
            'walkability': 33,
            'night_safety': 30,
            'wifi': 75,
        })
        self.assertEqual(insights['overall'], 29)
        self.assertEqual(insights['rating'], 'Limited')
        self.assertEqual(insights['cost_estimate'], {'food': 5500, 'transport': 1900, 'misc': 2000, 'total': 9400})

    def test_scores_are_capped(self):
        insights = compute_insights([self.place('police') for _ in range(5)])
        self.assertEqual(insights['scores']['safety'], 100)
        self.assertEqual(insights['scores']['night_safety'], 75)

    def test_scores_round_half_up(self):
        insights = compute_insights([self.place('restaurant')])
        self.assertEqual(insights['scores']['wifi'], 13)
        self.assertEqual(insights['scores']['walkability'], 7)
        self.assertEqual(insights['scores']['night_safety'], 1)
        self.assertEqual(insights['overall'], 3)

    def test_rating_label(self):
        self.assertEqual(rating_label(85), 'Excellent')
        self.assertEqual(rating_label(60), 'Good')
        self.assertEqual(rating_label(41), 'Average')
        self.assertEqual(rating_label(10), 'Limited')


class GeocodeTest(TestCase):
    def setUp(self):
        cache.clear()
        self.session = mock.Mock()
        self.service = LocationService(session=self.session)

    def test_nominatim_prefers_matching_city(self):
        self.session.get.return_value = fake_response([
            {'lat': '12.30', 'lon': '76.65', 'importance': 0.9, 'display_name': 'MG Road, Mysore',
             'address': {'city': 'Mysore', 'state': 'Karnataka'}},
            {'lat': '12.975', 'lon': '77.606', 'importance': 0.5, 'display_name': 'MG Road, Bangalore',
             'address': {'city': 'Bangalore', 'state': 'Karnataka', 'postcode': '560001'}},
        ])

        result = self.service.geocode('MG Road', 'Bangalore', 'Karnataka', '560001')
        self.assertEqual(result['provider'], 'nominatim')
        self.assertEqual((result['lat'], result['lon']), (12.975, 77.606))
        self.assertEqual(result['query'], 'MG Road')

    def test_result_is_cached(self):
        self.session.get.return_value = fake_response([{'lat': '12.9', 'lon': '77.6', 'address': {}}])
        self.service.geocode('Koramangala', 'Bangalore')
        self.service.geocode('Koramangala', 'Bangalore')
        self.assertEqual(self.session.get.call_count, 1)

    def test_falls_back_to_photon(self):
        def get(url, **kwargs):
            if 'photon' in url:
                return fake_response({'features': [{
                    'geometry': {'coordinates': [77.62, 12.93]},
                    'properties': {'name': 'Koramangala', 'city': 'Bangalore', 'state': 'Karnataka'},
                }]})
            return fake_response([])

        self.session.get.side_effect = get
        result = self.service.geocode('Koramangala', 'Bangalore')
        self.assertEqual(result['provider'], 'photon')
        self.assertEqual((result['lat'], result['lon']), (12.93, 77.62))
        self.assertEqual(result['display_name'], 'Koramangala, Bangalore, Karnataka')

    def test_not_found(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError('offline')
        with self.assertRaises(LocationNotFoundError):
            self.service.geocode('Nowhere', 'Atlantis')

    def test_reverse_geocode(self):
        self.session.get.return_value = fake_response({
            'display_name': 'Koramangala, Bangalore',
            'address': {'town': 'Bangalore', 'state': 'Karnataka', 'postcode': '560034', 'suburb': 'Koramangala'},
        })
        self.assertEqual(self.service.reverse_geocode(12.93, 77.62), {
            'display_name': 'Koramangala, Bangalore',
            'city': 'Bangalore',
            'state': 'Karnataka',
            'pincode': '560034',
            'locality': 'Koramangala',
        })

    def test_reverse_geocode_errors(self):
        self.session.get.return_value = fake_response({'error': 'Unable to geocode'})
        with self.assertRaises(LocationNotFoundError):
            self.service.reverse_geocode(0, 0)

        self.session.get.side_effect = requests.exceptions.Timeout('slow')
        with self.assertRaises(ProviderUnavailableError):
            self.service.reverse_geocode(0, 0)


class NearbyPlacesTest(TestCase):
    def setUp(self):
        cache.clear()
        self.session = mock.Mock()
        self.service = LocationService(session=self.session)
        self.elements = {'elements': [
            {'id': 1, 'lat': 12.9452, 'lon': 77.6245, 'tags': {'amenity': 'hospital', 'name': 'City Hospital'}},
            {'id': 2, 'lat': 12.9362, 'lon': 77.6245, 'tags': {'amenity': 'restaurant', 'name': 'Dosa Corner'}},
            {'id': 3, 'center': {'lat': 12.9372, 'lon': 77.6245}, 'tags': {'shop': 'laundry'}},
            {'id': 4, 'lat': 12.9360, 'lon': 77.6245, 'tags': {'shop': 'clothes'}},
            {'id': 2, 'lat': 12.9362, 'lon': 77.6245, 'tags': {'amenity': 'restaurant', 'name': 'Dosa Corner'}},
        ]}

    def test_falls_through_overpass_endpoints(self):
        self.session.post.side_effect = [
            requests.exceptions.ConnectionError('down'),
            fake_response(self.elements),
        ]

        places = self.service.nearby_places(12.9352, 77.6245, radius=2000, categories=['restaurant', 'hospital'])
        self.assertEqual([p['name'] for p in places], ['Dosa Corner', 'laundry', 'City Hospital'])
        self.assertEqual(places[1]['type'], 'laundry')
        self.assertEqual(self.session.post.call_count, 2)

    def test_all_endpoints_down(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError('down')
        with self.assertRaises(ProviderUnavailableError):
            self.service.nearby_places(12.9352, 77.6245)

    def test_nearest_college(self):
        places = [
            {'type': 'college', 'name': 'Far College', 'lat': 13.0, 'lon': 77.6},
            {'type': 'college', 'name': 'Christ University', 'lat': 12.9362, 'lon': 77.6045},
            {'type': 'restaurant', 'name': 'Dosa Corner', 'lat': 12.9352, 'lon': 77.6045},
        ]
        nearest = self.service.nearest_college(12.9352, 77.6045, places)
        self.assertEqual(nearest['name'], 'Christ University')
        self.assertEqual(nearest['distance'], 0.11)


class TrendingAreasTest(TestCase):
    def test_ranked_by_listings_then_views(self):
        owner = make_user('owner@example.com', role=UserRole.OWNER)
        make_property(owner, location='Koramangala', latitude=12.935, longitude=77.624, views_count=5)
        make_property(owner, location='Koramangala', latitude=12.937, longitude=77.626, views_count=1)
        make_property(owner, location='Indiranagar', latitude=12.978, longitude=77.640, views_count=50)
        make_property(owner, location='Bandra', city='Mumbai', latitude=19.06, longitude=72.83)
        make_property(owner, location='Koramangala', latitude=12.936, longitude=77.625, is_approved=False)

        areas = LocationService(session=mock.Mock()).trending_areas(12.935, 77.624, radius_km=10)

        self.assertEqual([a['name'] for a in areas], ['Koramangala', 'Indiranagar'])
        self.assertEqual(areas[0]['listings'], 2)
        self.assertEqual(areas[0]['views'], 6)
        self.assertEqual(areas[0]['lat'], 12.936)
        self.assertEqual(areas[0]['average_price'], 8000)


class WeatherServiceTest(TestCase):
    def setUp(self):
        cache.clear()

    def test_mock_without_key(self):
        weather = WeatherService(api_key='').current(12.9352, 77.6251)
        self.assertTrue(weather['is_mock_data'])
        self.assertEqual(weather['location'], '12.935, 77.625')

    @mock.patch('secondhome_main_app.services.weather_service.requests.get')
    def test_live_weather(self, get):
        get.return_value = fake_response({
            'main': {'temp': 24.5, 'feels_like': 25.0, 'humidity': 70},
            'weather': [{'main': 'Clouds', 'description': 'broken clouds', 'icon': '04d'}],
            'wind': {'speed': 3.1},
            'name': 'Bengaluru',
        })
        weather = WeatherService(api_key='key').current(12.97, 77.59)
        self.assertFalse(weather['is_mock_data'])
        self.assertEqual(weather['condition'], 'Clouds')
        self.assertEqual(weather['location'], 'Bengaluru')

    @mock.patch('secondhome_main_app.services.weather_service.requests.get')
    def test_provider_failure_uses_mock(self, get):
        get.side_effect = requests.exceptions.ConnectionError('down')
        self.assertTrue(WeatherService(api_key='key').current(12.97, 77.59)['is_mock_data'])


@override_settings(GOOGLE_MAPS_API_KEY='')
class RouteServiceTest(SimpleTestCase):
    @mock.patch('secondhome_main_app.services.route_service.requests.get')
    def test_osrm_route(self, get):
        get.return_value = fake_response({
            'code': 'Ok',
            'routes': [{'distance': 2346, 'duration': 600, 'geometry': ENCODED_POLYLINE}],
        })
        route = RouteService().get_route((12.93, 77.62), (12.97, 77.59), mode='walking')

        self.assertEqual(route['provider'], 'osrm')
        self.assertEqual(route['distance_km'], 2.35)
        self.assertEqual(route['duration_minutes'], 10)
        self.assertEqual(route['points'][0], (38.5, -120.2))
        self.assertIn('/foot/77.62,12.93;77.59,12.97', get.call_args[0][0])

    @mock.patch('secondhome_main_app.services.route_service.requests.get')
    def test_osrm_no_route(self, get):
        get.return_value = fake_response({'code': 'NoRoute', 'routes': []})
        with self.assertRaises(ProviderUnavailableError):
            RouteService().get_route((12.93, 77.62), (12.97, 77.59))

    def test_google_route(self):
        service = RouteService()
        service.gmaps = mock.Mock()
        service.gmaps.directions.return_value = [{
            'summary': 'Hosur Rd',
            'legs': [{'distance': {'value': 5400}, 'duration': {'value': 1260}}],
            'overview_polyline': {'points': ENCODED_POLYLINE},
        }]

        route = service.get_route((12.93, 77.62), (12.97, 77.59), mode='teleport')
        self.assertEqual(route['provider'], 'google')
        self.assertEqual(route['distance_km'], 5.4)
        self.assertEqual(route['duration_minutes'], 21)
        service.gmaps.directions.assert_called_once_with((12.93, 77.62), (12.97, 77.59), mode='driving', region='in')

    def test_google_error(self):
        service = RouteService()
        service.gmaps = mock.Mock()
        service.gmaps.directions.side_effect = ApiError('REQUEST_DENIED')
        with self.assertRaises(ProviderUnavailableError):
            service.get_route((12.93, 77.62), (12.97, 77.59))

    def test_straight_line(self):
        result = RouteService().straight_line((12.9716, 77.5946), (12.9716, 77.5946))
        self.assertEqual(result, {'distance_km': 0.0})
