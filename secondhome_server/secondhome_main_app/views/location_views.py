"""Location intelligence views - geocoding, POIs, insights, weather and routes"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..services import (
    LocationService, ProviderUnavailableError, LocationNotFoundError,
    WeatherService, RouteService, CommunityReviewService,
)
from ..services.location_service import distance_km


def parse_point(params, lat_key='lat', lon_key='lon'):
    """(lat, lon) from query params, None when missing or out of range"""
    try:
        lat = float(params.get(lat_key))
        lon = float(params.get(lon_key))
    except (TypeError, ValueError):
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return lat, lon


INVALID_COORDINATES = {'error': 'Valid lat and lon are required'}


class LocationViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]
    authentication_classes = []

    @action(detail=False, methods=['get'], url_path='geocode')
    def geocode(self, request):
        params = request.query_params
        try:
            result = LocationService().geocode(
                params.get('address', ''),
                city=params.get('city', ''),
                state=params.get('state', ''),
                pincode=params.get('pincode', ''),
                country=params.get('country') or 'India',
            )
        except LocationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(result)

    @action(detail=False, methods=['get'], url_path='reverse')
    def reverse(self, request):
        point = parse_point(request.query_params)
        if not point:
            return Response(INVALID_COORDINATES, status=status.HTTP_400_BAD_REQUEST)
        try:
            return Response(LocationService().reverse_geocode(*point))
        except LocationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ProviderUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    @action(detail=False, methods=['get'], url_path='nearby')
    def nearby(self, request):
        point = parse_point(request.query_params)
        if not point:
            return Response(INVALID_COORDINATES, status=status.HTTP_400_BAD_REQUEST)
        categories = [c for c in request.query_params.get('categories', '').split(',') if c]
        try:
            places = LocationService().nearby_places(
                *point, radius=request.query_params.get('radius'), categories=categories,
            )
        except ValueError:
            return Response({'error': 'radius must be a number'}, status=status.HTTP_400_BAD_REQUEST)
        except ProviderUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({'places': places, 'count': len(places)})

    @action(detail=False, methods=['get'], url_path='insights')
    def insights(self, request):
        point = parse_point(request.query_params)
        if not point:
            return Response(INVALID_COORDINATES, status=status.HTTP_400_BAD_REQUEST)
        try:
            insights = LocationService().insights(*point, radius=request.query_params.get('radius'))
        except ValueError:
            return Response({'error': 'radius must be a number'}, status=status.HTTP_400_BAD_REQUEST)
        except ProviderUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(insights)

    @action(detail=False, methods=['get'], url_path='distance')
    def distance(self, request):
        origin = parse_point(request.query_params, 'lat1', 'lon1')
        destination = parse_point(request.query_params, 'lat2', 'lon2')
        if not origin or not destination:
            return Response({'error': 'Valid lat1, lon1, lat2 and lon2 are required'},
                            status=status.HTTP_400_BAD_REQUEST)
        return Response({'distance_km': round(distance_km(*origin, *destination), 2)})

    @action(detail=False, methods=['get'], url_path='weather')
    def weather(self, request):
        point = parse_point(request.query_params)
        if not point:
            return Response(INVALID_COORDINATES, status=status.HTTP_400_BAD_REQUEST)
        return Response(WeatherService().current(*point))

    @action(detail=False, methods=['get'], url_path='route')
    def route(self, request):
        origin = parse_point(request.query_params, 'origin_lat', 'origin_lon')
        destination = parse_point(request.query_params, 'dest_lat', 'dest_lon')
        if not origin or not destination:
            return Response({'error': 'Valid origin and destination coordinates are required'},
                            status=status.HTTP_400_BAD_REQUEST)
        service = RouteService()
        try:
            route = service.get_route(origin, destination, request.query_params.get('mode', 'driving'))
        except ProviderUnavailableError as e:
            return Response(
                {'error': str(e), 'fallback': service.straight_line(origin, destination)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return Response(route)

    @action(detail=False, methods=['get'], url_path='trending')
    def trending(self, request):
        point = parse_point(request.query_params)
        if not point:
            return Response(INVALID_COORDINATES, status=status.HTTP_400_BAD_REQUEST)
        try:
            areas = LocationService().trending_areas(
                *point, radius_km=request.query_params.get('radius'), limit=request.query_params.get('limit'),
            )
        except ValueError:
            return Response({'error': 'radius and limit must be numbers'}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'areas': areas})

    @action(detail=False, methods=['get'], url_path='community-reviews')
    def community_reviews(self, request):
        name = (request.query_params.get('name') or '').strip()
        if not name:
            return Response({'error': 'Location name is required'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CommunityReviewService().reviews_for(name, request.query_params.get('address', '')))
