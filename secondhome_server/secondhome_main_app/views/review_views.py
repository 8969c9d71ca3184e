"""Review views"""
from rest_framework import viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Review
from ..serializers import ReviewSerializer


class ReviewViewSet(viewsets.ModelViewSet):
    serializer_class = ReviewSerializer
    authentication_classes = [JWTAuthentication]
    http_method_names = ['get', 'post', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_queryset(self):
        if self.action == 'destroy':
            return Review.objects.filter(user=self.request.user)

        queryset = Review.objects.select_related('user', 'user__profile')
        property_id = self.request.query_params.get('property')
        if property_id and property_id.isdigit():
            queryset = queryset.filter(property_id=property_id)
        return queryset

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)
