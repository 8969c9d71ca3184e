"""Property serializers"""
from rest_framework import serializers

from ..models import Property
from ..utils.constants import Gender


class PropertyListSerializer(serializers.ModelSerializer):
    is_verified = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            'id', 'title', 'property_type', 'gender', 'price', 'location', 'city', 'latitude', 'longitude',
            'amenities', 'images', 'rating', 'reviews_count', 'verification_status', 'is_verified', 'created_at',
        ]

    def get_is_verified(self, obj):
        return obj.verification_status == 'verified'


class PropertySerializer(serializers.ModelSerializer):
    owner = serializers.SerializerMethodField()
    moderation_state = serializers.CharField(read_only=True)

    class Meta:
        model = Property
        fields = [
            'id', 'owner', 'title', 'description', 'property_type', 'gender', 'price', 'security_deposit',
            'address', 'location', 'city', 'state', 'pincode', 'latitude', 'longitude', 'amenities', 'images',
            'rating', 'reviews_count', 'views_count', 'verification_status', 'nearby_colleges', 'nearby_places',
            'distance', 'is_approved', 'is_rejected', 'rejection_reason', 'moderation_state', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'rating', 'reviews_count', 'views_count', 'verification_status', 'is_approved', 'is_rejected',
            'rejection_reason', 'created_at', 'updated_at',
        ]

    def get_owner(self, obj):
        profile = getattr(obj.owner, 'profile', None)
        return {'id': obj.owner_id, 'name': profile.name if profile else ''}

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('gender'), str):
            data = data.copy()
            data['gender'] = data['gender'].lower()
        return super().to_internal_value(data)

    def validate_title(self, value):
        if len(value.strip()) < 5:
            raise serializers.ValidationError('Title must be at least 5 characters')
        return value.strip()

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Price must be greater than 0')
        return value

    def validate_gender(self, value):
        if value not in dict(Gender.CHOICES):
            raise serializers.ValidationError('Invalid gender')
        return value

    def validate_pincode(self, value):
        if value and not (value.isdigit() and len(value) == 6):
            raise serializers.ValidationError('Pincode must be 6 digits')
        return value

    def validate(self, data):
        lat = data.get('latitude', getattr(self.instance, 'latitude', None))
        lon = data.get('longitude', getattr(self.instance, 'longitude', None))
        if (lat is None) != (lon is None):
            raise serializers.ValidationError('Latitude and longitude must be provided together')
        if lat is not None and not (-90 <= lat <= 90 and -180 <= lon <= 180):
            raise serializers.ValidationError('Invalid coordinates')
        if not self.instance and not (data.get('address') or data.get('location')):
            raise serializers.ValidationError('Address or location is required')
        return data
