"""Booking-related serializers"""
from rest_framework import serializers

from ..models import Booking, VisitRequest
from ..utils.constants import PaymentMethod
from .property_serializers import PropertyListSerializer
from .user_serializers import UserSerializer


class BookingSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    property_detail = PropertyListSerializer(source='property', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'user', 'property', 'property_detail', 'move_in_date', 'duration_months', 'monthly_rent',
            'security_deposit', 'total_amount', 'status', 'payment_status', 'payment_method', 'payment_id',
            'contact_name', 'contact_phone', 'contact_email', 'created_at', 'cancelled_at',
        ]
        read_only_fields = [
            'monthly_rent', 'security_deposit', 'total_amount', 'status', 'payment_status', 'payment_id',
            'created_at', 'cancelled_at',
        ]


class BookingCreateSerializer(serializers.Serializer):
    property = serializers.IntegerField()
    move_in_date = serializers.DateField()
    duration_months = serializers.IntegerField(min_value=1, default=1)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.CHOICES, default=PaymentMethod.UPI)
    contact_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    contact_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    contact_email = serializers.EmailField(required=False, allow_blank=True)


class VisitRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = VisitRequest
        fields = ['id', 'property', 'name', 'phone', 'email', 'visit_date', 'visit_time', 'notes', 'status', 'created_at']
        read_only_fields = fields
