"""Mess serializers"""
from rest_framework import serializers

from ..models import Mess, MessSubscription


class MessSerializer(serializers.ModelSerializer):
    moderation_state = serializers.CharField(read_only=True)

    class Meta:
        model = Mess
        exclude = ['approved_by', 'rejected_by', 'ai_review']
        read_only_fields = [
            'owner', 'rating', 'reviews_count', 'is_approved', 'is_rejected', 'approved_at', 'rejected_at',
            'rejection_reason', 'created_at', 'updated_at',
        ]

    def validate_monthly_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Monthly price must be greater than 0')
        return value


class MessSubscriptionSerializer(serializers.ModelSerializer):
    mess_name = serializers.CharField(source='mess.name', read_only=True)

    class Meta:
        model = MessSubscription
        fields = [
            'id', 'mess', 'mess_name', 'start_date', 'end_date', 'monthly_price', 'status',
            'subscriber_name', 'subscriber_email', 'subscriber_phone', 'created_at',
        ]
        read_only_fields = fields
