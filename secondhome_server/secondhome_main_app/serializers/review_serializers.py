"""Review serializers"""
from rest_framework import serializers

from ..models import Review


class ReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ['id', 'property', 'user_name', 'rating', 'comment', 'created_at']
        read_only_fields = ['created_at']

    def get_user_name(self, obj):
        profile = getattr(obj.user, 'profile', None)
        return (profile.name if profile else '') or 'Student'

    def validate(self, data):
        request = self.context.get('request')
        prop = data.get('property')
        if request and prop and not self.instance:
            if Review.objects.filter(user=request.user, property=prop).exists():
                raise serializers.ValidationError('You have already reviewed this property')
            if not prop.is_approved:
                raise serializers.ValidationError('This property cannot be reviewed')
        return data
