"""Live chat serializers"""
from rest_framework import serializers

from ..models import Conversation, ConversationMessage


class ConversationMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConversationMessage
        fields = ['id', 'sender', 'content', 'created_at']


class ConversationSerializer(serializers.ModelSerializer):
    messages = ConversationMessageSerializer(many=True, read_only=True)

    class Meta:
        model = Conversation
        fields = ['id', 'name', 'email', 'phone', 'status', 'created_at', 'closed_at', 'messages']
