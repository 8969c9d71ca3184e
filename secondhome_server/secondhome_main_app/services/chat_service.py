"""Chat service - AI assistant and live-agent escalation"""
import logging
import re
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.utils import timezone
from django.utils.crypto import get_random_string
from openai import OpenAIError

from ..models import Property, Mess, Notification, Conversation, ConversationMessage
from ..utils import llm
from ..utils.constants import (
    BusinessRules, ConversationStatus, NotificationType, NotificationPriority, UserRole,
)
from ..utils.email_utils import send_email
from ..utils.validators import is_valid_email, normalize_email
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

EXECUTIVE_PATTERN = re.compile(
    r'executive|human|agent|talk to someone|speak with|connect with|help me|frustrated|angry|complaint|issue|problem',
    re.IGNORECASE,
)

FALLBACK_REPLY = (
    "Hi! I'm currently learning. You can browse our properties at /listings or contact us at /contact. "
    "How can I help you find your perfect accommodation?"
)
ERROR_REPLY = "I'm having trouble right now. Please try asking something else or refresh the page!"

ASSISTANT_RULES = """HOW TO RESPOND:
1. Be conversational, friendly, and helpful
2. Use the REAL data provided above, never make up listings
3. When suggesting properties, reference actual listings
4. If asked about something not related to accommodations, politely redirect
5. Format prices in Indian Rupees
6. Use bullet points for multiple items and keep responses under 150 words
7. Always end with a helpful suggestion or question
8. If the user asks for a human, acknowledge it and offer to connect them with an executive"""


class ConversationError(Exception):
    """Raised for invalid live-chat operations"""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def wants_executive(message):
    return bool(EXECUTIVE_PATTERN.search(message or ''))


class ChatService:
    def __init__(self):
        self.notifications = NotificationService()

    # AI assistant

    def _inventory(self):
        properties = list(
            Property.objects.filter(is_approved=True, is_rejected=False)
            .only('id', 'title', 'location', 'city', 'price', 'property_type', 'gender', 'rating', 'nearby_colleges')[:100]
        )
        messes = list(
            Mess.objects.filter(is_approved=True, is_rejected=False)
            .only('id', 'name', 'location', 'city', 'monthly_price', 'meal_types', 'rating')[:50]
        )
        return properties, messes

    def _recently_viewed(self, user):
        since = timezone.now() - timedelta(days=1)
        ids = [
            n.metadata.get('property_id')
            for n in Notification.objects.filter(user=user, type=NotificationType.PROPERTY, created_at__gte=since)[:10]
            if n.metadata.get('property_id')
        ]
        return list(Property.objects.filter(id__in=ids))

    def build_system_prompt(self, user=None, user_context=''):
        properties, messes = self._inventory()
        prices = [float(p.price) for p in properties if p.price]
        cities = sorted({p.city for p in properties if p.city} | {m.city for m in messes if m.city})
        colleges = sorted({
            c.get('name') for p in properties for c in (p.nearby_colleges or []) if c.get('name')
        })

        lines = [
            "You are SecondHome AI Assistant, a friendly chatbot for SecondHome, a student accommodation platform in India.",
            "You help students find PGs, flats and messes near their colleges and only answer accommodation questions.",
            '',
            'REAL-TIME DATABASE STATISTICS:',
            f'- Total Properties Listed: {len(properties)}',
            f'- Total Messes: {len(messes)}',
            f'- PGs Available: {sum(1 for p in properties if p.property_type == "PG")}',
            f'- Flats Available: {sum(1 for p in properties if p.property_type == "Flat")}',
        ]
        if prices:
            lines += [
                f'- Average Price: INR {round(sum(prices) / len(prices))}/month',
                f'- Price Range: INR {round(min(prices))} - INR {round(max(prices))}',
            ]
        lines += ['', 'AVAILABLE CITIES: ' + (', '.join(cities[:20]) or 'none yet')]
        if colleges:
            lines.append('TOP COLLEGES WE SERVE: ' + ', '.join(colleges[:20]))

        top_rated = sorted((p for p in properties if p.rating), key=lambda p: p.rating, reverse=True)[:5]
        if top_rated:
            lines += ['', 'TOP RATED PROPERTIES:']
            lines += [f'{i + 1}. {p.title} - {p.location} - INR {p.price}/month - {p.rating} stars' for i, p in enumerate(top_rated)]

        if user is not None and user.is_authenticated:
            viewed = self._recently_viewed(user)
            if viewed:
                lines += ['', "USER'S RECENT BROWSING ACTIVITY (Last 24 hours):"]
                lines += [f'- {p.title} - {p.location}, {p.city} - INR {p.price}/month - {p.property_type}' for p in viewed]
            profile = getattr(user, 'profile', None)
            favorites = list(profile.favorites.all()[:10]) if profile else []
            if favorites:
                lines += ['', "USER'S SAVED FAVORITES:"]
                lines += [f'- {p.title} in {p.location}, {p.city} (INR {p.price}/month)' for p in favorites]

        if user_context:
            lines += ['', 'ADDITIONAL USER CONTEXT:', str(user_context)]

        lines += ['', ASSISTANT_RULES]
        return '\n'.join(lines), cities

    def suggestions(self, cities, executive=False):
        suggestions = []
        if executive:
            suggestions.append('Connect me with an executive')
        suggestions += [f'PGs in {city}' for city in cities[:2]]
        suggestions += ['Show PGs under 10k', 'Girls PG near my college', 'Find a mess near me', 'How do I book a visit?']
        return suggestions[:BusinessRules.MAX_CHAT_SUGGESTIONS]

    def assistant_reply(self, message, history=None, user=None, user_context=''):
        message = str(message) if message is not None else ''
        if not message.strip():
            return {'response': 'Please ask me something!', 'error': 'Empty message', 'status_code': 400}

        executive = wants_executive(message)
        if not llm.llm_configured():
            return {
                'response': FALLBACK_REPLY,
                'error': 'API key missing',
                'wants_executive': executive,
                'suggestions': self.suggestions([], executive),
            }

        system_prompt, cities = self.build_system_prompt(user, user_context)
        messages = [{'role': 'system', 'content': system_prompt}]
        for item in [h for h in history or [] if isinstance(h, dict)][-10:]:
            role = 'user' if item.get('role') == 'user' else 'assistant'
            if item.get('content'):
                messages.append({'role': role, 'content': str(item['content'])})
        content = message.strip()
        if executive:
            content += '\n\n(The user is asking to speak with an executive. Acknowledge this and offer to connect them.)'
        messages.append({'role': 'user', 'content': content})

        try:
            text = llm.complete(messages, temperature=0.7, max_tokens=500)
        except OpenAIError as e:
            logger.error(f'[CHAT] Assistant completion failed: {e}')
            return {'response': ERROR_REPLY, 'error': str(e), 'status_code': 500}

        logger.info(f'[CHAT] Assistant answered "{message[:60]}" ({len(text)} chars)')
        return {
            'response': text,
            'wants_executive': executive,
            'suggestions': self.suggestions(cities, executive),
            'timestamp': timezone.now().isoformat(),
        }

    # Live agent

    def escalate(self, name, email, phone='', transcript=None, user=None):
        email = normalize_email(email)
        if not name or not is_valid_email(email):
            raise ConversationError('Name and a valid email are required')

        conversation = Conversation.objects.create(
            user=user if user is not None and user.is_authenticated else None,
            name=name,
            email=email,
            phone=phone or '',
            user_token=get_random_string(48),
        )
        for item in transcript or []:
            if isinstance(item, dict) and item.get('content'):
                ConversationMessage.objects.create(
                    conversation=conversation,
                    sender='user' if item.get('role') == 'user' else 'bot',
                    content=str(item['content']),
                )
        ConversationMessage.objects.create(
            conversation=conversation,
            sender='system',
            content='You are in the queue. An executive will join shortly.',
        )

        send_email(
            settings.SUPPORT_EMAIL,
            f'Live chat request from {name}',
            f'{name} ({email}, {phone or "no phone"}) is waiting for an executive.\n'
            f'Conversation #{conversation.id}: {settings.SITE_URL}/admin/chats/{conversation.id}',
        )
        for admin in User.objects.filter(profile__role=UserRole.ADMIN):
            self.notifications.create_notification(
                'Live Chat Request',
                f'{name} is waiting for an executive',
                user_id=admin.id,
                type=NotificationType.MESSAGE,
                priority=NotificationPriority.HIGH,
                metadata={'conversation_id': conversation.id},
            )
        logger.info(f'[CHAT] Conversation {conversation.id} escalated by {email}')
        return conversation

    def get_by_token(self, conversation_id, token):
        conversation = Conversation.objects.filter(id=conversation_id).first() if str(conversation_id).isdigit() else None
        if not conversation:
            raise ConversationError('Conversation not found', 404)
        if not token or token != conversation.user_token:
            raise ConversationError('Invalid conversation token', 403)
        return conversation

    def _ensure_open(self, conversation):
        if conversation.status == ConversationStatus.CLOSED:
            raise ConversationError('Conversation is closed')

    def post_user_message(self, conversation, content=None, end_session=False):
        self._ensure_open(conversation)
        if end_session:
            return self.close(conversation, by='user')
        if not content or not content.strip():
            raise ConversationError('Message content is required')
        ConversationMessage.objects.create(conversation=conversation, sender='user', content=content.strip())
        return conversation

    def join(self, conversation, agent):
        self._ensure_open(conversation)
        conversation.agent = agent
        conversation.status = ConversationStatus.CONNECTED
        conversation.save(update_fields=['agent', 'status'])
        profile = getattr(agent, 'profile', None)
        agent_name = (profile.name if profile else '') or 'An executive'
        ConversationMessage.objects.create(
            conversation=conversation, sender='system', content=f'{agent_name} has joined the chat.',
        )
        return conversation

    def post_agent_message(self, conversation, agent, content):
        self._ensure_open(conversation)
        if not content or not content.strip():
            raise ConversationError('Message content is required')
        if conversation.status == ConversationStatus.WAITING:
            self.join(conversation, agent)
        ConversationMessage.objects.create(conversation=conversation, sender='agent', content=content.strip())
        return conversation

    def close(self, conversation, by='agent'):
        self._ensure_open(conversation)
        conversation.status = ConversationStatus.CLOSED
        conversation.closed_at = timezone.now()
        conversation.save(update_fields=['status', 'closed_at'])
        ConversationMessage.objects.create(
            conversation=conversation,
            sender='system',
            content='The user ended the chat.' if by == 'user' else 'The executive closed the chat.',
        )
        return conversation
