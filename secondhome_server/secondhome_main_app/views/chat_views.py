"""Chat views - AI assistant, WhatsApp contact and live-agent conversations"""
from django.conf import settings
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Conversation
from ..permissions import IsAdminRole
from ..serializers import ConversationSerializer
from ..services import ChatService, ConversationError
from ..utils.constants import ConversationStatus
from ..utils.whatsapp import build_whatsapp_link, send_whatsapp_message


class ChatViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]
    authentication_classes = [JWTAuthentication]

    @action(detail=False, methods=['post'], url_path='assistant')
    def assistant(self, request):
        history = request.data.get('conversationHistory') or []
        if not isinstance(history, list):
            history = []
        result = ChatService().assistant_reply(
            request.data.get('message', ''),
            history=history,
            user=request.user,
            user_context=request.data.get('userContext', ''),
        )
        return Response(result, status=result.pop('status_code', status.HTTP_200_OK))

    @action(detail=False, methods=['post'], url_path='escalate')
    def escalate(self, request):
        try:
            conversation = ChatService().escalate(
                request.data.get('name', ''),
                request.data.get('email', ''),
                phone=request.data.get('phone', ''),
                transcript=request.data.get('transcript') or [],
                user=request.user,
            )
        except ConversationError as e:
            return Response({'error': e.message}, status=e.status_code)
        return Response({
            'conversation_id': conversation.id,
            'token': conversation.user_token,
            'status': conversation.status,
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='whatsapp')
    def whatsapp(self, request):
        message = (request.data.get('message') or '').strip()
        if not message:
            return Response({'error': 'Message is required'}, status=status.HTTP_400_BAD_REQUEST)
        result = send_whatsapp_message(settings.WHATSAPP_BUSINESS_NUMBER, message)
        return Response({
            'whatsapp_link': build_whatsapp_link(message),
            'sent': result['status'] == 'success',
        }, status=status.HTTP_200_OK)


class ConversationViewSet(viewsets.ViewSet):
    """Visitor side of a live chat, authorised by the conversation token"""
    permission_classes = [AllowAny]
    authentication_classes = []

    def retrieve(self, request, pk=None):
        try:
            conversation = ChatService().get_by_token(pk, request.query_params.get('token'))
        except ConversationError as e:
            return Response({'error': e.message}, status=e.status_code)
        return Response(ConversationSerializer(conversation).data)

    @action(detail=True, methods=['post'], url_path='messages')
    def post_message(self, request, pk=None):
        service = ChatService()
        try:
            conversation = service.get_by_token(pk, request.data.get('token'))
            conversation = service.post_user_message(
                conversation,
                content=request.data.get('content'),
                end_session=bool(request.data.get('end_session', False)),
            )
        except ConversationError as e:
            return Response({'error': e.message}, status=e.status_code)
        return Response(ConversationSerializer(conversation).data, status=status.HTTP_200_OK)


class AgentConversationViewSet(viewsets.ViewSet):
    """Admin agents answering live chats"""
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAdminRole]

    def _get(self, pk):
        return Conversation.objects.filter(pk=pk).first() if str(pk).isdigit() else None

    def list(self, request):
        state = request.query_params.get('status')
        conversations = Conversation.objects.order_by('-created_at')
        if state:
            conversations = conversations.filter(status=state)
        else:
            conversations = conversations.exclude(status=ConversationStatus.CLOSED)
        return Response(ConversationSerializer(conversations, many=True).data)

    def retrieve(self, request, pk=None):
        conversation = self._get(pk)
        if not conversation:
            return Response({'error': 'Conversation not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ConversationSerializer(conversation).data)

    @action(detail=True, methods=['post'], url_path='join')
    def join(self, request, pk=None):
        return self._run(pk, lambda service, conversation: service.join(conversation, request.user))

    @action(detail=True, methods=['post'], url_path='reply')
    def reply(self, request, pk=None):
        return self._run(pk, lambda service, conversation: service.post_agent_message(
            conversation, request.user, request.data.get('content'),
        ))

    @action(detail=True, methods=['post'], url_path='close')
    def close(self, request, pk=None):
        return self._run(pk, lambda service, conversation: service.close(conversation))

    def _run(self, pk, operation):
        conversation = self._get(pk)
        if not conversation:
            return Response({'error': 'Conversation not found'}, status=status.HTTP_404_NOT_FOUND)
        try:
            conversation = operation(ChatService(), conversation)
        except ConversationError as e:
            return Response({'error': e.message}, status=e.status_code)
        return Response(ConversationSerializer(conversation).data, status=status.HTTP_200_OK)
