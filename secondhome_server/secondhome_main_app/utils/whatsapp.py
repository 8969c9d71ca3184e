"""WhatsApp Cloud API utility"""
import logging
from urllib.parse import quote

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

GRAPH_API_URL = 'https://graph.facebook.com/v20.0/{phone_number_id}/messages'


def build_whatsapp_link(message, number=None):
    number = number or settings.WHATSAPP_BUSINESS_NUMBER
    return f'https://wa.me/{number}?text={quote(message)}'


def send_whatsapp_message(to, message):
    """Send a text message, returns {'status': 'success'|'error', ...}"""
    token = settings.WHATSAPP_SECRET_KEY
    phone_number_id = settings.WHATSAPP_PHONE_NUMBER_ID
    if not token or not phone_number_id:
        return {'status': 'error', 'message': 'WhatsApp credentials not configured'}

    url = GRAPH_API_URL.format(phone_number_id=phone_number_id)
    headers = {
        'Authorization': f'Bearer {token}',
        'Content-Type': 'application/json'
    }
    payload = {
        'messaging_product': 'whatsapp',
        'to': to.lstrip('+'),
        'type': 'text',
        'text': {'body': message}
    }
    try:
        response = requests.post(url, headers=headers, json=payload, timeout=10)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f'[WHATSAPP] Failed to send message to {to}: {e}')
        return {'status': 'error', 'message': str(e)}

    return {'status': 'success', 'response': response.json()}
