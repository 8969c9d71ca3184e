"""Twilio OTP utility"""
import logging

from django.conf import settings
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

logger = logging.getLogger(__name__)

# Trial accounts can only text verified numbers
TWILIO_UNVERIFIED_NUMBER_CODE = 21608


def send_otp_via_twilio(phone_number, otp_code):
    """Send OTP via Twilio SMS"""
    account_sid = settings.TWILIO_ACCOUNT_SID
    auth_token = settings.TWILIO_AUTH_TOKEN
    twilio_phone_number = settings.TWILIO_PHONE_NUMBER

    if not all([account_sid, auth_token, twilio_phone_number]):
        return {"status": "error", "code": None, "message": "Twilio credentials not configured"}

    if not phone_number.startswith('+'):
        phone_number = '+' + phone_number

    try:
        client = Client(account_sid, auth_token)
        message = client.messages.create(
            body=f"Your Second Home verification code is {otp_code}. It is valid for 10 minutes.",
            from_=twilio_phone_number,
            to=phone_number
        )
    except TwilioRestException as e:
        logger.warning(f'[OTP] Twilio error {e.code} for {phone_number}: {e.msg}')
        return {"status": "error", "code": e.code, "message": e.msg}

    return {"status": "success", "sid": message.sid}
