"""Outgoing email helpers"""
import logging
import smtplib

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def email_configured():
    return bool(settings.EMAIL_HOST_USER and settings.EMAIL_HOST_PASSWORD)


def send_email(to, subject, text, html=None):
    """Send an email, returning False instead of raising when delivery fails"""
    if not email_configured():
        logger.info(f'[EMAIL] Skipping "{subject}" to {to}: email credentials not configured')
        return False

    recipients = to if isinstance(to, (list, tuple)) else [to]
    try:
        send_mail(
            subject,
            text,
            settings.DEFAULT_FROM_EMAIL,
            recipients,
            html_message=html,
        )
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f'[EMAIL] Failed to send "{subject}" to {recipients}: {e}')
        return False
    return True
