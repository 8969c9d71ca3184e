"""Input normalisation helpers for emails and Indian phone numbers"""
import re

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_PATTERN = re.compile(r'^\+\d{10,15}$')


def normalize_email(email):
    return (email or '').strip().lower()


def is_valid_email(email):
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def normalize_phone(phone):
    """Return the phone in E.164 form, defaulting to the +91 country code"""
    cleaned = re.sub(r'[^\d+]', '', phone or '')
    if cleaned.startswith('+'):
        return cleaned
    if len(cleaned) == 12 and cleaned.startswith('91'):
        return '+' + cleaned
    if len(cleaned) == 10:
        return '+91' + cleaned
    if len(cleaned) > 10:
        return '+' + cleaned
    return cleaned


def is_valid_phone(phone):
    return bool(PHONE_PATTERN.match(phone or ''))


def normalize_local_phone(phone):
    """Reduce an Indian number to its 10 local digits when it is recognisable"""
    digits = re.sub(r'\D', '', phone or '')
    if len(digits) == 12 and digits.startswith('91'):
        return digits[2:]
    if len(digits) == 11 and digits.startswith('0'):
        return digits[1:]
    return digits


def is_truthy(value):
    """Form and JSON flags: True, 'true', '1', 'yes', 'on'"""
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')
