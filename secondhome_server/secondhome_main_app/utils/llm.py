"""Groq LLM client (OpenAI compatible API)"""
import json
import logging
import re

from django.conf import settings
from openai import OpenAI

logger = logging.getLogger(__name__)

# Lazy-initialized client, rebuilt if the key changes
_client = None
_client_key = None

JSON_BLOCK = re.compile(r'\{[\s\S]*\}')


class LLMNotConfiguredError(Exception):
    """Raised when no Groq API key is configured"""
    pass


def llm_configured():
    return bool(settings.GROQ_API_KEY)


def get_client():
    global _client, _client_key
    if not settings.GROQ_API_KEY:
        raise LLMNotConfiguredError('GROQ_API_KEY not configured')
    if _client is None or _client_key != settings.GROQ_API_KEY:
        _client = OpenAI(api_key=settings.GROQ_API_KEY, base_url=settings.GROQ_BASE_URL)
        _client_key = settings.GROQ_API_KEY
    return _client


def complete(messages, temperature=0.7, max_tokens=500):
    """Run a chat completion and return the text of the first choice"""
    client = get_client()
    completion = client.chat.completions.create(
        model=settings.GROQ_MODEL,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    return completion.choices[0].message.content or ''


def extract_json(text):
    """Parse a JSON object out of a model reply, tolerating surrounding prose.

    Returns None when no object can be recovered.
    """
    if not text:
        return None
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    match = JSON_BLOCK.search(text)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning('[LLM] Reply contained an unparseable JSON block')
        return None
