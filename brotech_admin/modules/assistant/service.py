"""
Text Assistant Service
======================

Summaries and reply drafts for contact messages via the Gemini API.
Lazy-initialized from Flask app config. Without an API key every call
fails with AssistantUnavailable instead of returning empty text.
"""

import logging

from google import genai

from ...core.config import get_config_value
from ...core.errors import AdminError

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "Summarize the following customer inquiry concisely, in one or two sentences. "
    "Focus on the main point or question.\n\n---\n\n{message}"
)

REPLY_PROMPT = (
    "Draft a professional and helpful reply to the following customer message. "
    "Keep it friendly but concise. Address the customer's main point directly. "
    "Sign off as \"{signature}\".\n\n---\n\nCustomer Message:\n{message}"
)


class AssistantUnavailable(AdminError):
    """No API key is configured"""

    status_code = 503
    user_message = 'AI client is not initialized. Please configure the GEMINI_API_KEY.'


class AssistantError(AdminError):
    """The generative API call failed"""

    status_code = 502


class AssistantService:
    """Gemini-backed text assistant - reads config at call time."""

    def __init__(self):
        self._client = None
        self._client_key = None

    def _get_client(self):
        api_key = get_config_value('GEMINI_API_KEY')
        if not api_key:
            logger.error("GEMINI_API_KEY not set. AI features are disabled.")
            raise AssistantUnavailable()
        if self._client is None or self._client_key != api_key:
            self._client = genai.Client(api_key=api_key)
            self._client_key = api_key
        return self._client

    @property
    def is_configured(self):
        return bool(get_config_value('GEMINI_API_KEY'))

    def _generate(self, prompt, failure_message):
        client = self._get_client()
        model = get_config_value('GEMINI_MODEL', 'gemini-2.5-flash')
        try:
            response = client.models.generate_content(model=model, contents=prompt)
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise AssistantError(failure_message) from e

        text = (response.text or '').strip()
        if not text:
            raise AssistantError(failure_message)
        return text

    def summarize(self, message):
        """Summarize a customer message in one or two sentences"""
        return self._generate(
            SUMMARY_PROMPT.format(message=message),
            'Could not generate summary. Please try again.',
        )

    def draft_reply(self, message):
        """Draft a reply to a customer message, signed by the team"""
        signature = f"The {get_config_value('BRAND_NAME', 'BroTech')} Team"
        return self._generate(
            REPLY_PROMPT.format(message=message, signature=signature),
            'Could not draft reply. Please try again.',
        )


# Shared instance
assistant_service = AssistantService()
