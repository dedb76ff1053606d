import logging
import time

import google.generativeai as genai
from flask import current_app

from ..errors import AIUnavailable

logger = logging.getLogger(__name__)

RETRYABLE_MARKERS = (
    'overloaded', '503', 'Service Unavailable', 'rate limit', 'quota exceeded',
    'network', 'timeout', 'ECONNRESET', 'ENOTFOUND', 'ECONNREFUSED',
    'GoogleGenerativeAI Error', 'generativelanguage.googleapis.com',
)


def _status_of(err):
    return getattr(err, 'status', None) or getattr(err, 'status_code', None) or getattr(err, 'code', None) or 0


def is_retryable(err):
    message = str(err)
    if _status_of(err) in (429, 503):
        return True
    return any(marker in message for marker in RETRYABLE_MARKERS)


def friendly_error(err):
    message = str(err)
    status = _status_of(err)
    if 'overloaded' in message or '503' in message or status == 503:
        return 'AI service is currently experiencing high demand. Please try again in a few minutes.'
    if 'quota' in message or status == 429:
        return 'AI service quota exceeded. Please try again later or contact support.'
    if 'network' in message or 'timeout' in message:
        return 'Network connection issue. Please check your connection and try again.'
    if 'authentication' in message or 'API key' in message:
        return 'AI service configuration error. Please contact support.'
    return 'Failed to generate AI review. Please try again in a few moments.'


class AIClient:
    """Thin wrapper around a Gemini model with bounded exponential backoff.

    ``generate`` is any callable taking ``(prompt, generation_config)`` and
    returning text; when omitted the Gemini SDK is used if an API key is set.
    """

    def __init__(self, api_key=None, model_name='gemini-1.5-flash', max_retries=3, base_delay=1.0,
                 max_delay=10.0, multiplier=2.0, generate=None, sleep=time.sleep):
        self.model_name = model_name
        self.max_retries = max(1, int(max_retries))
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.sleep = sleep
        self._generate = generate
        if self._generate is None and api_key:
            genai.configure(api_key=api_key)
            self._model = genai.GenerativeModel(model_name)
            self._generate = self._gemini_generate

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('GOOGLE_AI_API_KEY'),
            model_name=config.get('GOOGLE_AI_MODEL', 'gemini-1.5-flash'),
            max_retries=config.get('AI_MAX_RETRIES', 3),
            base_delay=config.get('AI_BASE_DELAY', 1.0),
            max_delay=config.get('AI_MAX_DELAY', 10.0),
            multiplier=config.get('AI_BACKOFF_MULTIPLIER', 2.0),
        )

    @property
    def configured(self):
        return self._generate is not None

    def _gemini_generate(self, prompt, generation_config):
        response = self._model.generate_content(
            prompt,
            generation_config=genai.types.GenerationConfig(**generation_config),
        )
        return response.text

    def backoff_delay(self, attempt):
        return min(self.base_delay * self.multiplier ** (attempt - 1), self.max_delay)

    def generate_with_retry(self, prompt, generation_config=None):
        if not self.configured:
            raise AIUnavailable("AI service is not configured")
        generation_config = generation_config or {}
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._generate(prompt, generation_config)
            except Exception as e:  # SDK raises a wide range of transport errors
                last_error = e
                if not is_retryable(e) or attempt == self.max_retries:
                    break
                delay = self.backoff_delay(attempt)
                logger.warning("AI attempt %d/%d failed (%s), retrying in %.1fs",
                               attempt, self.max_retries, e, delay)
                self.sleep(delay)
        logger.error("LLM Generation failed: %s", last_error)
        raise last_error


def get_client():
    client = current_app.extensions.get('eddura.ai')
    if client is None:
        client = AIClient.from_config(current_app.config)
        current_app.extensions['eddura.ai'] = client
    return client
