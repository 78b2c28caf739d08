"""Anthropic API call wrapper with retry for transient failures (429, 529/overloaded, 5xx, network)."""

import logging
import time

import anthropic

logger = logging.getLogger(__name__)

# Backoff delays in seconds: 2s, 5s, 10s
RETRY_DELAYS = [2, 5, 10]
MAX_RETRIES = 3

RETRYABLE_STATUS = {408, 409, 429, 500, 502, 503, 504, 529}


def is_retryable_error(exc: Exception) -> bool:
    """True when the error is transient and the same request may succeed later."""
    if isinstance(exc, (anthropic.APIConnectionError, anthropic.APITimeoutError)):
        return True
    if isinstance(exc, anthropic.APIStatusError):
        return exc.status_code in RETRYABLE_STATUS
    msg = str(exc).lower()
    return "overloaded" in msg or "rate limit" in msg or "rate_limit" in msg


def messages_create_with_retry(client, sleep=time.sleep, **kwargs):
    """Call ``client.messages.create`` and retry transient failures with backoff.

    Re-raises the last exception once retries are exhausted, or at once for
    non-transient errors (bad request, auth).
    """
    for attempt in range(MAX_RETRIES + 1):
        try:
            return client.messages.create(**kwargs)
        except anthropic.AnthropicError as e:
            if attempt >= MAX_RETRIES or not is_retryable_error(e):
                raise
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            logger.warning(
                "Anthropic API transient error (attempt %d/%d): %s. Retrying in %ds...",
                attempt + 1,
                MAX_RETRIES + 1,
                str(e)[:200],
                delay,
            )
            sleep(delay)
