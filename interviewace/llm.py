"""LLM gateway: one Claude call, returning text or parsed JSON.

Model output is untrusted. This module only guarantees "non-empty text" or
"valid JSON"; the task functions in ``ai_tasks`` check the shape.
"""

import json
import logging
import os

import anthropic

from interviewace.api_utils import messages_create_with_retry
from interviewace.errors import GenerationFailed

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_MAX_TOKENS = 4000
DEFAULT_TIMEOUT = 60.0

SYSTEM_PROMPT = (
    "You are InterviewAce, an assistant that helps job seekers prepare for interviews. "
    "Be specific, factual and concise."
)
JSON_INSTRUCTION = "Return ONLY the JSON. No markdown, no explanation."


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block, if the model added one."""
    text = text.strip()
    if not text.startswith("```"):
        return text
    lines = text.split("\n")
    body = []
    for line in lines[1:]:
        if line.strip() == "```":
            break
        body.append(line)
    return "\n".join(body).strip()


def model_name() -> str:
    return os.environ.get("INTERVIEWACE_LLM_MODEL") or DEFAULT_MODEL


def call_llm(prompt: str, json_mode: bool = False, max_tokens: int = DEFAULT_MAX_TOKENS,
             client=None, system: str = SYSTEM_PROMPT):
    """Send one prompt to Claude.

    Args:
        prompt: user prompt.
        json_mode: ask for JSON and parse it.
        max_tokens: response cap.
        client: an ``anthropic.Anthropic`` instance (created on demand).

    Returns:
        The response text, or the parsed JSON value when ``json_mode``.

    Raises:
        GenerationFailed: API error, empty response or unparsable JSON.
    """
    if not prompt or not prompt.strip():
        raise GenerationFailed("Prompt is empty", status_code=400)

    content = f"{prompt}\n\n{JSON_INSTRUCTION}" if json_mode else prompt
    try:
        client = client or anthropic.Anthropic()
        message = messages_create_with_retry(
            client,
            model=model_name(),
            max_tokens=max_tokens,
            temperature=0,
            timeout=DEFAULT_TIMEOUT,
            system=system,
            messages=[{"role": "user", "content": content}],
        )
    except anthropic.AnthropicError as e:
        logger.error("LLM call failed: %s", e)
        raise GenerationFailed(f"LLM call failed: {e}") from e

    text = "".join(
        getattr(block, "text", "") for block in (message.content or []) if getattr(block, "type", "text") == "text"
    ).strip()
    if not text:
        raise GenerationFailed("LLM returned an empty response")

    if not json_mode:
        return text

    body = strip_code_fences(text)
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse LLM response as JSON: %s", e)
        logger.error("Response preview: %s", body[:500])
        raise GenerationFailed("LLM returned invalid JSON") from e
