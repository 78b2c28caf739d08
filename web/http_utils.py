"""Small helpers shared by the route modules."""

import asyncio
import functools
import json

from fastapi import Request

from interviewace.errors import ValidationError


async def read_json(request: Request, default=None):
    """Parsed JSON body; an empty body gives ``default``, malformed JSON a 400."""
    raw = await request.body()
    if not raw.strip():
        return {} if default is None else default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError.for_field("body", f"invalid JSON: {e}") from e


async def read_json_object(request: Request) -> dict:
    body = await read_json(request)
    if not isinstance(body, dict):
        raise ValidationError.for_field("body", "must be a JSON object")
    return body


async def run_blocking(func, *args, **kwargs):
    """Run a blocking call (browser, LLM, HTTP) in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def query_flag(request: Request, name: str) -> bool:
    return (request.query_params.get(name) or "").strip().lower() in ("1", "true", "yes", "on")
