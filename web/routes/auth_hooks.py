"""Auth provider webhooks."""

import logging

from fastapi import APIRouter, Request

from interviewace.errors import ValidationError
from report_worker import SEND_WELCOME
from web.http_utils import read_json_object

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register")
async def post_register(request: Request):
    """Sign-up webhook: create the user profile and queue the welcome email."""
    body = await read_json_object(request)
    user = body.get("user")
    if not isinstance(user, dict) or not user.get("id") or not user.get("email"):
        raise ValidationError.for_field("user", "id and email are required")

    metadata = user.get("user_metadata") if isinstance(user.get("user_metadata"), dict) else {}
    request.app.state.store.upsert_profile(str(user["id"]), email=user["email"])
    request.app.state.dispatcher.submit(
        SEND_WELCOME,
        {"email": user["email"], "name": metadata.get("full_name") or ""},
        owner=str(user["id"]),
    )
    logger.info("New user registered: %s", user["email"])
    return {"message": "User registered successfully"}
