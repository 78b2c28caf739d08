"""User profile and statistics routes."""

import logging

from fastapi import APIRouter, Depends, Request

from interviewace.errors import ValidationError
from web.auth import get_current_user
from web.http_utils import read_json_object

logger = logging.getLogger(__name__)

router = APIRouter()

PROFILE_FIELDS = ("first_name", "last_name", "phone", "company", "job_title")


@router.get("/profile")
async def get_profile(request: Request, user: dict = Depends(get_current_user)):
    profile = request.app.state.store.get_profile(user["id"])
    if not profile.get("email") and user["email"]:
        profile["email"] = user["email"]
    return {"profile": profile}


@router.put("/profile")
async def update_profile(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    updates = {key: body[key] for key in PROFILE_FIELDS if key in body}
    if not updates:
        raise ValidationError("No valid fields to update", details=[
            {"field": "body", "message": f"expected one of {', '.join(PROFILE_FIELDS)}"},
        ])
    for key, value in updates.items():
        if value is not None and not isinstance(value, str):
            raise ValidationError.for_field(key, "must be a string")
    profile = request.app.state.store.upsert_profile(user["id"], **updates)
    return {"profile": profile}


@router.get("/stats")
async def get_stats(request: Request, user: dict = Depends(get_current_user)):
    return {"stats": request.app.state.store.stats(user["id"])}
