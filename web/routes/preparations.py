"""Preparation CRUD, step saves and per-preparation reports (owner only)."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from interviewace.errors import ValidationError
from interviewace.report_service import generate_pdf_report, render_preparation_html
from interviewace.step_schemas import STEP_NUMBERS
from web.auth import get_current_user
from web.http_utils import query_flag, read_json, read_json_object, run_blocking
from web.routes.pdf import pdf_response

logger = logging.getLogger(__name__)

router = APIRouter()


def _store(request: Request):
    return request.app.state.store


@router.get("")
async def list_preparations(request: Request, user: dict = Depends(get_current_user)):
    return {"preparations": _store(request).list_for_user(user["id"])}


@router.post("")
async def create_preparation(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    title = body.get("title") or ""
    job_url = body.get("job_url") or body.get("jobUrl")
    if not isinstance(title, str):
        raise ValidationError.for_field("title", "must be a string")
    if job_url is not None and not isinstance(job_url, str):
        raise ValidationError.for_field("job_url", "must be a string")
    steps = {key: body[key] for key in body if key.startswith("step_") and key.endswith("_data")}
    record = _store(request).create(user["id"], title=title, job_url=job_url, steps=steps)
    return JSONResponse({"preparation": record}, status_code=201)


@router.get("/{prep_id}")
async def get_preparation(prep_id: str, request: Request, user: dict = Depends(get_current_user)):
    return {"preparation": _store(request).get(prep_id, user["id"])}


@router.patch("/{prep_id}")
async def update_preparation(prep_id: str, request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    if "jobUrl" in body and "job_url" not in body:
        body["job_url"] = body.pop("jobUrl")
    record = _store(request).update(prep_id, user["id"], **body)
    return {"preparation": record}


@router.put("/{prep_id}/steps/{step}")
async def save_step(prep_id: str, step: int, request: Request, user: dict = Depends(get_current_user)):
    """Replace ``step_N_data``; ``?merge=true`` merges string lists without duplicates."""
    if step not in STEP_NUMBERS:
        raise ValidationError.for_field("step", f"must be one of {list(STEP_NUMBERS)}")
    data = await read_json(request)
    record = _store(request).save_step(prep_id, user["id"], step, data, merge=query_flag(request, "merge"))
    return {"preparation": record}


@router.delete("/{prep_id}")
async def delete_preparation(prep_id: str, request: Request, user: dict = Depends(get_current_user)):
    _store(request).delete(prep_id, user["id"])
    return Response(status_code=204)


@router.get("/{prep_id}/report.html", response_class=HTMLResponse)
async def get_report_html(prep_id: str, request: Request, user: dict = Depends(get_current_user)):
    record = _store(request).get(prep_id, user["id"])
    html = render_preparation_html(
        record,
        show_generate_button=query_flag(request, "showGenerateButton"),
        is_premium=user["is_premium"],
        debug=query_flag(request, "debug"),
    )
    return HTMLResponse(content=html)


@router.get("/{prep_id}/report.pdf")
async def get_report_pdf(prep_id: str, request: Request, user: dict = Depends(get_current_user)):
    record = _store(request).get(prep_id, user["id"])
    pdf_bytes = await run_blocking(generate_pdf_report, record, is_premium=user["is_premium"])
    return pdf_response(pdf_bytes)
