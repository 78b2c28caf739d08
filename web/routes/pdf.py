"""Report routes: HTML preview, synchronous PDF, queued premium PDF, job status."""

import base64
import binascii
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from interviewace.errors import JobNotFound, ValidationError
from interviewace.report_model import normalize_request_payload
from interviewace.report_service import generate_pdf_report, render_preparation_html
from interviewace.sample_data import sample_preparation
from report_worker import GENERATE_REPORT
from web.auth import get_current_user
from web.http_utils import query_flag, read_json, read_json_object, run_blocking

logger = logging.getLogger(__name__)

router = APIRouter()

PDF_HEADERS = {"Content-Disposition": 'inline; filename="report.pdf"'}


def pdf_response(pdf_bytes: bytes) -> Response:
    return Response(content=pdf_bytes, media_type="application/pdf", headers=PDF_HEADERS)


def decode_data_param(data: str) -> dict:
    """``?data=`` value: base64 (standard or URL-safe) JSON object."""
    b64 = data.replace(" ", "+").strip()
    b64 += "=" * (-len(b64) % 4)
    try:
        raw = base64.b64decode(b64, altchars=b"-_" if ("-" in b64 or "_" in b64) else None, validate=True)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        raise ValidationError.for_field("data", "must be base64-encoded JSON") from e
    if not isinstance(payload, dict):
        raise ValidationError.for_field("data", "must encode a JSON object")
    return payload


def _html_response(preparation: dict, options: dict, debug: bool) -> HTMLResponse:
    html = render_preparation_html(
        preparation,
        show_generate_button=options["show_generate_button"],
        is_premium=options["is_premium"],
        debug=debug,
    )
    return HTMLResponse(content=html, status_code=200)


# ---------------------------------------------------------------------------
# HTML preview
# ---------------------------------------------------------------------------

@router.get("/html", response_class=HTMLResponse)
@router.get("/preview", response_class=HTMLResponse)
async def get_html(request: Request):
    """Render the report. ``?sample=1`` or no data renders the built-in sample;
    ``?data=<base64 JSON>`` renders the caller's payload."""
    data = request.query_params.get("data")
    if query_flag(request, "sample") or not data:
        body = {"preparationData": sample_preparation()}
    else:
        body = decode_data_param(data)
    preparation, options = normalize_request_payload(body)
    for name, key in (("showGenerateButton", "show_generate_button"), ("isPremium", "is_premium")):
        if name in request.query_params:
            options[key] = query_flag(request, name)
    return _html_response(preparation, options, debug=query_flag(request, "debug"))


@router.post("/html", response_class=HTMLResponse)
@router.post("/preview", response_class=HTMLResponse)
async def post_html(request: Request):
    preparation, options = normalize_request_payload(await read_json(request))
    return _html_response(preparation, options, debug=query_flag(request, "debug"))


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

@router.post("/")
@router.post("/pdf")
async def post_pdf(request: Request):
    """Synchronous PDF from a wrapped or direct payload."""
    preparation, options = normalize_request_payload(await read_json(request))
    pdf_bytes = await run_blocking(generate_pdf_report, preparation, is_premium=options["is_premium"])
    return pdf_response(pdf_bytes)


@router.post("/generate")
async def post_generate(request: Request, user: dict = Depends(get_current_user)):
    """Free users get the PDF in the response; premium users get it by email."""
    body = await read_json_object(request)
    if not isinstance(body.get("preparationData"), dict):
        raise ValidationError.for_field("preparationData", "is required and must be an object")
    preparation, _ = normalize_request_payload(body)

    if user["is_premium"]:
        job_id = request.app.state.dispatcher.submit(
            GENERATE_REPORT,
            {
                "preparation": preparation,
                "is_premium": True,
                "user_id": user["id"],
                "email": user["email"],
            },
            owner=user["id"],
        )
        logger.info("Queued premium report %s for user %s", job_id, user["id"])
        return JSONResponse(
            {
                "success": True,
                "message": "Report generation started. You will receive it by email shortly.",
                "jobId": job_id,
            },
            status_code=202,
        )

    pdf_bytes = await run_blocking(generate_pdf_report, preparation, is_premium=False)
    return pdf_response(pdf_bytes)


@router.get("/status/{job_id}")
async def get_status(job_id: str, request: Request, user: dict = Depends(get_current_user)):
    job = request.app.state.dispatcher.get(job_id)
    if not job or job.get("owner") != user["id"]:
        raise JobNotFound(f"Job {job_id} not found for user {user['id']}")
    return {
        "id": job["id"],
        "state": job["state"],
        "progress": job["progress"],
        "createdAt": job["created_at"],
        "processedAt": job["processed_at"],
        "finishedAt": job["finished_at"],
        "result": job["result"],
        "error": job["error"],
    }
