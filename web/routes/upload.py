"""CV upload: extract text (and optionally analyse it)."""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile

from interviewace import ai_tasks
from interviewace.cv_reader import extract_cv_text
from interviewace.errors import ValidationError
from web import config
from web.auth import get_current_user
from web.http_utils import query_flag, run_blocking

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/cv")
async def post_cv(request: Request, cv: UploadFile = File(None), user: dict = Depends(get_current_user)):
    if cv is None:
        raise ValidationError.for_field("cv", "No file uploaded")
    data = await cv.read(config.MAX_UPLOAD_BYTES + 1)
    if len(data) > config.MAX_UPLOAD_BYTES:
        raise ValidationError.for_field("cv", f"File exceeds {config.MAX_UPLOAD_BYTES} bytes")

    text = await run_blocking(extract_cv_text, cv.filename or "", cv.content_type, data)
    logger.info("CV uploaded by %s: %s (%d bytes)", user["id"], cv.filename, len(data))
    result = {
        "message": "CV uploaded successfully",
        "filename": cv.filename,
        "text": text,
    }
    if query_flag(request, "analyze"):
        result["analysis"] = await run_blocking(ai_tasks.analyze_cv_text, text)
    return result
