"""Job posting scrape route."""

import logging

from fastapi import APIRouter, Depends, Request

from interviewace.job_scraper import scrape_job_posting, validate_url
from web.auth import get_current_user
from web.http_utils import read_json_object, run_blocking

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/job")
async def post_scrape_job(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    url = validate_url(body.get("url"))
    content = await run_blocking(scrape_job_posting, url)
    return {"success": True, "content": content, "url": url}
