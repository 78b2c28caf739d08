"""AI assist routes. Every task runs off the event loop."""

import logging

from fastapi import APIRouter, Depends, Request

from interviewace import ai_tasks
from interviewace.errors import NotFound
from web.auth import get_current_user
from web.http_utils import read_json_object, run_blocking

logger = logging.getLogger(__name__)

router = APIRouter()


def _company_summary(request: Request, user: dict, body: dict) -> str:
    """Body ``company_summary``, else the one saved on the caller's ``preparation_id``."""
    summary = body.get("company_summary")
    if isinstance(summary, str) and summary.strip():
        return summary
    prep_id = body.get("preparation_id")
    if not prep_id:
        return ""
    try:
        prep = request.app.state.store.get(str(prep_id), user["id"])
    except NotFound:
        logger.info("No readable preparation %s for user %s; continuing without summary", prep_id, user["id"])
        return ""
    step_1 = prep.get("step_1_data") or {}
    return step_1.get("company_summary") or step_1.get("companySummary") or ""


@router.post("/analyze-job")
async def post_analyze_job(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    result = await run_blocking(ai_tasks.analyze_job_text, body.get("text"))
    return {"success": True, **result}


@router.post("/analyze-cv")
async def post_analyze_cv(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    return await run_blocking(ai_tasks.analyze_cv_text, body.get("text"))


@router.post("/business-model")
async def post_business_model(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    return await run_blocking(
        ai_tasks.generate_business_model,
        body.get("company_name"),
        _company_summary(request, user, body),
        body.get("existing"),
    )


@router.post("/swot")
async def post_swot(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    return await run_blocking(
        ai_tasks.generate_swot,
        body.get("company_name"),
        _company_summary(request, user, body),
        body.get("existing"),
    )


@router.post("/top-news")
async def post_top_news(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    return await run_blocking(
        ai_tasks.get_top_news,
        body.get("company_name"),
        _company_summary(request, user, body),
        months=body.get("months", 18),
        limit=body.get("limit", 3),
    )


@router.post("/company-timeline")
async def post_company_timeline(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    items = await run_blocking(
        ai_tasks.generate_company_timeline,
        body.get("company_name"),
        _company_summary(request, user, body),
    )
    return {"items": items}


@router.post("/company-history")
async def post_company_history(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    return await run_blocking(
        ai_tasks.generate_company_history,
        body.get("company_name"),
        _company_summary(request, user, body),
        limit=body.get("limit", 8),
    )


@router.post("/competitors")
async def post_competitors(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    items = await run_blocking(
        ai_tasks.generate_competitors,
        body.get("company_name"),
        _company_summary(request, user, body),
        limit=body.get("limit", 5),
    )
    return {"items": items}


@router.post("/why-suggestions")
async def post_why_suggestions(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    swot = body.get("swotAndBmc") or body.get("swot")
    return await run_blocking(
        ai_tasks.generate_why_suggestions,
        body.get("cv"),
        body.get("job"),
        swot=swot,
        matches=body.get("matches"),
    )


@router.post("/match-profile")
async def post_match_profile(request: Request, user: dict = Depends(get_current_user)):
    body = await read_json_object(request)
    return await run_blocking(
        ai_tasks.match_profile,
        requirements=body.get("requirements"),
        responsibilities=body.get("responsibilities"),
        education=body.get("education"),
        experience=body.get("experience"),
        skills=body.get("skills"),
    )
