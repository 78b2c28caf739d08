"""Report model builder.

Turns a raw preparation (six loosely-typed step slots) into the single
normalised ``ReportData`` dict the report template renders. Every section is
always present, so the template never has to probe for missing keys.

ReportData layout::

    title, generatedAt, isPremium, showGenerateButton,
    candidate     {name, title, seniority, location, skills[]}
    role          {title, company, location, workType, salaryRange, jobUrl,
                   description, requirements[], responsibilities[]}
    company       {name, summary, description, businessModel{9 buckets},
                   topNews[{title, url, source, date, summary}], timeline[]}
    strategy      {strengths[], weaknesses[], opportunities[], threats[]}
    profileMatch  {matchScore, summary, items[{requirement, evidence, score}]}
    why           {whyCompany[], whyRole[], whyNow[], whyYou[]}
    interview     {questionsForCandidate[{question, answer, tips, category}],
                   questionsForCompany[{question, answer}]}
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime

from interviewace.errors import ValidationError
from interviewace.step_schemas import CANVAS_BUCKETS, STEP_NUMBERS, coerce_step

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Interview Preparation"
GENERATED_AT_FORMAT = "%d/%m/%Y %H:%M"

TRUTHY_FLAG_VALUES = {"1", "true", "yes", "on"}


def _flag(value) -> bool:
    """Presentation flags are off unless explicitly switched on."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_FLAG_VALUES
    return False


def unwrap_preparation(value) -> dict:
    """Accept ``{"preparationData": {...}}`` as well as the preparation itself."""
    if not isinstance(value, dict):
        return {}
    inner = value.get("preparationData")
    if isinstance(inner, dict):
        return inner
    return value


def normalize_request_payload(body) -> tuple:
    """Split a report request body into ``(preparation, options)``.

    The body is either ``{"preparationData": {...}, "isPremium": ...}`` or the
    preparation fields directly. Flags are read from the top level first and
    then from inside the preparation.

    Raises:
        ValidationError: body is not a JSON object, or ``preparationData`` is
            present but not an object.
    """
    if not isinstance(body, dict):
        raise ValidationError.for_field("body", "must be a JSON object")
    if "preparationData" in body and not isinstance(body["preparationData"], dict):
        raise ValidationError.for_field("preparationData", "must be an object")
    preparation = unwrap_preparation(body)

    def _option(name: str) -> bool:
        if name in body:
            return _flag(body[name])
        return _flag(preparation.get(name))

    options = {
        "show_generate_button": _option("showGenerateButton"),
        "is_premium": _option("isPremium"),
    }
    return preparation, options


def derive_title(preparation: dict, job_title: str = "", company_name: str = "") -> str:
    title = preparation.get("title")
    if isinstance(title, str) and title.strip() and title.strip() != DEFAULT_TITLE:
        return title.strip()
    jt, cn = job_title.strip(), company_name.strip()
    if jt and cn:
        return f"{jt} at {cn}"
    return DEFAULT_TITLE


def _step_slots(preparation: dict) -> dict:
    keys = [f"step_{n}_data" for n in STEP_NUMBERS]
    if not any(key in preparation for key in keys):
        # Direct shape: step fields sit at the top level.
        return {n: preparation for n in STEP_NUMBERS}
    return {n: preparation.get(f"step_{n}_data") for n in STEP_NUMBERS}


def _match_summary(score: int, items: list) -> str:
    if not items and not score:
        return ""
    strong = sum(1 for i in items if (i.get("score") or 0) >= 75)
    return f"{score}% overall match, {strong} of {len(items)} requirements strongly covered."


def prepare_model(preparation, show_generate_button: bool = False, is_premium: bool = False,
                  now: datetime | None = None) -> dict:
    """Build ReportData from a raw preparation.

    Args:
        preparation: preparation dict (wrapped or direct shape); slots may be
            missing, ``None``, empty or partial.
        show_generate_button: show the in-preview "Generate PDF" button.
        is_premium: premium reports carry no free-tier watermark.
        now: capture instant for ``generatedAt`` (defaults to local now).

    Returns:
        A fully populated ReportData dict. The input is not modified.
    """
    prep = copy.deepcopy(unwrap_preparation(preparation))
    slots = _step_slots(prep)
    s1, s2, s3, s4, s5, s6 = (coerce_step(n, slots[n]) for n in STEP_NUMBERS)

    requirements = list(s1.key_requirements)
    responsibilities = list(s1.key_responsibilities)

    match_items = [
        {"requirement": i.requirement, "evidence": i.evidence, "score": i.score}
        for i in s4.items
    ]
    if not match_items and s4.requirement_responses:
        # Older step 4 forms stored one answer per job requirement.
        match_items = [
            {"requirement": req, "evidence": answer, "score": None}
            for req, answer in zip(requirements, s4.requirement_responses)
            if answer.strip()
        ]

    news = s2.top_news_items or s3.top_news
    candidate = s4.candidate
    job_url = prep.get("job_url") if isinstance(prep.get("job_url"), str) else ""

    model = {
        "title": derive_title(prep, s1.job_title, s1.company_name),
        "generatedAt": (now or datetime.now()).strftime(GENERATED_AT_FORMAT),
        "isPremium": bool(is_premium),
        "showGenerateButton": bool(show_generate_button),
        "candidate": {
            "name": candidate.name,
            "title": candidate.title,
            "seniority": candidate.seniority,
            "location": candidate.location,
            "skills": list(candidate.skills),
        },
        "role": {
            "title": s1.job_title,
            "company": s1.company_name,
            "location": s1.location,
            "workType": s1.work_type,
            "salaryRange": s1.salary_range,
            "jobUrl": job_url,
            "description": s1.job_description,
            "requirements": requirements,
            "responsibilities": responsibilities,
        },
        "company": {
            "name": s1.company_name,
            "summary": s1.company_summary,
            "description": s1.company_description,
            "businessModel": {camel: list(getattr(s2, name)) for name, camel in CANVAS_BUCKETS},
            "topNews": [
                {"title": n.title, "url": n.url, "source": n.source, "date": n.date, "summary": n.summary}
                for n in news
                if n.title.strip()
            ],
            "timeline": list(s2.company_timeline),
        },
        "strategy": {
            "strengths": list(s3.strengths),
            "weaknesses": list(s3.weaknesses),
            "opportunities": list(s3.opportunities),
            "threats": list(s3.threats),
        },
        "profileMatch": {
            "matchScore": s4.match_score,
            "summary": _match_summary(s4.match_score, match_items),
            "items": match_items,
        },
        "why": {
            "whyCompany": list(s5.why_company),
            "whyRole": list(s5.why_role),
            "whyNow": list(s5.why_now),
            "whyYou": list(s5.why_you),
        },
        "interview": {
            "questionsForCandidate": [
                {"question": q.question, "answer": q.answer, "tips": q.tips, "category": q.category}
                for q in s6.questions
                if q.question.strip()
            ],
            "questionsForCompany": [
                {"question": q, "answer": ""} for q in s6.questions_to_ask if q.strip()
            ],
        },
    }
    logger.debug("Report model built for '%s'", model["title"])
    return model
