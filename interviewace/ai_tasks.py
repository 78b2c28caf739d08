"""AI assist tasks behind the ``/api/ai`` endpoints.

Each task builds a prompt, calls the LLM through an injectable ``llm``
callable (default ``call_llm``) and checks/normalises what comes back.
Canvas and SWOT assists extend the caller's ``existing`` lists with
``smart_set`` instead of replacing them.
"""

import json
import logging

from interviewace.errors import GenerationFailed, ValidationError
from interviewace.llm import call_llm
from interviewace.step_merge import smart_set
from interviewace.step_schemas import (
    CANVAS_BUCKETS,
    StepOne,
    coerce_score,
    coerce_str_list,
    coerce_text,
)

logger = logging.getLogger(__name__)

MIN_JOB_TEXT_CHARS = 100
SWOT_BUCKETS = ("strengths", "weaknesses", "opportunities", "threats")

HIGH_THRESHOLD = 75
MODERATE_THRESHOLD = 50


def _require_text(field: str, value, min_chars: int = 1) -> str:
    text = coerce_text(value).strip()
    if len(text) < min_chars:
        message = "is required" if min_chars <= 1 else f"must be at least {min_chars} characters"
        raise ValidationError.for_field(field, message)
    return text


def _require_dict(task: str, value) -> dict:
    if not isinstance(value, dict):
        raise GenerationFailed(f"{task}: expected a JSON object, got {type(value).__name__}")
    return value


def _company_context(company_name: str, company_summary: str) -> str:
    context = f"Company: {company_name}"
    if company_summary:
        context += f"\nCompany summary: {company_summary}"
    return context


def _existing_list(existing, *keys) -> list:
    if not isinstance(existing, dict):
        return []
    for key in keys:
        if existing.get(key):
            return coerce_str_list(existing[key])
    return []


# ---------------------------------------------------------------------------
# Job & CV analysis
# ---------------------------------------------------------------------------

JOB_ANALYSIS_PROMPT = """Analyse the job posting below and return a JSON object with these keys:
"job_title", "company_name", "location", "work_type", "salary_range",
"company_summary" (2-3 sentences on what the company does),
"company_description", "job_description" (short summary of the role),
"key_requirements" (list of strings), "key_responsibilities" (list of strings).
Use "" or [] when the posting does not say.

JOB POSTING:
{text}"""


def analyze_job_text(text, llm=call_llm) -> dict:
    """Job posting text -> step 1 fields."""
    text = _require_text("text", text, MIN_JOB_TEXT_CHARS)
    raw = _require_dict("analyze-job", llm(JOB_ANALYSIS_PROMPT.format(text=text), json_mode=True))
    result = StepOne.model_validate(raw).model_dump(include=set(StepOne.model_fields))
    logger.info("Job analysed: %s at %s (%d requirements)", result["job_title"] or "Unknown",
                result["company_name"] or "Unknown", len(result["key_requirements"]))
    return result


CV_ANALYSIS_PROMPT = """Extract from the CV below a JSON object with three lists of strings:
"skills", "experience" (one entry per role, "Title at Company (years)"),
"education" (one entry per degree or certification).

CV:
{text}"""


def analyze_cv_text(text, llm=call_llm) -> dict:
    text = _require_text("text", text)
    raw = _require_dict("analyze-cv", llm(CV_ANALYSIS_PROMPT.format(text=text), json_mode=True))
    return {key: coerce_str_list(raw.get(key)) for key in ("skills", "experience", "education")}


# ---------------------------------------------------------------------------
# Company intel
# ---------------------------------------------------------------------------

BUSINESS_MODEL_PROMPT = """Build a Business Model Canvas for the company below.
Return a JSON object with these keys, each a list of 3-5 short strings:
{keys}.
{existing}
{context}"""


def generate_business_model(company_name, company_summary="", existing=None, llm=call_llm) -> dict:
    """Nine canvas buckets, each merged onto the caller's ``existing`` entries."""
    company_name = _require_text("company_name", company_name)
    company_summary = coerce_text(company_summary).strip()
    existing_note = ""
    if isinstance(existing, dict) and existing:
        existing_note = "The user already has these entries, suggest new ones only:\n" + json.dumps(existing, ensure_ascii=False)
    prompt = BUSINESS_MODEL_PROMPT.format(
        keys=", ".join(f'"{snake}"' for snake, _ in CANVAS_BUCKETS),
        existing=existing_note,
        context=_company_context(company_name, company_summary),
    )
    raw = _require_dict("business-model", llm(prompt, json_mode=True))
    result = {}
    for snake, camel in CANVAS_BUCKETS:
        generated = coerce_str_list(raw.get(snake) or raw.get(camel))
        result[snake] = smart_set(_existing_list(existing, snake, camel), generated)
    return result


SWOT_PROMPT = """Write a SWOT analysis of the company below from the point of view of a job candidate.
Return a JSON object with keys "strengths", "weaknesses", "opportunities", "threats",
each a list of 3-5 short strings.
{existing}
{context}"""


def generate_swot(company_name="", company_summary="", existing=None, llm=call_llm) -> dict:
    company_name = coerce_text(company_name).strip()
    company_summary = coerce_text(company_summary).strip()
    if not company_name and not company_summary and not existing:
        raise ValidationError.for_field("company_name", "company_name, company_summary or existing is required")
    existing_note = ""
    if isinstance(existing, dict) and existing:
        existing_note = "Existing entries (do not repeat them):\n" + json.dumps(existing, ensure_ascii=False)
    prompt = SWOT_PROMPT.format(existing=existing_note, context=_company_context(company_name or "unknown", company_summary))
    raw = _require_dict("swot", llm(prompt, json_mode=True))
    return {key: smart_set(_existing_list(existing, key), coerce_str_list(raw.get(key))) for key in SWOT_BUCKETS}


TOP_NEWS_PROMPT = """List the {limit} most important news stories about the company below from the last {months} months.
Return a JSON array of objects with keys "title", "url", "source", "date" (YYYY-MM-DD) and "summary" (one sentence).
Only include stories you are confident are real.
{context}"""


def get_top_news(company_name, company_summary="", months=18, limit=3, llm=call_llm) -> list:
    company_name = _require_text("company_name", company_name)
    months = max(1, min(60, int(coerce_score(months) or 18)))
    limit = max(1, min(10, int(coerce_score(limit) or 3)))
    prompt = TOP_NEWS_PROMPT.format(
        limit=limit, months=months,
        context=_company_context(company_name, coerce_text(company_summary).strip()),
    )
    raw = llm(prompt, json_mode=True)
    if isinstance(raw, dict):
        raw = raw.get("news") or raw.get("items") or []
    if not isinstance(raw, list):
        raise GenerationFailed("top-news: expected a JSON array")
    items = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        title = coerce_text(entry.get("title") or entry.get("headline")).strip()
        if not title:
            continue
        items.append({
            "title": title,
            "url": coerce_text(entry.get("url") or entry.get("link")).strip(),
            "source": coerce_text(entry.get("source")).strip(),
            "date": coerce_text(entry.get("date")).strip(),
            "summary": coerce_text(entry.get("summary")).strip(),
        })
    logger.info("Top news for %s: %d items", company_name, len(items[:limit]))
    return items[:limit]


TIMELINE_PROMPT = """Write the key milestones of the company below as a bullet list,
one per line, formatted exactly as "- YYYY – event". Oldest first, at most 10 lines.
{context}"""


def parse_timeline_bullets(content: str) -> list:
    items = []
    for line in (content or "").split("\n"):
        line = line.strip()
        if line.startswith("- "):
            item = line.lstrip("-").strip()
            if item:
                items.append(item)
    return items


def generate_company_timeline(company_name, company_summary="", llm=call_llm) -> list:
    company_name = _require_text("company_name", company_name)
    prompt = TIMELINE_PROMPT.format(context=_company_context(company_name, coerce_text(company_summary).strip()))
    content = llm(prompt, json_mode=False)
    return parse_timeline_bullets(coerce_text(content))


HISTORY_PROMPT = """Give the {limit} most important events in the history of the company below.
Return a JSON object {{"timeline": [{{"year": "YYYY", "event": "..."}}]}}, oldest first.
{context}"""


def clamp_history_limit(limit) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = 8
    return max(5, min(12, value or 8))


def generate_company_history(company_name, company_summary="", limit=8, llm=call_llm) -> dict:
    company_name = _require_text("company_name", company_name)
    limit = clamp_history_limit(limit)
    prompt = HISTORY_PROMPT.format(limit=limit, context=_company_context(company_name, coerce_text(company_summary).strip()))
    raw = llm(prompt, json_mode=True)
    entries = raw.get("timeline") if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise GenerationFailed("company-history: expected a timeline list")
    timeline = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        year = coerce_text(entry.get("year")).strip()
        event = coerce_text(entry.get("event")).strip()
        if event:
            timeline.append({"year": year, "event": event})
    return {"timeline": timeline[:limit]}


COMPETITORS_PROMPT = """Name the {limit} main competitors of the company below.
Return a JSON array of objects with keys "name" and "description" (one sentence).
{context}"""


def generate_competitors(company_name, company_summary="", limit=5, llm=call_llm) -> list:
    company_name = _require_text("company_name", company_name)
    try:
        limit = max(1, min(10, int(limit or 5)))
    except (TypeError, ValueError):
        limit = 5
    prompt = COMPETITORS_PROMPT.format(limit=limit, context=_company_context(company_name, coerce_text(company_summary).strip()))
    raw = llm(prompt, json_mode=True)
    if isinstance(raw, dict):
        raw = raw.get("competitors") or raw.get("items") or []
    if not isinstance(raw, list):
        raise GenerationFailed("competitors: expected a JSON array")
    items = []
    for entry in raw:
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, dict):
            continue
        name = coerce_text(entry.get("name")).strip()
        if name:
            items.append({"name": name, "description": coerce_text(entry.get("description")).strip()})
    return items[:limit]


# ---------------------------------------------------------------------------
# Candidate fit
# ---------------------------------------------------------------------------

WHY_PROMPT = """Help a candidate answer "Why this company?", "Why this role?" and "Why you?".
Write each answer as a short first-person paragraph grounded in the data below.
Return a JSON object with keys "whyCompany", "whyRole", "whyYou".

CANDIDATE:
{cv}

JOB:
{job}

COMPANY ANALYSIS:
{swot}

PROFILE MATCH:
{matches}"""


def generate_why_suggestions(cv, job, swot=None, matches=None, llm=call_llm) -> dict:
    if not isinstance(cv, dict):
        raise ValidationError.for_field("cv", "must be an object")
    if not isinstance(job, dict):
        raise ValidationError.for_field("job", "must be an object")
    cv_data = {key: coerce_str_list(cv.get(key)) for key in ("skills", "education", "experience")}
    prompt = WHY_PROMPT.format(
        cv=json.dumps(cv_data, ensure_ascii=False, indent=2),
        job=json.dumps(job, ensure_ascii=False, indent=2),
        swot=json.dumps(swot or {}, ensure_ascii=False, indent=2),
        matches=json.dumps(matches or {}, ensure_ascii=False, indent=2),
    )
    raw = _require_dict("why-suggestions", llm(prompt, json_mode=True))
    return {
        "whyCompany": coerce_text(raw.get("whyCompany") or raw.get("why_company")),
        "whyRole": coerce_text(raw.get("whyRole") or raw.get("why_role")),
        "whyYou": coerce_text(raw.get("whyYou") or raw.get("why_you")),
    }


MATCH_PROMPT = """Score how well the candidate covers each job requirement and responsibility.
For every target return one match with: "skill" (the requirement or responsibility text),
"score" (0-100), "grade" ("High", "Moderate" or "Low") and "reasoning" (one sentence citing the CV).
Return a JSON object {{"overallScore": 0-100, "matches": [...]}}.

REQUIREMENTS:
{requirements}

RESPONSIBILITIES:
{responsibilities}

CANDIDATE EDUCATION:
{education}

CANDIDATE EXPERIENCE:
{experience}

CANDIDATE SKILLS:
{skills}"""


def grade_for(grade, score: int) -> str:
    """Model-supplied grade when recognisable, otherwise from the score."""
    g = coerce_text(grade).strip().lower()
    if g.startswith("high"):
        return "High"
    if g.startswith("moder"):
        return "Moderate"
    if g.startswith("low"):
        return "Low"
    if score >= HIGH_THRESHOLD:
        return "High"
    if score >= MODERATE_THRESHOLD:
        return "Moderate"
    return "Low"


def normalize_match_result(raw) -> dict:
    raw = _require_dict("match-profile", raw)
    matches = []
    distribution = {"high": 0, "moderate": 0, "low": 0}
    for m in raw.get("matches") or []:
        if not isinstance(m, dict):
            continue
        score = coerce_score(m.get("score"))
        matches.append({
            "skill": coerce_text(m.get("skill") or m.get("source") or m.get("target")).strip() or "Unknown",
            "grade": grade_for(m.get("grade"), score),
            "score": score,
            "reasoning": coerce_text(m.get("reasoning")),
        })
        if score >= HIGH_THRESHOLD:
            distribution["high"] += 1
        elif score >= MODERATE_THRESHOLD:
            distribution["moderate"] += 1
        else:
            distribution["low"] += 1
    return {
        "overallScore": coerce_score(raw.get("overallScore", raw.get("overall_score"))),
        "matches": matches,
        "distribution": distribution,
    }


def match_profile(requirements=None, responsibilities=None, education=None, experience=None,
                  skills=None, llm=call_llm) -> dict:
    requirements = coerce_str_list(requirements)
    responsibilities = coerce_str_list(responsibilities)
    if not requirements and not responsibilities:
        raise ValidationError.for_field("requirements", "requirements or responsibilities are required")

    def _block(items):
        return "\n".join(f"- {i}" for i in items) or "(none)"

    prompt = MATCH_PROMPT.format(
        requirements=_block(requirements),
        responsibilities=_block(responsibilities),
        education=_block(coerce_str_list(education)),
        experience=_block(coerce_str_list(experience)),
        skills=_block(coerce_str_list(skills)),
    )
    result = normalize_match_result(llm(prompt, json_mode=True, max_tokens=6000))
    logger.info("Profile match: %d%% over %d targets", result["overallScore"], len(result["matches"]))
    return result
