"""Schemas for the six preparation step slots.

The step forms have shipped several spellings of the same field over time
(``jobTitle`` / ``job_title``, ``topNews`` / ``topNewsItems`` ...). Each slot
gets one lenient pydantic model that accepts those spellings, coerces values
into the expected shapes and keeps unknown keys, so the report builder works
on well-typed data and the store persists one normal form.

Coercion rules:
- text fields: ``None`` -> "", numbers -> str, lists -> newline-joined text
- string lists: a lone string becomes a one-item list, dict entries use
  their name/title/skill/label/text, ``None`` entries are dropped
- scores: clamped to 0-100 and rounded; anything unparsable is 0
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Optional

import pydantic
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from interviewace.errors import ValidationError
from interviewace.step_merge import smart_set

logger = logging.getLogger(__name__)

STEP_NUMBERS = (1, 2, 3, 4, 5, 6)

LABEL_KEYS = ("name", "title", "skill", "label", "text", "question", "requirement", "company", "university")

QUESTION_CATEGORIES = (
    ("behavioral_questions", "Behavioral"),
    ("technical_questions", "Technical"),
    ("situational_questions", "Situational"),
    ("company_questions", "Company"),
    ("career_questions", "Career"),
    ("personal_questions", "Personal"),
)


def _label(item: dict) -> str:
    for key in LABEL_KEYS:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def coerce_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        parts = [coerce_text(v) for v in value]
        return "\n".join(p for p in parts if p.strip())
    if isinstance(value, dict):
        return _label(value)
    return str(value)


def coerce_str_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return [str(value)]
    out = []
    for item in value:
        if item is None:
            continue
        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, dict):
            label = _label(item)
            if label:
                out.append(label)
        else:
            out.append(str(item))
    return out


def coerce_score(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return int(round(max(0.0, min(100.0, number))))


def coerce_optional_score(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return coerce_score(value)


def coerce_timeline(value: Any) -> list:
    """Timeline entries as display strings, e.g. ``"2015 – Series A"``."""
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    out = []
    for item in value:
        if isinstance(item, str):
            if item.strip():
                out.append(item.strip())
        elif isinstance(item, dict):
            year = coerce_text(item.get("year") or item.get("date")).strip()
            event = coerce_text(item.get("event") or item.get("title") or item.get("description")).strip()
            if year and event:
                out.append(f"{year} – {event}")
            elif event or year:
                out.append(event or year)
    return out


def _item_list(primary_key: str):
    """Coerce a list of records; bare strings become ``{primary_key: s}``."""

    def _coerce(value: Any) -> list:
        if value is None:
            return []
        if isinstance(value, (str, dict)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        out = []
        for item in value:
            if isinstance(item, dict):
                out.append(item)
            elif isinstance(item, str) and item.strip():
                out.append({primary_key: item})
        return out

    return _coerce


Text = Annotated[str, BeforeValidator(coerce_text)]
StrList = Annotated[list[str], BeforeValidator(coerce_str_list)]
Score = Annotated[int, BeforeValidator(coerce_score)]
OptionalScore = Annotated[Optional[int], BeforeValidator(coerce_optional_score)]
Timeline = Annotated[list[str], BeforeValidator(coerce_timeline)]


def _text(*aliases: str, serialize_as: str | None = None):
    return Field(
        default="",
        validation_alias=AliasChoices(*aliases) if aliases else None,
        serialization_alias=serialize_as,
    )


def _list(*aliases: str, serialize_as: str | None = None):
    return Field(
        default_factory=list,
        validation_alias=AliasChoices(*aliases) if aliases else None,
        serialization_alias=serialize_as,
    )


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class NewsItem(_Lenient):
    title: Text = _text("title", "headline")
    url: Text = _text("url", "link")
    source: Text = ""
    date: Text = ""
    summary: Text = ""


class MatchItem(_Lenient):
    requirement: Text = _text("requirement", "skill", "label", "targetText")
    evidence: Text = _text("evidence", "reasoning", "rationale", "note")
    score: OptionalScore = None


class Question(_Lenient):
    question: Text = ""
    answer: Text = _text("answer", "suggested_answer")
    tips: Text = _text("tips", "note", "key_points")
    category: Text = ""


class Candidate(_Lenient):
    name: Text = ""
    title: Text = ""
    seniority: Text = ""
    location: Text = ""
    skills: StrList = Field(default_factory=list)


NewsList = Annotated[list[NewsItem], BeforeValidator(_item_list("title"))]
MatchList = Annotated[list[MatchItem], BeforeValidator(_item_list("requirement"))]
QuestionList = Annotated[list[Question], BeforeValidator(_item_list("question"))]


class StepOne(_Lenient):
    """Job analysis."""

    job_title: Text = _text("job_title", "jobTitle")
    company_name: Text = _text("company_name", "companyName")
    location: Text = ""
    work_type: Text = _text("work_type", "workType")
    salary_range: Text = _text("salary_range", "salaryRange")
    company_description: Text = _text("company_description", "companyDescription", "companyInfo")
    company_summary: Text = _text("company_summary", "companySummary")
    job_description: Text = _text("job_description", "jobDescription")
    key_requirements: StrList = _list("key_requirements", "keyRequirements", "requirements")
    key_responsibilities: StrList = _list("key_responsibilities", "keyResponsibilities", "responsibilities")


CANVAS_BUCKETS = (
    ("key_partners", "keyPartners"),
    ("key_activities", "keyActivities"),
    ("key_resources", "keyResources"),
    ("value_propositions", "valuePropositions"),
    ("customer_relationships", "customerRelationships"),
    ("channels", "channels"),
    ("customer_segments", "customerSegments"),
    ("cost_structure", "costStructure"),
    ("revenue_streams", "revenueStreams"),
)


class StepTwo(_Lenient):
    """Business model canvas and company intel."""

    key_partners: StrList = _list("key_partners", "keyPartners")
    key_activities: StrList = _list("key_activities", "keyActivities")
    key_resources: StrList = _list("key_resources", "keyResources")
    value_propositions: StrList = _list("value_propositions", "valuePropositions")
    customer_relationships: StrList = _list("customer_relationships", "customerRelationships")
    channels: StrList = Field(default_factory=list)
    customer_segments: StrList = _list("customer_segments", "customerSegments")
    cost_structure: StrList = _list("cost_structure", "costStructure")
    revenue_streams: StrList = _list("revenue_streams", "revenueStreams")
    top_news_items: NewsList = _list("topNewsItems", "topNews", "top_news", "news", serialize_as="topNewsItems")
    company_timeline: Timeline = _list("companyTimeline", "timeline", serialize_as="companyTimeline")


class StepThree(_Lenient):
    """SWOT. Older clients also parked top news here."""

    strengths: StrList = Field(default_factory=list)
    weaknesses: StrList = Field(default_factory=list)
    opportunities: StrList = Field(default_factory=list)
    threats: StrList = Field(default_factory=list)
    top_news: NewsList = _list("topNews", "top_news", serialize_as="topNews")


class StepFour(_Lenient):
    """Profile match."""

    match_score: Score = Field(default=0, validation_alias=AliasChoices("matchScore", "overallScore"),
                               serialization_alias="matchScore")
    items: MatchList = _list("items", "matches")
    requirement_responses: StrList = _list("requirement_responses", "requirementResponses")
    responsibility_responses: StrList = _list("responsibility_responses", "responsibilityResponses")
    candidate: Candidate = Field(default_factory=Candidate, validation_alias=AliasChoices("candidate", "cv", "profile"))

    @model_validator(mode="before")
    @classmethod
    def _lift_matching_results(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        results = data.get("matchingResults")
        if not isinstance(results, dict):
            return data
        data = dict(data)
        data.pop("matchingResults")
        if "matchScore" not in data and "match_score" not in data:
            data["matchScore"] = results.get("overallScore", results.get("overall_score"))
        if not data.get("items") and not data.get("matches"):
            data["items"] = results.get("matches") or []
        return data

    @model_validator(mode="before")
    @classmethod
    def _candidate_must_be_mapping(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        for key in ("candidate", "cv", "profile"):
            if key in data and not isinstance(data[key], dict):
                data = {k: v for k, v in data.items() if k != key}
        return data


class StepFive(_Lenient):
    """Why company / role / now / you: lists or single narrative strings."""

    why_company: StrList = _list("why_company", "whyCompany")
    why_role: StrList = _list("why_role", "whyRole")
    why_now: StrList = _list("why_now", "whyNow")
    why_you: StrList = _list("why_you", "whyYou")


class StepSix(_Lenient):
    """Interview questions and questions to ask the interviewer."""

    questions: QuestionList = Field(default_factory=list)
    questions_to_ask: StrList = _list("questions_to_ask", "questionsToAsk")

    @model_validator(mode="before")
    @classmethod
    def _fold_categories(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        if not any(key in data for key, _ in QUESTION_CATEGORIES):
            return data
        data = dict(data)
        to_items = _item_list("question")
        questions = list(to_items(data.get("questions") or data.get("interview_questions")))
        for key, label in QUESTION_CATEGORIES:
            for item in to_items(data.pop(key, None)):
                item = dict(item)
                if not item.get("category"):
                    item["category"] = label
                questions.append(item)
        data["questions"] = questions
        return data


STEP_MODELS = {
    1: StepOne,
    2: StepTwo,
    3: StepThree,
    4: StepFour,
    5: StepFive,
    6: StepSix,
}


def coerce_step(step: int, raw: Any) -> BaseModel:
    """Best-effort model for a slot; never raises for any ``raw`` value."""
    model_cls = STEP_MODELS[step]
    if not isinstance(raw, dict):
        return model_cls()
    try:
        return model_cls.model_validate(raw)
    except pydantic.ValidationError as e:
        logger.warning("step_%d_data could not be coerced, using defaults: %s", step, e)
        return model_cls()


def validate_step(step: int, data: Any, partial: bool = False) -> dict:
    """Normalise a slot payload for storage.

    With ``partial`` only the keys the payload actually supplied are kept,
    so a merge never overwrites stored values with defaults.

    Raises ValidationError when the step number is unknown or the payload
    is not a mapping.
    """
    field = f"step_{step}_data"
    if step not in STEP_MODELS:
        raise ValidationError.for_field("step", f"must be one of {list(STEP_NUMBERS)}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError.for_field(field, "must be an object")
    try:
        model = STEP_MODELS[step].model_validate(data)
    except pydantic.ValidationError as e:
        details = [
            {"field": ".".join([field, *(str(p) for p in err["loc"])]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError(f"Invalid {field}", details=details) from e
    dumped = model.model_dump(by_alias=True)
    if not partial:
        return dumped
    fields = STEP_MODELS[step].model_fields
    sent = set(model.model_extra or {})
    for name in model.model_fields_set:
        info = fields.get(name)
        sent.add((info.serialization_alias or name) if info else name)
    return {key: value for key, value in dumped.items() if key in sent}


def list_field_keys(step: int) -> list:
    """Stored keys of the plain string-list fields of a step (the mergeable ones)."""
    keys = []
    for name, info in STEP_MODELS[step].model_fields.items():
        if info.annotation == list[str]:
            keys.append(info.serialization_alias or name)
    return keys


def merge_step(step: int, current: dict | None, incoming: dict) -> dict:
    """Overlay ``incoming`` on ``current``; string lists merge with ``smart_set``."""
    current = current or {}
    merged = {**current, **incoming}
    for key in list_field_keys(step):
        merged[key] = smart_set(current.get(key) or [], incoming.get(key) or [])
    return merged


def is_populated(slot: Any) -> bool:
    """True when a stored slot holds at least one non-empty value."""
    if not isinstance(slot, dict):
        return False
    for value in slot.values():
        if isinstance(value, dict):
            if is_populated(value):
                return True
        elif value not in (None, "", [], 0):
            return True
    return False
