"""Tests for ai_tasks.py — prompt building and output normalisation with a fake LLM."""

import pytest

from interviewace import ai_tasks
from interviewace.errors import GenerationFailed, ValidationError

JOB_TEXT = (
    "Acme Corp is hiring a Senior Product Manager in London. You will own the invoicing roadmap, "
    "run discovery with enterprise customers and work with sales on pricing. Requirements: SQL, "
    "five years of B2B SaaS experience."
)


class TestAnalyzeJob:

    def test_returns_step_one_fields(self, fake_llm):
        llm = fake_llm({
            "job_title": "Senior Product Manager",
            "companyName": "Acme Corp",
            "key_requirements": "SQL",
            "key_responsibilities": ["Own the roadmap", None],
        })
        result = ai_tasks.analyze_job_text(JOB_TEXT, llm=llm)
        assert result["job_title"] == "Senior Product Manager"
        assert result["company_name"] == "Acme Corp"
        assert result["key_requirements"] == ["SQL"]
        assert result["key_responsibilities"] == ["Own the roadmap"]
        assert llm.prompts[0]["json_mode"] is True
        assert JOB_TEXT in llm.prompts[0]["prompt"]

    def test_short_text_rejected_before_calling(self, fake_llm):
        llm = fake_llm()
        with pytest.raises(ValidationError):
            ai_tasks.analyze_job_text("too short", llm=llm)
        assert llm.prompts == []

    def test_non_object_output(self, fake_llm):
        with pytest.raises(GenerationFailed):
            ai_tasks.analyze_job_text(JOB_TEXT, llm=fake_llm(["not", "an", "object"]))


class TestAnalyzeCv:

    def test_lists_normalised(self, fake_llm):
        llm = fake_llm({"skills": ["SQL", ""], "experience": "PM at Parcelify (6 years)"})
        result = ai_tasks.analyze_cv_text("Jordan Lee, PM", llm=llm)
        assert result == {"skills": ["SQL"], "experience": ["PM at Parcelify (6 years)"], "education": []}

    def test_empty_text(self, fake_llm):
        with pytest.raises(ValidationError):
            ai_tasks.analyze_cv_text("  ", llm=fake_llm())


class TestBusinessModel:

    def test_merges_onto_existing(self, fake_llm):
        llm = fake_llm({"key_partners": ["Carriers", "ERP vendors"], "revenueStreams": ["Subscriptions"]})
        result = ai_tasks.generate_business_model(
            "Acme", "Logistics SaaS",
            existing={"keyPartners": ["carriers"]},
            llm=llm,
        )
        assert result["key_partners"] == ["carriers", "ERP vendors"]
        assert result["revenue_streams"] == ["Subscriptions"]
        assert result["channels"] == []
        assert len(result) == 9
        assert "Logistics SaaS" in llm.prompts[0]["prompt"]

    def test_company_name_required(self, fake_llm):
        with pytest.raises(ValidationError):
            ai_tasks.generate_business_model("", llm=fake_llm())


class TestSwot:

    def test_four_buckets(self, fake_llm):
        llm = fake_llm({"strengths": ["Brand", "brand"], "threats": "ERP vendors"})
        result = ai_tasks.generate_swot("Acme", llm=llm)
        assert result == {
            "strengths": ["Brand", "brand"],
            "weaknesses": [],
            "opportunities": [],
            "threats": ["ERP vendors"],
        }

    def test_existing_dedup(self, fake_llm):
        llm = fake_llm({"strengths": ["brand", "Price"]})
        result = ai_tasks.generate_swot("Acme", existing={"strengths": ["Brand"]}, llm=llm)
        assert result["strengths"] == ["Brand", "Price"]

    def test_needs_some_context(self, fake_llm):
        with pytest.raises(ValidationError):
            ai_tasks.generate_swot(llm=fake_llm())


class TestTopNews:

    def test_items_normalised_and_limited(self, fake_llm):
        llm = fake_llm({"news": [
            {"headline": "Acme raises Series C", "link": "https://n.example/1"},
            {"title": ""},
            "junk",
            {"title": "Acme opens Berlin office"},
            {"title": "Acme hires CFO"},
            {"title": "Fourth story"},
        ]})
        items = ai_tasks.get_top_news("Acme", llm=llm)
        assert [i["title"] for i in items] == ["Acme raises Series C", "Acme opens Berlin office", "Acme hires CFO"]
        assert items[0]["url"] == "https://n.example/1"

    def test_wrong_shape_is_an_error(self, fake_llm):
        with pytest.raises(GenerationFailed):
            ai_tasks.get_top_news("Acme", llm=fake_llm("a string"))

    def test_llm_failure_surfaces(self, fake_llm):
        with pytest.raises(GenerationFailed):
            ai_tasks.get_top_news("Acme", llm=fake_llm(GenerationFailed("boom")))


class TestTimelineAndHistory:

    def test_parse_bullets(self):
        content = "Here you go:\n- 2012 – Founded\n-   \n* not a bullet\n - 2019 – Series B\n"
        assert ai_tasks.parse_timeline_bullets(content) == ["2012 – Founded", "2019 – Series B"]

    def test_timeline_uses_text_mode(self, fake_llm):
        llm = fake_llm("- 2012 – Founded")
        assert ai_tasks.generate_company_timeline("Acme", llm=llm) == ["2012 – Founded"]
        assert llm.prompts[0]["json_mode"] is False

    @pytest.mark.parametrize("limit, expected", [(1, 5), (8, 8), (50, 12), ("x", 8), (None, 8), (0, 8)])
    def test_history_limit_clamped(self, limit, expected):
        assert ai_tasks.clamp_history_limit(limit) == expected

    def test_history(self, fake_llm):
        llm = fake_llm({"timeline": [{"year": 2012, "event": "Founded"}, {"year": "2013", "event": ""}]})
        assert ai_tasks.generate_company_history("Acme", llm=llm) == {"timeline": [{"year": "2012", "event": "Founded"}]}


class TestCompetitors:

    def test_strings_and_objects(self, fake_llm):
        llm = fake_llm(["Globex", {"name": "Initech", "description": "ERP vendor"}, {"description": "no name"}])
        assert ai_tasks.generate_competitors("Acme", llm=llm) == [
            {"name": "Globex", "description": ""},
            {"name": "Initech", "description": "ERP vendor"},
        ]


class TestWhySuggestions:

    def test_three_answers(self, fake_llm):
        llm = fake_llm({"whyCompany": "Leader", "why_role": "Pricing", "whyYou": "Shipped it twice"})
        result = ai_tasks.generate_why_suggestions({"skills": ["SQL"]}, {"job_title": "PM"}, llm=llm)
        assert result == {"whyCompany": "Leader", "whyRole": "Pricing", "whyYou": "Shipped it twice"}

    def test_cv_must_be_object(self, fake_llm):
        with pytest.raises(ValidationError):
            ai_tasks.generate_why_suggestions("cv text", {}, llm=fake_llm())


class TestMatchProfile:

    def test_grades_and_distribution(self, fake_llm):
        llm = fake_llm({
            "overallScore": "71",
            "matches": [
                {"skill": "SQL", "score": 90, "reasoning": "daily"},
                {"skill": "Pricing", "score": 60, "grade": "moderate"},
                {"target": "Go", "score": 10},
                "junk",
            ],
        })
        result = ai_tasks.match_profile(requirements=["SQL", "Pricing", "Go"], skills=["SQL"], llm=llm)
        assert result["overallScore"] == 71
        assert [m["grade"] for m in result["matches"]] == ["High", "Moderate", "Low"]
        assert result["matches"][2]["skill"] == "Go"
        assert result["distribution"] == {"high": 1, "moderate": 1, "low": 1}
        assert llm.prompts[0]["max_tokens"] == 6000

    def test_model_grade_wins(self):
        assert ai_tasks.grade_for("High match", 10) == "High"
        assert ai_tasks.grade_for(None, 75) == "High"
        assert ai_tasks.grade_for("", 50) == "Moderate"
        assert ai_tasks.grade_for("?", 49) == "Low"

    def test_targets_required(self, fake_llm):
        with pytest.raises(ValidationError):
            ai_tasks.match_profile(skills=["SQL"], llm=fake_llm())
