"""Tests for renderer.py — template helpers and report HTML."""

from datetime import datetime

import pytest

from interviewace import renderer
from interviewace.errors import TemplateUnavailable
from interviewace.renderer import (
    FREE_TIER_MARKER,
    and_,
    compact,
    eq,
    format_list,
    has_content,
    or_,
    render_report,
)
from interviewace.report_model import prepare_model
from interviewace.sample_data import sample_preparation

FIXED_NOW = datetime(2024, 5, 17, 9, 5)


class TestHelpers:

    def test_eq_is_strict(self):
        assert eq(1, 1)
        assert not eq(1, "1")
        assert not eq(1, True)
        assert eq("a", "a")

    def test_or_and_follow_js_truthiness(self):
        assert or_("", "fallback") == "fallback"
        assert or_(0, 5) == 5
        assert or_([], "x") == []
        assert or_(None, "x") == "x"
        assert and_("a", "b") == "b"
        assert and_(0, "b") == 0
        assert or_(float("nan"), 1) == 1

    def test_format_list(self):
        assert format_list(["SQL", " ", None, "Go "]) == "• SQL\n• Go"
        assert format_list("not a list") == ""
        assert format_list([]) == ""

    def test_compact_drops_empty_values(self):
        data = {"a": "", "b": [], "c": {"d": None}, "e": ["x", "  "], "f": 0, "g": "keep"}
        assert compact(data) == {"e": ["x"], "g": "keep"}

    def test_has_content(self):
        assert has_content({"a": 1})
        assert not has_content({})
        assert not has_content(["a"])


class TestRenderReport:

    def test_zero_match_score_is_shown(self):
        prep = {"step_4_data": {"items": [
            {"requirement": "Kubernetes", "score": 0},
            {"requirement": "SQL", "score": 90},
            {"requirement": "Pricing"},
        ]}}
        html = render_report(prepare_model(prep, now=FIXED_NOW))
        assert "Kubernetes</strong> <span class=\"muted\">(0%)</span>" in html
        assert "(90%)" in html
        assert "Pricing</strong></div>" in html

    def test_scenario_preparation(self, scenario_preparation):
        html = render_report(prepare_model(scenario_preparation, now=FIXED_NOW))
        assert "Acme" in html
        assert "PM" in html
        assert html.lstrip().lower().startswith("<!doctype html>")

    def test_generated_at_appears_once(self):
        html = render_report(prepare_model(sample_preparation(), now=FIXED_NOW))
        assert html.count("17/05/2024 09:05") == 1

    def test_free_tier_watermark(self):
        free = render_report(prepare_model({}, is_premium=False, now=FIXED_NOW))
        premium = render_report(prepare_model({}, is_premium=True, now=FIXED_NOW))
        assert FREE_TIER_MARKER in free
        assert FREE_TIER_MARKER not in premium

    def test_generate_button_only_when_requested(self):
        shown = render_report(prepare_model({}, show_generate_button=True, now=FIXED_NOW))
        hidden = render_report(prepare_model({}, now=FIXED_NOW))
        assert "INTERVIEWACE_GENERATE_PDF" in shown
        assert "INTERVIEWACE_GENERATE_PDF" not in hidden

    def test_deterministic(self):
        report = prepare_model(sample_preparation(), now=FIXED_NOW)
        assert render_report(report) == render_report(report)

    def test_empty_sections_are_omitted(self):
        html = render_report(prepare_model({}, now=FIXED_NOW))
        assert "Acme" not in html
        assert "Strengths" not in html

    def test_values_are_escaped(self):
        prep = {"step_1_data": {"company_name": "<script>alert(1)</script>", "job_title": "PM"}}
        html = render_report(prepare_model(prep, now=FIXED_NOW))
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_debug_dump(self):
        report = prepare_model(sample_preparation(), now=FIXED_NOW)
        assert 'class="debug' in render_report(report, debug=True)
        assert 'class="debug' not in render_report(report)


class TestTemplateUnavailable:

    @pytest.fixture
    def empty_template_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("REPORT_TEMPLATE_DIR", str(tmp_path))
        renderer._environment.cache_clear()
        yield tmp_path
        renderer._environment.cache_clear()

    def test_missing_template(self, empty_template_dir):
        with pytest.raises(TemplateUnavailable):
            render_report(prepare_model({}, now=FIXED_NOW))

    def test_broken_template(self, empty_template_dir):
        (empty_template_dir / "report.html").write_text("{% if report.title %}unclosed")
        with pytest.raises(TemplateUnavailable):
            render_report(prepare_model({}, now=FIXED_NOW))
