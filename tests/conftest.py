"""Shared fixtures: in-memory store, recording dispatcher, API client, fake browser/LLM."""

import os
import tempfile

os.environ.setdefault("JWT_SECRET", "test-secret-for-interviewace-tests-only")
os.environ.setdefault("INTERVIEWACE_DATA_DIR", tempfile.mkdtemp(prefix="interviewace-tests-"))

import pytest
from fastapi.testclient import TestClient

from interviewace import pdf_engine
from report_worker import JobDispatcher
from web.app import create_app
from web.auth import create_token
from web.preparation_store import PreparationStore

FAKE_PDF = b"%PDF-1.4\n% fake report\n%%EOF\n"


class RecordingDispatcher(JobDispatcher):
    """Keeps submitted jobs in memory and never runs them."""

    def __init__(self):
        self.submitted = []
        self.jobs = {}

    def submit(self, name, data, owner=None):
        job_id = f"job-{len(self.submitted) + 1}"
        self.submitted.append((name, data, owner))
        self.jobs[job_id] = {
            "id": job_id,
            "name": name,
            "owner": owner,
            "state": "waiting",
            "progress": 0,
            "created_at": "2024-01-01T00:00:00+00:00",
            "processed_at": None,
            "finished_at": None,
            "result": None,
            "error": None,
        }
        return job_id

    def get(self, job_id):
        job = self.jobs.get(job_id)
        return dict(job) if job else None


@pytest.fixture
def store():
    return PreparationStore(None)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def client(store, dispatcher):
    return TestClient(create_app(store=store, dispatcher=dispatcher))


@pytest.fixture
def auth_headers():
    """Bearer headers for a user id (default: a free user named alice)."""

    def _headers(user_id="alice", email="alice@example.com"):
        return {"Authorization": f"Bearer {create_token(user_id, email)}"}

    return _headers


@pytest.fixture
def fake_pdf(monkeypatch):
    """Replace the browser with a stub; records the HTML it was asked to print."""
    calls = []

    def _html_to_pdf(html, landscape=False, preview=False, timeout_ms=None):
        calls.append({"html": html, "landscape": landscape, "preview": preview})
        return FAKE_PDF

    monkeypatch.setattr(pdf_engine, "html_to_pdf", _html_to_pdf)
    return calls


@pytest.fixture
def scenario_preparation():
    return {
        "step_1_data": {"company_name": "Acme", "job_title": "PM"},
        "step_2_data": {},
        "step_3_data": {},
        "step_4_data": {},
        "step_5_data": {},
        "step_6_data": {},
    }


class FakeLLM:
    """Returns queued responses in order and records prompts."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def __call__(self, prompt, json_mode=False, **kwargs):
        self.prompts.append({"prompt": prompt, "json_mode": json_mode, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_llm():
    return FakeLLM
