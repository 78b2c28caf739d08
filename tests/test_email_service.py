"""Tests for email_service.py — template rendering and the Mailgun call."""

import pytest
import requests

from interviewace import email_service


class FakeResponse:

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = "" if self.ok else "Forbidden"
        self._payload = payload or {"id": "<abc@mailgun>", "message": "Queued. Thank you."}

    def json(self):
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def mailgun_env(monkeypatch):
    monkeypatch.setenv("MAILGUN_API_KEY", "key-test")
    monkeypatch.setenv("MAILGUN_DOMAIN", "mg.interviewace.test")
    monkeypatch.delenv("MAILGUN_API_BASE", raising=False)
    monkeypatch.delenv("MAILGUN_FROM_EMAIL", raising=False)


@pytest.fixture
def no_mailgun(monkeypatch):
    monkeypatch.delenv("MAILGUN_API_KEY", raising=False)
    monkeypatch.delenv("MAILGUN_DOMAIN", raising=False)


class TestRenderEmail:

    def test_welcome_uses_name_and_frontend_url(self, monkeypatch):
        monkeypatch.setenv("FRONTEND_URL", "https://app.interviewace.test")
        html = email_service.render_email("welcome", {"name": "Sam"})
        assert "Hi Sam!" in html
        assert "https://app.interviewace.test/dashboard" in html

    def test_dashed_name_accepted(self):
        html = email_service.render_email("report-ready", {"preparation_title": "PM at Acme"})
        assert "PM at Acme" in html

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            email_service.render_email("invoice")


class TestSendEmail:

    def test_logs_without_mailgun(self, no_mailgun, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("requests.post must not be called")

        monkeypatch.setattr(requests, "post", fail)
        assert email_service.send_email("a@example.com", "Hi", "welcome") is None

    def test_posts_to_mailgun(self, mailgun_env, monkeypatch):
        calls = []

        def fake_post(url, **kwargs):
            calls.append((url, kwargs))
            return FakeResponse()

        monkeypatch.setattr(requests, "post", fake_post)
        message_id = email_service.send_email(
            "bob@example.com", "Your report", "report_ready",
            {"preparation_title": "PM at Acme"},
            attachments=[("report.pdf", b"%PDF")],
        )
        assert message_id == "<abc@mailgun>"
        url, kwargs = calls[0]
        assert url == "https://api.mailgun.net/v3/mg.interviewace.test/messages"
        assert kwargs["auth"] == ("api", "key-test")
        assert kwargs["data"]["to"] == "bob@example.com"
        assert "PM at Acme" in kwargs["data"]["html"]
        assert kwargs["files"] == [("attachment", ("report.pdf", b"%PDF"))]

    def test_mailgun_rejection_raises(self, mailgun_env, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda url, **kwargs: FakeResponse(status_code=401))
        with pytest.raises(requests.HTTPError):
            email_service.send_email("bob@example.com", "Hi", "welcome")

    def test_recipient_required(self, no_mailgun):
        with pytest.raises(ValueError):
            email_service.send_email("", "Hi", "welcome")
