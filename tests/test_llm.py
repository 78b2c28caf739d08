"""Tests for llm.py and api_utils.py — Claude calls with a fake client."""

from types import SimpleNamespace

import anthropic
import httpx
import pytest

from interviewace import api_utils
from interviewace.errors import GenerationFailed
from interviewace.llm import call_llm, strip_code_fences

API_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(status):
    response = httpx.Response(status, request=API_REQUEST)
    return anthropic.APIStatusError(f"status {status}", response=response, body=None)


class FakeMessages:

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=outcome)])


class FakeClient:

    def __init__(self, *outcomes):
        self.messages = FakeMessages(outcomes)


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(api_utils, "RETRY_DELAYS", [0, 0, 0])


class TestStripCodeFences:

    def test_fenced_json(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain(self):
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestCallLlm:

    def test_text_mode(self):
        client = FakeClient("Hello there")
        assert call_llm("Say hello", client=client) == "Hello there"
        call = client.messages.calls[0]
        assert call["messages"][0]["content"] == "Say hello"
        assert call["temperature"] == 0

    def test_json_mode_parses_fenced_output(self):
        client = FakeClient('```json\n{"skills": ["SQL"]}\n```')
        assert call_llm("Extract skills", json_mode=True, client=client) == {"skills": ["SQL"]}
        assert "Return ONLY the JSON" in client.messages.calls[0]["messages"][0]["content"]

    def test_model_override(self, monkeypatch):
        monkeypatch.setenv("INTERVIEWACE_LLM_MODEL", "claude-test-model")
        client = FakeClient("ok")
        call_llm("hi", client=client)
        assert client.messages.calls[0]["model"] == "claude-test-model"

    def test_invalid_json(self):
        with pytest.raises(GenerationFailed) as exc:
            call_llm("Extract", json_mode=True, client=FakeClient("not json at all"))
        assert exc.value.status_code == 502

    def test_empty_response(self):
        with pytest.raises(GenerationFailed):
            call_llm("Extract", client=FakeClient("   "))

    def test_empty_prompt(self):
        with pytest.raises(GenerationFailed) as exc:
            call_llm("  ", client=FakeClient())
        assert exc.value.status_code == 400

    def test_api_error_maps_to_generation_failed(self):
        with pytest.raises(GenerationFailed):
            call_llm("hi", client=FakeClient(_status_error(400)))

    def test_transient_error_retried(self):
        client = FakeClient(_status_error(529), "recovered")
        assert call_llm("hi", client=client) == "recovered"
        assert len(client.messages.calls) == 2


class TestRetry:

    def test_retryable_classification(self):
        assert api_utils.is_retryable_error(_status_error(429))
        assert api_utils.is_retryable_error(_status_error(503))
        assert not api_utils.is_retryable_error(_status_error(401))
        assert api_utils.is_retryable_error(anthropic.APIConnectionError(request=API_REQUEST))
        assert api_utils.is_retryable_error(anthropic.AnthropicError("Overloaded"))

    def test_gives_up_after_max_retries(self):
        sleeps = []
        client = FakeClient(*[_status_error(500)] * (api_utils.MAX_RETRIES + 1))
        with pytest.raises(anthropic.APIStatusError):
            api_utils.messages_create_with_retry(client, sleep=sleeps.append, model="m")
        assert len(client.messages.calls) == api_utils.MAX_RETRIES + 1
        assert len(sleeps) == api_utils.MAX_RETRIES

    def test_non_transient_not_retried(self):
        sleeps = []
        client = FakeClient(_status_error(400))
        with pytest.raises(anthropic.APIStatusError):
            api_utils.messages_create_with_retry(client, sleep=sleeps.append, model="m")
        assert sleeps == []
