"""Tests for generation.upstream with a fake SDK client."""

from types import SimpleNamespace

import pytest

from config.settings import Settings
from exceptions import ConfigurationMissing, UpstreamUnavailable
from generation.upstream import UpstreamClient


class FakeCompletions:
    def __init__(self, text="ok", error=None, choices=True):
        self.text = text
        self.error = error
        self.choices = choices
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[], usage=None)
        message = SimpleNamespace(content=self.text)
        usage = SimpleNamespace(prompt_tokens=12, completion_tokens=3)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def _fake_client(**kwargs):
    completions = FakeCompletions(**kwargs)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def _upstream(api_key="sk-test", **kwargs):
    client, completions = _fake_client(**kwargs)
    return UpstreamClient(model="test-model", api_key=api_key, client=client), completions


@pytest.mark.parametrize("key", [None, "", "   ", "your_gemini_api_key_here", "YOUR_KEY"])
def test_missing_key_raises_before_any_call(key):
    upstream, completions = _upstream(api_key=key)
    assert not upstream.configured
    with pytest.raises(ConfigurationMissing):
        upstream.generate("hello")
    assert completions.calls == []


def test_generation_parameters_are_passed():
    upstream, completions = _upstream(text="reply")
    assert upstream.generate("prompt text") == "reply"

    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert call["messages"] == [{"role": "user", "content": "prompt text"}]
    assert call["temperature"] == 0.7
    assert call["top_p"] == 0.9
    assert call["max_tokens"] == 2048
    assert call["extra_body"] == {"top_k": 40}


def test_transport_error_becomes_upstream_unavailable():
    upstream, _ = _upstream(error=ConnectionError("network down"))
    with pytest.raises(UpstreamUnavailable) as exc_info:
        upstream.generate("prompt")
    assert "network down" in str(exc_info.value)
    assert upstream.get_stats()["total_errors"] == 1


def test_no_choices_returns_empty_text():
    upstream, _ = _upstream(choices=False)
    assert upstream.generate("prompt") == ""


def test_none_content_returns_empty_text():
    upstream, _ = _upstream(text=None)
    assert upstream.generate("prompt") == ""


def test_stats_track_calls():
    upstream, _ = _upstream()
    upstream.generate("a")
    upstream.generate("b")
    stats = upstream.get_stats()
    assert stats["total_calls"] == 2
    assert stats["total_errors"] == 0
    assert stats["error_rate"] == 0


def test_from_settings():
    settings = Settings(llm_api_key="sk-live", top_k=20, temperature=0.2, _env_file=None)
    client, completions = _fake_client()
    upstream = UpstreamClient.from_settings(settings, client=client)
    assert upstream.configured
    upstream.generate("x")
    assert completions.calls[0]["extra_body"] == {"top_k": 20}
    assert completions.calls[0]["temperature"] == 0.2
    assert completions.calls[0]["model"] == "gemini-2.0-flash"
