"""Tests for the command line entry point."""

import json
import logging

import pytest

from config.settings import Settings
from main import run


@pytest.fixture(autouse=True)
def reset_root_handlers():
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)


def _settings():
    return Settings(llm_api_key=None, log_file=None, log_level="WARNING", _env_file=None)


def test_usage_on_bad_arguments(capsys):
    assert run([], config=_settings()) == 1
    assert run(["explode", "now"], config=_settings()) == 1
    assert "Usage:" in capsys.readouterr().out


def test_chat_prints_json_reply(capsys):
    assert run(["chat", "I", "feel", "anxious"], config=_settings()) == 0
    reply = json.loads(capsys.readouterr().out)
    assert reply["urgency"] == "medium"
    assert reply["emotionsDetected"] == ["anxiety"]


def test_notes_and_summary_from_file(tmp_path, capsys):
    path = tmp_path / "notes.json"
    path.write_text(json.dumps({
        "client-1": [{"id": "a", "content": "Breathing helped with anxiety.", "created_at": "2024-01-05T10:00:00"}]
    }), encoding="utf-8")

    assert run(["notes", str(path), "client-1"], config=_settings()) == 0
    analysis = json.loads(capsys.readouterr().out)
    assert analysis["mainThemes"] == ["anxiety"]
    assert analysis["strategies"] == ["Breathing techniques"]

    assert run(["summary", str(path), "client-1", "7"], config=_settings()) == 0
    assert "Last 7 days" in capsys.readouterr().out
