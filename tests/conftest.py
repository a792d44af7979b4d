import json
import os
import sys

import pytest

# Ensure project root is importable during tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import alt_text_enhancer.config as _cfg_mod

REAL_FIND_ENV_FILE = _cfg_mod._find_env_file


class FakeResponse:
    def __init__(self, status_code=200, body="", headers=None):
        self.status_code = status_code
        self.text = body
        self.headers = headers or {}


def chat_body(content):
    return json.dumps({"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeSession:
    """Stands in for requests.Session; replays queued responses and records calls."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def post(self, url, headers=None, data=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "data": data, "timeout": timeout})
        if not self.responses:
            raise AssertionError("unexpected extra request")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def sleeps(monkeypatch):
    """Record every wait instead of sleeping."""
    recorded = []

    def fake_wait(seconds, cancel=None):
        recorded.append(seconds)
        return not (cancel is not None and cancel.is_set())

    monkeypatch.setattr("alt_text_enhancer.invoker.wait", fake_wait)
    monkeypatch.setattr("alt_text_enhancer.services.orchestrator.wait", fake_wait)
    return recorded


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # Tests must never pick up a real key or a developer's .env
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_BASE_URL",
        "OPENAI_TIMEOUT",
        "OPENAI_MAX_RETRIES",
        "ALT_TEXT_LANGUAGE",
        "ALT_TEXT_BATCH_SIZE",
        "ALT_TEXT_DELAY_MS",
        "ALT_TEXT_REPLACE_MODE",
        "MEDIA_BASE_URL",
        "IMAGE_MAX_SIZE",
        "IMAGE_QUALITY",
        "DEBUG",
        "IMAGE_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(_cfg_mod, "_find_env_file", lambda: os.devnull)
    yield
