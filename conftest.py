"""Shared fixtures for the Hakeena test suite."""
import json

import httpx
import pytest
from fastapi.testclient import TestClient

import gemini
from audio import decode_wav


class FakeGemini:
    """Stands in for generativelanguage.googleapis.com behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.reply = {"candidates": []}

    def reply_text(self, text):
        self.status_code = 200
        self.reply = {"candidates": [{"content": {"parts": [{"text": text}]}}]}

    def reply_json(self, obj):
        self.reply_text(json.dumps(obj, ensure_ascii=False))

    def reply_audio(self, data_b64):
        self.status_code = 200
        self.reply = {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "audio/L16;rate=24000", "data": data_b64}}]}}]}

    def fail(self, status_code, body):
        self.status_code = status_code
        self.reply = body

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.reply, str):
            return httpx.Response(self.status_code, text=self.reply)
        return httpx.Response(self.status_code, json=self.reply)


class FakeSource:
    def __init__(self, audio):
        self.audio = audio
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeOutput:
    """Records decoded clips instead of playing them."""

    def __init__(self):
        self.sources = []

    def decode(self, data):
        return decode_wav(data)

    def play(self, audio):
        source = FakeSource(audio)
        self.sources.append(source)
        return source


@pytest.fixture()
def api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture()
def upstream(monkeypatch):
    fake = FakeGemini()
    monkeypatch.setattr(gemini, "UPSTREAM_TRANSPORT", httpx.MockTransport(fake))
    return fake


@pytest.fixture()
def client(upstream):
    from backend import app
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def audio_output():
    return FakeOutput()
