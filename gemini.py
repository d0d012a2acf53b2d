"""Gemini generateContent calls: payload building, HTTP, and response extraction."""
import os
from typing import Optional

from log import get_logger

logger = get_logger("hakeena.gemini")

import httpx

from llm import speech_prompt, voice_for

# --- Config ---
GEMINI_API_URL = os.environ.get("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta/models")
GEMINI_TEXT_MODEL = os.environ.get("GEMINI_TEXT_MODEL", "gemini-2.5-flash-preview-05-20")
GEMINI_TTS_MODEL = os.environ.get("GEMINI_TTS_MODEL", "gemini-2.5-flash-preview-tts")
GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", "120"))

# Tests swap this for an httpx.MockTransport
UPSTREAM_TRANSPORT: Optional[httpx.AsyncBaseTransport] = None


class UpstreamError(Exception):
    """The generative API answered with a non-success status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Upstream returned {status_code}")
        self.status_code = status_code
        self.body = body


def get_api_key() -> Optional[str]:
    """Read the credential at call time so a missing key is reported per request."""
    return os.environ.get("GEMINI_API_KEY") or None


def text_payload(prompt: str) -> dict:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"responseMimeType": "application/json"},
    }


def speech_payload(text: str, lang: Optional[str]) -> dict:
    return {
        "contents": [{"parts": [{"text": speech_prompt(text, lang)}]}],
        "generationConfig": {
            "responseModalities": ["AUDIO"],
            "speechConfig": {
                "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice_for(lang)}},
            },
        },
        "model": GEMINI_TTS_MODEL,
    }


def _first_part(result: dict) -> dict:
    candidates = result.get("candidates") or []
    if not candidates:
        return {}
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return parts[0] if parts else {}


def extract_text(result: dict) -> str:
    return _first_part(result).get("text") or ""


def extract_audio(result: dict) -> Optional[str]:
    return (_first_part(result).get("inlineData") or {}).get("data") or None


async def generate_content(model: str, payload: dict, api_key: str) -> dict:
    """POST a generateContent request and return the decoded JSON reply.

    Raises UpstreamError for non-2xx replies; transport and JSON errors propagate.
    """
    url = f"{GEMINI_API_URL}/{model}:generateContent"
    async with httpx.AsyncClient(timeout=GEMINI_TIMEOUT, transport=UPSTREAM_TRANSPORT) as client:
        resp = await client.post(url, params={"key": api_key}, json=payload)
    if not resp.is_success:
        logger.error(
            "Gemini API error",
            extra={"component": "gemini", "model": model, "status_code": resp.status_code, "detail": resp.text},
        )
        raise UpstreamError(resp.status_code, resp.text)
    return resp.json()


async def generate_text(prompt: str, api_key: str) -> str:
    result = await generate_content(GEMINI_TEXT_MODEL, text_payload(prompt), api_key)
    return extract_text(result)


async def generate_speech(text: str, lang: Optional[str], api_key: str) -> Optional[str]:
    """Return base64 PCM (16-bit mono 24 kHz) for `text`, or None when the reply has no audio."""
    logger.info("Requesting speech", extra={"component": "gemini", "lang": lang, "voice": voice_for(lang)})
    result = await generate_content(GEMINI_TTS_MODEL, speech_payload(text, lang), api_key)
    return extract_audio(result)
