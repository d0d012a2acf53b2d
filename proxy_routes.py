"""Proxy endpoints that forward text and speech requests to the Gemini API."""
from log import get_logger

logger = get_logger("hakeena.proxy_routes")

from fastapi import APIRouter, HTTPException

import gemini
from models import (
    GenerateTextRequest, GenerateTextResponse,
    GenerateSpeechRequest, GenerateSpeechResponse,
)

router = APIRouter()


def _require_api_key() -> str:
    api_key = gemini.get_api_key()
    if not api_key:
        logger.error("GEMINI_API_KEY is not set", extra={"component": "config"})
        raise HTTPException(500, "Missing GEMINI_API_KEY environment variable")
    return api_key


def _upstream_failure(exc: gemini.UpstreamError, what: str) -> HTTPException:
    return HTTPException(exc.status_code, {"error": f"Failed to fetch from {what}", "details": exc.body})


@router.post("/generative-text", tags=["Proxy"], summary="Generate JSON text from a prompt",
             response_model=GenerateTextResponse)
async def generative_text(req: GenerateTextRequest):
    if not req.prompt:
        raise HTTPException(400, 'Missing "prompt" in body')
    api_key = _require_api_key()

    try:
        text = await gemini.generate_text(req.prompt, api_key)
    except gemini.UpstreamError as e:
        raise _upstream_failure(e, "Gemini API")
    except Exception:
        logger.exception("Text proxy failed", extra={"component": "proxy", "endpoint": "/generative-text"})
        raise HTTPException(500, "Internal Server Error")
    return GenerateTextResponse(text=text)


@router.post("/generative-speech", tags=["Proxy"], summary="Synthesize speech for a word or example",
             response_model=GenerateSpeechResponse)
async def generative_speech(req: GenerateSpeechRequest):
    if not req.text:
        raise HTTPException(400, 'Missing "text" in body')
    api_key = _require_api_key()

    try:
        audio = await gemini.generate_speech(req.text, req.lang, api_key)
    except gemini.UpstreamError as e:
        raise _upstream_failure(e, "Gemini TTS API")
    except Exception:
        logger.exception("Speech proxy failed", extra={"component": "proxy", "endpoint": "/generative-speech"})
        raise HTTPException(500, "Internal Server Error")
    if audio is None:
        logger.warning("No audio in Gemini reply", extra={"component": "proxy", "lang": req.lang})
    return GenerateSpeechResponse(audioDataB64=audio)
