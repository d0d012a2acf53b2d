"""Async HTTP client for the Hakeena proxy endpoints."""
import os
from typing import Optional

import httpx

HAKEENA_API_URL = os.environ.get("HAKEENA_API_URL", "http://localhost:8000")


class ProxyClient:
    """Calls /generative-text and /generative-speech.

    Non-2xx replies raise httpx.HTTPStatusError. No timeout is applied, so a
    hung upstream keeps the caller waiting.
    """

    def __init__(self, base_url: str = HAKEENA_API_URL,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.transport = transport

    async def _post(self, path: str, body: dict) -> dict:
        async with httpx.AsyncClient(base_url=self.base_url, transport=self.transport, timeout=None) as client:
            resp = await client.post(path, json=body)
        resp.raise_for_status()
        return resp.json()

    async def generate_text(self, prompt: str) -> str:
        data = await self._post("/generative-text", {"prompt": prompt})
        return data["text"]

    async def generate_speech(self, text: str, lang: str) -> Optional[str]:
        data = await self._post("/generative-speech", {"text": text, "lang": lang})
        return data.get("audioDataB64")
