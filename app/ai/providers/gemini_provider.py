from __future__ import annotations

from typing import Optional

import httpx

from app.ai.providers.http_utils import post_json, unexpected_envelope
from app.ai.types import ProviderConfig

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiProvider:
    """Gemini generateContent adapter; the reply lives at ``candidates[0].content.parts[0].text``."""

    name = "gemini"

    def __init__(
        self,
        timeout_s: float = 30.0,
        temperature: float = 0.7,
        max_output_tokens: int = 2000,
        http_client: Optional[httpx.Client] = None,
    ):
        self._timeout_s = timeout_s
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._http_client = http_client

    def analyze(self, config: ProviderConfig, prompt: str) -> str:
        status, body = post_json(
            provider=self.name,
            client=self._http_client,
            timeout_s=self._timeout_s,
            url=f"{GEMINI_API_BASE}/{config.model}:generateContent",
            headers={"x-goog-api-key": config.api_key},
            payload={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": self._temperature,
                    "maxOutputTokens": self._max_output_tokens,
                },
            },
        )

        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise unexpected_envelope(self.name, status) from exc
        if not isinstance(text, str):
            raise unexpected_envelope(self.name, status)
        return text
