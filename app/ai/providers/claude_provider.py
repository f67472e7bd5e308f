from __future__ import annotations

from typing import Optional

import httpx

from app.ai.providers.http_utils import post_json, unexpected_envelope
from app.ai.types import ProviderConfig

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider:
    """Anthropic Messages adapter; the reply lives at ``content[0].text``."""

    name = "anthropic"

    def __init__(
        self,
        timeout_s: float = 30.0,
        max_tokens: int = 2000,
        http_client: Optional[httpx.Client] = None,
    ):
        self._timeout_s = timeout_s
        self._max_tokens = max_tokens
        self._http_client = http_client

    def analyze(self, config: ProviderConfig, prompt: str) -> str:
        status, body = post_json(
            provider=self.name,
            client=self._http_client,
            timeout_s=self._timeout_s,
            url=ANTHROPIC_MESSAGES_URL,
            headers={
                "x-api-key": config.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            payload={
                "model": config.model,
                "max_tokens": self._max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
        )

        try:
            text = body["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise unexpected_envelope(self.name, status) from exc
        if not isinstance(text, str):
            raise unexpected_envelope(self.name, status)
        return text
