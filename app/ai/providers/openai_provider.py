from __future__ import annotations

import os
from typing import Optional

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from app.ai.providers.http_utils import error_message_from_body, unexpected_envelope
from app.ai.types import ProviderConfig, ProviderHttpError
from app.analysis.prompt import ANALYZER_SYSTEM_PROMPT


class OpenAIProvider:
    """Chat Completions adapter; the reply lives at ``choices[0].message.content``."""

    name = "openai"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        http_client: Optional[httpx.Client] = None,
    ):
        self._base_url = base_url or os.getenv("OPENAI_BASE_URL") or None
        self._timeout_s = timeout_s
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._http_client = http_client

    def _client(self, api_key: str) -> OpenAI:
        # Retries belong to the caller; one request per analysis.
        return OpenAI(
            api_key=api_key,
            base_url=self._base_url,
            timeout=self._timeout_s,
            max_retries=0,
            http_client=self._http_client,
        )

    def analyze(self, config: ProviderConfig, prompt: str) -> str:
        client = self._client(config.api_key)
        try:
            response = client.chat.completions.create(
                model=config.model,
                messages=[
                    {"role": "system", "content": ANALYZER_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except APITimeoutError as exc:
            raise ProviderHttpError(
                "timeout", f"Request timed out after {self._timeout_s:g}s", provider=self.name
            ) from exc
        except APIStatusError as exc:
            raise ProviderHttpError(
                exc.status_code, error_message_from_body(exc.body), provider=self.name
            ) from exc
        except APIConnectionError as exc:
            raise ProviderHttpError("network", str(exc), provider=self.name) from exc
        finally:
            # Closing the SDK client also closes its httpx client; an injected one belongs to the caller.
            if self._http_client is None:
                client.close()

        content = response.choices[0].message.content if response.choices else None
        if not isinstance(content, str):
            raise unexpected_envelope(self.name, 200)
        return content
