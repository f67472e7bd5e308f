from __future__ import annotations

from typing import Callable

from app.ai.types import ProviderAdapter, ProviderConfig, ProviderName

from app.ai.providers.openai_provider import OpenAIProvider
from app.ai.providers.claude_provider import ClaudeProvider
from app.ai.providers.gemini_provider import GeminiProvider

AdapterFactory = Callable[[float], ProviderAdapter]

_ADAPTERS: dict[ProviderName, AdapterFactory] = {
    "openai": lambda timeout_s: OpenAIProvider(timeout_s=timeout_s),
    "anthropic": lambda timeout_s: ClaudeProvider(timeout_s=timeout_s),
    "gemini": lambda timeout_s: GeminiProvider(timeout_s=timeout_s),
}


def get_provider_adapter(provider: ProviderName, timeout_s: float = 30.0) -> ProviderAdapter:
    factory = _ADAPTERS.get(provider)
    if factory is None:
        raise ValueError(f"Unsupported AI provider '{provider}'")
    return factory(timeout_s)


def analyze_with_provider(config: ProviderConfig, prompt: str, timeout_s: float = 30.0) -> str:
    return get_provider_adapter(config.provider, timeout_s=timeout_s).analyze(config, prompt)
