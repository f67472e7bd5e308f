import os
from dataclasses import dataclass

from app.ai.types import PROVIDER_ORDER, NoProviderConfigured, ProviderConfig, ProviderName

DEFAULT_MODELS: dict[ProviderName, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
    "gemini": "gemini-2.0-flash-lite",
}

# Values shipped in .env.example; a key equal to one of these was never filled in.
DOCUMENTED_PLACEHOLDERS: dict[ProviderName, str] = {
    "openai": "your_openai_api_key_here",
    "anthropic": "your_anthropic_api_key_here",
    "gemini": "your_google_api_key_here",
}


@dataclass(frozen=True)
class ProviderCredential:
    api_key: str | None = None
    model: str | None = None


@dataclass(frozen=True)
class AnalyzerCredentials:
    openai: ProviderCredential = ProviderCredential()
    anthropic: ProviderCredential = ProviderCredential()
    gemini: ProviderCredential = ProviderCredential()

    def for_provider(self, provider: ProviderName) -> ProviderCredential:
        return getattr(self, provider)


def _looks_like_placeholder(provider: ProviderName, value: str) -> bool:
    return value.strip().lower() == DOCUMENTED_PLACEHOLDERS[provider]


def _credential_from_env(
    provider: ProviderName, key_names: tuple[str, ...], model_name: str
) -> ProviderCredential:
    # First usable key wins; a leftover placeholder in one variable must not hide a real key in another.
    values = [(os.getenv(name) or "").strip() for name in key_names]
    present = [value for value in values if value]
    usable = [value for value in present if not _looks_like_placeholder(provider, value)]
    api_key = (usable or present or [None])[0]
    model = (os.getenv(model_name) or "").strip() or None
    return ProviderCredential(api_key=api_key, model=model)


def load_analyzer_credentials() -> AnalyzerCredentials:
    return AnalyzerCredentials(
        openai=_credential_from_env("openai", ("OPENAI_API_KEY",), "OPENAI_MODEL"),
        anthropic=_credential_from_env("anthropic", ("ANTHROPIC_API_KEY",), "ANTHROPIC_MODEL"),
        gemini=_credential_from_env("gemini", ("GOOGLE_API_KEY", "GEMINI_API_KEY"), "GEMINI_MODEL"),
    )


def select_provider(credentials: AnalyzerCredentials) -> ProviderConfig:
    for provider in PROVIDER_ORDER:
        credential = credentials.for_provider(provider)
        api_key = (credential.api_key or "").strip()
        if not api_key or _looks_like_placeholder(provider, api_key):
            continue
        return ProviderConfig(
            provider=provider,
            api_key=api_key,
            model=(credential.model or DEFAULT_MODELS[provider]).strip(),
        )

    raise NoProviderConfigured(
        "No AI API key configured. Set OPENAI_API_KEY, ANTHROPIC_API_KEY or GOOGLE_API_KEY."
    )


def is_ai_configured(credentials: AnalyzerCredentials) -> bool:
    try:
        select_provider(credentials)
    except NoProviderConfigured:
        return False
    return True
