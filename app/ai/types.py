from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

ProviderName = Literal["openai", "anthropic", "gemini"]

# Priority order used when more than one credential is configured.
PROVIDER_ORDER: tuple[ProviderName, ...] = ("openai", "anthropic", "gemini")


@dataclass(frozen=True)
class ProviderConfig:
    provider: ProviderName
    api_key: str
    model: str

    def __repr__(self) -> str:
        return f"ProviderConfig(provider={self.provider!r}, model={self.model!r})"


class ProviderAdapter(Protocol):
    def analyze(self, config: ProviderConfig, prompt: str) -> str: ...


class AnalyzerError(RuntimeError):
    def __init__(self, message: str, *, code: str):
        super().__init__(message)
        self.code = code


class NoProviderConfigured(AnalyzerError):
    def __init__(self, message: str = "No AI API key configured."):
        super().__init__(message, code="no_provider")


class ProviderHttpError(AnalyzerError):
    def __init__(self, status: int | str, message: str, *, provider: str = "unknown"):
        super().__init__(f"{provider} API Error ({status}): {message}", code="provider_error")
        self.status = status
        self.message = message
        self.provider = provider


class UnparsableResponse(AnalyzerError):
    def __init__(self, snippet: str, reason: str = "response is not valid feedback JSON"):
        super().__init__(f"Unparsable AI response: {reason}", code="unparsable_response")
        self.snippet = snippet
        self.reason = reason


class InsufficientText(AnalyzerError):
    def __init__(self, length: int, minimum: int):
        super().__init__(
            f"Could not extract enough text from resume ({length} < {minimum} characters).",
            code="insufficient_text",
        )
        self.length = length
        self.minimum = minimum
