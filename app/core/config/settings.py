from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv()

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def _env(name: str, default: T, parse: Callable[[str], T]) -> T:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        return default


def _env_str(name: str, default: str | None = None) -> str | None:
    return _env(name, default, str)


def _env_flag(name: str, default: bool) -> bool:
    return _env(name, default, lambda raw: raw.lower() in _TRUE_VALUES)


def _env_csv(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    items = tuple(item.strip() for item in (os.getenv(name) or "").split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    resume_store_db_path: str
    provider_timeout_s: float
    min_ocr_text_chars: int
    max_upload_bytes: int


settings = Settings(
    api_key=_env_str("API_KEY"),
    rate_limit=_env_str("RATE_LIMIT", "20/minute"),
    rate_limit_enabled=_env_flag("RATE_LIMIT_ENABLED", True),
    log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    sentry_dsn=_env_str("SENTRY_DSN"),
    cors_allowed_origins=_env_csv(
        "CORS_ALLOWED_ORIGINS",
        ("http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:3000"),
    ),
    cors_allow_origin_regex=_env_str("CORS_ALLOW_ORIGIN_REGEX"),
    resume_store_db_path=_env_str("RESUME_STORE_DB_PATH", "data/resumes.db"),
    provider_timeout_s=_env("PROVIDER_TIMEOUT_S", 30.0, float),
    min_ocr_text_chars=_env("MIN_OCR_TEXT_CHARS", 50, int),
    max_upload_bytes=_env("MAX_UPLOAD_BYTES", 10 * 1024 * 1024, int),
)

if settings.provider_timeout_s <= 0:
    raise RuntimeError("PROVIDER_TIMEOUT_S must be a positive number of seconds.")
