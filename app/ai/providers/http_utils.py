from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import httpx

from app.ai.types import ProviderHttpError

UNKNOWN_ERROR = "Unknown error"


def error_message_from_body(body: Any) -> str:
    """Best-effort read of ``error.message`` from a provider error envelope."""
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
        elif isinstance(error, str) and error.strip():
            return error.strip()
    return UNKNOWN_ERROR


def error_message_from_response(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return UNKNOWN_ERROR
    return error_message_from_body(body)


@contextmanager
def http_client(client: httpx.Client | None, timeout_s: float) -> Iterator[httpx.Client]:
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=timeout_s) as owned:
        yield owned


def post_json(
    *,
    provider: str,
    client: httpx.Client | None,
    timeout_s: float,
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> tuple[int, Any]:
    """Send one POST and return ``(status, json_body)`` for a success response."""
    try:
        with http_client(client, timeout_s) as session:
            response = session.post(url, json=payload, headers=headers, timeout=timeout_s)
    except httpx.TimeoutException as exc:
        raise ProviderHttpError("timeout", f"Request timed out after {timeout_s:g}s", provider=provider) from exc
    except httpx.HTTPError as exc:
        raise ProviderHttpError("network", str(exc) or exc.__class__.__name__, provider=provider) from exc

    if not response.is_success:
        raise ProviderHttpError(
            response.status_code,
            error_message_from_response(response),
            provider=provider,
        )

    try:
        return response.status_code, response.json()
    except ValueError as exc:
        raise ProviderHttpError(response.status_code, "Response body is not JSON", provider=provider) from exc


def unexpected_envelope(provider: str, status: int | str) -> ProviderHttpError:
    return ProviderHttpError(status, "Unexpected response envelope", provider=provider)
