from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from app.ai.types import UnparsableResponse
from app.schemas.feedback import Feedback

logger = logging.getLogger(__name__)

SNIPPET_CHARS = 200

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_JSON_SPAN_RE = re.compile(r"\{[\s\S]*\}")


def strip_code_fence(text: str) -> str:
    if not text.startswith("```"):
        return text
    return _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", text, count=1), count=1)


def extract_json_span(text: str) -> str | None:
    """Greedy first-``{`` to last-``}`` span; salvages replies wrapped in prose."""
    match = _JSON_SPAN_RE.search(text)
    return match.group(0) if match else None


def normalize_feedback(raw: str) -> Feedback:
    cleaned = (raw or "").strip()
    snippet = cleaned[:SNIPPET_CHARS]

    candidate = extract_json_span(strip_code_fence(cleaned))
    if candidate is None:
        raise UnparsableResponse(snippet, "no JSON object found")

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise UnparsableResponse(snippet, f"invalid JSON ({exc.msg})") from exc

    if not isinstance(payload, dict):
        raise UnparsableResponse(snippet, "top-level JSON value is not an object")

    try:
        feedback = Feedback.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        logger.debug("feedback_validation_failed fields=%s", fields)
        raise UnparsableResponse(snippet, f"feedback schema mismatch at {', '.join(fields[:5])}") from exc

    return feedback
