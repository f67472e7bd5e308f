from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

from app.ai.config import AnalyzerCredentials, select_provider
from app.ai.factory import analyze_with_provider
from app.ai.types import AnalyzerError, InsufficientText, NoProviderConfigured, ProviderConfig
from app.analysis.fallback_scorer import generate_fallback_feedback
from app.analysis.normalize_feedback import normalize_feedback
from app.analysis.prompt import build_analysis_prompt
from app.schemas.feedback import FallbackReason, Feedback, FeedbackSource
from app.schemas.resumes import AnalysisRequest, ResumeRecord

logger = logging.getLogger(__name__)

RESUME_KEY_PREFIX = "resume:"

STATUS_EXTRACTING = "Extracting text from resume..."
STATUS_INSUFFICIENT_TEXT = "Could not read resume - analysis unavailable"
STATUS_ANALYZING = "Analyzing resume with AI..."
STATUS_NORMALIZING = "Processing AI feedback..."
STATUS_FALLBACK = "Using built-in analysis..."
STATUS_COMPLETED = "Analysis completed"

TextExtractor = Callable[[], str]
StatusCallback = Callable[[str], None]
ProviderCall = Callable[[ProviderConfig, str], str]


class KeyValueStore(Protocol):
    def set(self, key: str, value: str) -> None: ...


class PipelineStage(str, Enum):
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    NORMALIZING = "normalizing"
    PERSISTED = "persisted"
    SUCCEEDED = "succeeded"


@dataclass
class AnalysisOutcome:
    resume_id: str
    feedback: Feedback
    source: FeedbackSource
    fallback_reason: FallbackReason
    status: str
    stage: PipelineStage = PipelineStage.SUCCEEDED
    status_history: list[str] = field(default_factory=list)
    error_detail: str | None = None

    @property
    def key(self) -> str:
        return resume_key(self.resume_id)


def resume_key(resume_id: str) -> str:
    return f"{RESUME_KEY_PREFIX}{resume_id}"


class _RunStatus:
    def __init__(self, resume_id: str, on_status: Optional[StatusCallback]):
        self.resume_id = resume_id
        self.stage = PipelineStage.EXTRACTING
        self.history: list[str] = []
        self._on_status = on_status

    @property
    def current(self) -> str:
        return self.history[-1] if self.history else ""

    def emit(self, stage: PipelineStage, text: str) -> None:
        self.stage = stage
        self.history.append(text)
        logger.info("resume_analysis_status id=%s stage=%s status=%r", self.resume_id, stage.value, text)
        if self._on_status is not None:
            self._on_status(text)


class ResumeAnalysisPipeline:
    """Extract text, analyze it with one AI provider or the built-in scorer, persist the result.

    Provider, normalization and extraction failures never escape ``run``; they
    select the heuristic scorer instead. Persistence failures do propagate.
    """

    def __init__(
        self,
        credentials: AnalyzerCredentials,
        store: KeyValueStore,
        *,
        min_text_chars: int = 50,
        provider_timeout_s: float = 30.0,
        provider_call: Optional[ProviderCall] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self._credentials = credentials
        self._store = store
        self._min_text_chars = max(1, min_text_chars)
        self._provider_call = provider_call or (
            lambda config, prompt: analyze_with_provider(config, prompt, timeout_s=provider_timeout_s)
        )
        self._id_factory = id_factory

    def run(
        self,
        extract_text: TextExtractor,
        job_title: str,
        job_description: str,
        *,
        company_name: str = "",
        filename: str = "",
        on_status: Optional[StatusCallback] = None,
    ) -> AnalysisOutcome:
        resume_id = self._id_factory()
        run_status = _RunStatus(resume_id, on_status)
        run_status.emit(PipelineStage.EXTRACTING, STATUS_EXTRACTING)
        resume_text = self._extract(extract_text, resume_id)

        source: FeedbackSource = "fallback"
        error_detail: str | None = None
        feedback: Feedback | None = None

        if len(resume_text) < self._min_text_chars:
            insufficient = InsufficientText(len(resume_text), self._min_text_chars)
            logger.warning("resume_analysis_insufficient_text id=%s: %s", resume_id, insufficient)
            run_status.emit(PipelineStage.EXTRACTING, STATUS_INSUFFICIENT_TEXT)
            reason: FallbackReason = "insufficient_text"
            error_detail = str(insufficient)
        else:
            run_status.emit(PipelineStage.ANALYZING, STATUS_ANALYZING)
            request = AnalysisRequest(
                resume_text=resume_text,
                job_title=job_title,
                job_description=job_description,
            )
            feedback, source, reason, error_detail = self._analyze_with_ai(request, run_status)
            if feedback is None:
                run_status.emit(PipelineStage.ANALYZING, STATUS_FALLBACK)

        if feedback is None:
            feedback = generate_fallback_feedback(resume_text, job_title, job_description)

        # The short-text status stays visible as the final one.
        final_status = run_status.current if reason == "insufficient_text" else STATUS_COMPLETED

        record = ResumeRecord(
            id=resume_id,
            company_name=company_name,
            job_title=job_title,
            job_description=job_description,
            filename=filename,
            status=final_status,
            source=source,
            fallback_reason=reason,
            created_at=datetime.now(timezone.utc),
            feedback=feedback.to_wire(),
        )
        self._store.set(resume_key(resume_id), json.dumps(record.model_dump(mode="json", by_alias=True)))
        run_status.stage = PipelineStage.PERSISTED
        if final_status != run_status.current:
            run_status.emit(PipelineStage.SUCCEEDED, final_status)
        logger.info(
            "resume_analysis_succeeded id=%s source=%s fallback_reason=%s overall=%s",
            resume_id,
            source,
            reason,
            feedback.overall_score,
        )

        return AnalysisOutcome(
            resume_id=resume_id,
            feedback=feedback,
            source=source,
            fallback_reason=reason,
            status=run_status.current,
            status_history=list(run_status.history),
            error_detail=error_detail,
        )

    def _extract(self, extract_text: TextExtractor, resume_id: str) -> str:
        try:
            text = extract_text() or ""
        except Exception as exc:  # noqa: BLE001 - unreadable uploads are scored by the fallback
            logger.warning("resume_analysis_extraction_failed id=%s: %s", resume_id, exc)
            return ""
        logger.info("resume_analysis_extracted id=%s chars=%s", resume_id, len(text))
        return text

    def _analyze_with_ai(
        self, request: AnalysisRequest, run_status: _RunStatus
    ) -> tuple[Feedback | None, FeedbackSource, FallbackReason, str | None]:
        try:
            config = select_provider(self._credentials)
        except NoProviderConfigured:
            logger.info("resume_analysis_no_provider id=%s using fallback", run_status.resume_id)
            return None, "fallback", "no_provider", None

        logger.info("resume_analysis_provider id=%s provider=%s model=%s", run_status.resume_id, config.provider, config.model)
        prompt = build_analysis_prompt(request)
        try:
            raw = self._provider_call(config, prompt)
            run_status.emit(PipelineStage.NORMALIZING, STATUS_NORMALIZING)
            feedback = normalize_feedback(raw)
        except AnalyzerError as exc:
            logger.warning(
                "resume_analysis_ai_failed id=%s provider=%s code=%s: %s",
                run_status.resume_id,
                config.provider,
                exc.code,
                exc,
            )
            run_status.emit(PipelineStage.ANALYZING, f"AI analysis failed: {exc}. Using fallback...")
            reason: FallbackReason = "unparsable_response" if exc.code == "unparsable_response" else "provider_error"
            return None, "fallback", reason, str(exc)
        except Exception as exc:  # noqa: BLE001 - AI failure is never fatal to the run
            logger.exception("resume_analysis_ai_crashed id=%s provider=%s", run_status.resume_id, config.provider)
            run_status.emit(PipelineStage.ANALYZING, f"AI analysis failed: {exc}. Using fallback...")
            return None, "fallback", "provider_error", str(exc)

        return feedback, config.provider, "none", None
