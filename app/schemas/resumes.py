from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.feedback import FallbackReason, FeedbackSource, ScoreBand


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    resume_text: str = Field(min_length=1)
    job_title: str = ""
    job_description: str = ""


class ResumeAnalysisResponse(BaseModel):
    id: str
    status: str
    source: FeedbackSource
    fallback_reason: FallbackReason
    feedback: dict[str, Any]
    bands: dict[str, ScoreBand] = Field(default_factory=dict)
    status_history: list[str] = Field(default_factory=list)


class ResumeRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    company_name: str = Field(default="", alias="companyName")
    job_title: str = Field(default="", alias="jobTitle")
    job_description: str = Field(default="", alias="jobDescription")
    filename: str = ""
    status: str = ""
    source: FeedbackSource | None = None
    fallback_reason: FallbackReason | None = Field(default=None, alias="fallbackReason")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    feedback: dict[str, Any] | None = None


class AnalyzerStatusResponse(BaseModel):
    ai_configured: bool
    provider: str | None = None
    model: str | None = None
