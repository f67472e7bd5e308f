from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TipType = Literal["good", "improve"]
ScoreBand = Literal["strong", "good_start", "needs_work"]
FeedbackSource = Literal["openai", "anthropic", "gemini", "fallback"]
FallbackReason = Literal["none", "insufficient_text", "no_provider", "provider_error", "unparsable_response"]

FEEDBACK_CATEGORIES: tuple[str, ...] = ("ATS", "toneAndStyle", "content", "structure", "skills")

SCORE_BAND_LABELS: dict[ScoreBand, str] = {
    "strong": "Strong",
    "good_start": "Good Start",
    "needs_work": "Needs Work",
}


def score_band(score: int) -> ScoreBand:
    if score > 70:
        return "strong"
    if score > 49:
        return "good_start"
    return "needs_work"


class _FeedbackModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class AtsTip(_FeedbackModel):
    type: TipType
    tip: str = Field(min_length=1)


class DetailedTip(_FeedbackModel):
    type: TipType
    tip: str = Field(min_length=1)
    explanation: str


class AtsCategory(_FeedbackModel):
    score: int = Field(ge=0, le=100)
    tips: list[AtsTip] = Field(min_length=3, max_length=4)


class DetailedCategory(_FeedbackModel):
    score: int = Field(ge=0, le=100)
    tips: list[DetailedTip] = Field(min_length=3, max_length=4)


class Feedback(_FeedbackModel):
    """Canonical analysis result; serialized with the camelCase wire names."""

    overall_score: int = Field(alias="overallScore", ge=0, le=100)
    ats: AtsCategory = Field(alias="ATS")
    tone_and_style: DetailedCategory = Field(alias="toneAndStyle")
    content: DetailedCategory
    structure: DetailedCategory
    skills: DetailedCategory

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def category_scores(self) -> dict[str, int]:
        return {
            "ATS": self.ats.score,
            "toneAndStyle": self.tone_and_style.score,
            "content": self.content.score,
            "structure": self.structure.score,
            "skills": self.skills.score,
        }

    def score_bands(self) -> dict[str, ScoreBand]:
        bands = {name: score_band(score) for name, score in self.category_scores().items()}
        bands["overallScore"] = score_band(self.overall_score)
        return bands
