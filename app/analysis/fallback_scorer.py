from __future__ import annotations

import re
from dataclasses import dataclass

from app.core.config.scoring import get_scoring_int
from app.schemas.feedback import Feedback, TipType

_EMAIL_RE = re.compile(r"email|@")
_PHONE_RE = re.compile(r"phone|tel|\d{3}[-.]?\d{3}[-.]?\d{4}")
_EXPERIENCE_RE = re.compile(r"experience|work|employment|position")
_EDUCATION_RE = re.compile(r"education|degree|university|college")
_SKILLS_RE = re.compile(r"skills|proficient|expertise")


@dataclass(frozen=True)
class ResumeSignals:
    has_email: bool
    has_phone: bool
    has_experience: bool
    has_education: bool
    has_skills: bool
    word_count: int

    def count(self) -> int:
        return sum(
            (self.has_email, self.has_phone, self.has_experience, self.has_education, self.has_skills)
        )


def detect_signals(resume_text: str) -> ResumeSignals:
    text = resume_text.lower()
    return ResumeSignals(
        has_email=bool(_EMAIL_RE.search(text)),
        has_phone=bool(_PHONE_RE.search(text)),
        has_experience=bool(_EXPERIENCE_RE.search(text)),
        has_education=bool(_EDUCATION_RE.search(text)),
        has_skills=bool(_SKILLS_RE.search(text)),
        word_count=len(resume_text.split()),
    )


def _tag(ok: bool) -> TipType:
    return "good" if ok else "improve"


def _tip(ok: bool, good: str, improve: str) -> dict[str, str]:
    return {"type": _tag(ok), "tip": good if ok else improve}


def _detailed_tip(ok: bool, good: tuple[str, str], improve: tuple[str, str]) -> dict[str, str]:
    tip, explanation = good if ok else improve
    return {"type": _tag(ok), "tip": tip, "explanation": explanation}


def _fixed_tip(tip_type: TipType, tip: str, explanation: str) -> dict[str, str]:
    return {"type": tip_type, "tip": tip, "explanation": explanation}


def generate_fallback_feedback(resume_text: str, job_title: str, job_description: str) -> Feedback:
    """Approximate Feedback from keyword signals; no network, same input gives same output.

    ``job_description`` is accepted for parity with the AI path; the heuristics only
    look at the resume itself and the job title.
    """
    signals = detect_signals(resume_text)

    ats_score = min(100, get_scoring_int("fallback.ats.points_per_signal", 20) * signals.count())
    target_words = max(1, get_scoring_int("fallback.content.target_word_count", 300))
    content_score = min(100, (signals.word_count * 100) // target_words)
    complete_structure = signals.has_experience and signals.has_education and signals.has_skills
    structure_score = (
        get_scoring_int("fallback.structure.complete_score", 85)
        if complete_structure
        else get_scoring_int("fallback.structure.partial_score", 65)
    )
    skills_score = (
        get_scoring_int("fallback.skills.present_score", 80)
        if signals.has_skills
        else get_scoring_int("fallback.skills.missing_score", 50)
    )
    tone_score = get_scoring_int("fallback.tone_and_style.score", 75)
    good_length = signals.word_count > get_scoring_int("fallback.content.good_length_word_count", 200)
    role = job_title.strip() or "the target role"

    payload = {
        "overallScore": (ats_score + content_score + structure_score) // 3,
        "ATS": {
            "score": ats_score,
            "tips": [
                _tip(signals.has_email, "Contact information present", "Add email address"),
                _tip(signals.has_phone, "Phone number included", "Include phone number"),
                _tip(signals.has_skills, "Skills section found", "Add a skills section"),
            ],
        },
        "toneAndStyle": {
            "score": tone_score,
            "tips": [
                _fixed_tip("good", "Professional format", "Resume follows standard formatting"),
                _fixed_tip("improve", "Use action verbs", "Start bullet points with strong action verbs"),
                _fixed_tip("improve", "Quantify achievements", "Add numbers and metrics to showcase impact"),
            ],
        },
        "content": {
            "score": content_score,
            "tips": [
                _detailed_tip(
                    good_length,
                    ("Good content length", "Resume has sufficient content"),
                    ("Add more detail", "Expand on your experiences and achievements"),
                ),
                _fixed_tip("improve", "Tailor to job", f"Align content with {role} requirements"),
                _detailed_tip(
                    signals.has_experience,
                    ("Experience section present", "Work history is included"),
                    ("Add work experience", "Include relevant work experience"),
                ),
            ],
        },
        "structure": {
            "score": structure_score,
            "tips": [
                _detailed_tip(
                    signals.has_education,
                    ("Education included", "Educational background present"),
                    ("Add education section", "Include your education credentials"),
                ),
                _fixed_tip("improve", "Clear sections", "Use clear headers for each section"),
                _detailed_tip(
                    complete_structure,
                    ("Organized layout", "Experience, education and skills are all covered"),
                    ("Complete the core sections", "Cover experience, education and skills in separate sections"),
                ),
            ],
        },
        "skills": {
            "score": skills_score,
            "tips": [
                _detailed_tip(
                    signals.has_skills,
                    ("Skills listed", "Technical skills are present"),
                    ("Add skills section", "List relevant technical and soft skills"),
                ),
                _fixed_tip("improve", "Match job requirements", f"Include skills relevant to {role}"),
                _fixed_tip("improve", "Categorize skills", "Group skills by category (technical, soft skills, tools)"),
            ],
        },
    }
    return Feedback.model_validate(payload)
