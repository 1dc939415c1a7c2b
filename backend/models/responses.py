from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from models.schemas.ats_sections import AtsSections


class FormatStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    bullets_count: int = 0
    metrics_count: int = 0
    action_verb_signals: int = 0
    email_detected: bool = False
    phone_detected: bool = False
    linkedin_detected: bool = False
    github_detected: bool = False
    has_core_headings: bool = False
    suspicious_table_signals: bool = False
    page_hint: Literal["short", "ok", "long"] = "ok"


class ScoreBreakdown(BaseModel):
    """Deterministic resume-vs-JD score. All scores are ints in [0, 100]."""

    model_config = ConfigDict(frozen=True)

    keyword_score: int = 0
    hard_skill_score: int = 0
    soft_skill_score: int = 0
    impact_score: int = 0
    format_score: int = 0
    composite_score: int = 0
    role_fit_score: int = 0

    keyword_total: int = 0
    present_keywords: tuple[str, ...] = ()
    missing_keywords: tuple[str, ...] = ()

    issues: tuple[str, ...] = ()
    wins: tuple[str, ...] = ()
    stats: FormatStats = FormatStats()


class EngineReport(BaseModel):
    """Scoring engine output shaped for the dashboard."""

    overall_score: int = 0
    category_scores: dict[str, int] = {}
    critical_missing: list[str] = []
    breakdown: ScoreBreakdown = ScoreBreakdown()


class CredentialStatus(BaseModel):
    blocked: bool = False
    cooling: bool = False
    cooldown_until: datetime | None = None
    last_error: str | None = None
    last_status: int | None = None


class GenerationStatus(BaseModel):
    last_status: int | None = None
    last_error: str | None = None
    model: str | None = None


class AtsAnalysisResponse(BaseModel):
    engine: EngineReport
    sections: AtsSections | None = None
    warning: str | None = None
    degraded: bool = False
    generation: GenerationStatus = GenerationStatus()
    key_status: list[CredentialStatus] = []


class JobSuggestion(BaseModel):
    title: str
    level: str
    summary: str
    ideal_companies: list[str] = []
    key_skills: list[str] = []


class JobSuggestionsResponse(BaseModel):
    ok: bool = True
    jobs: list[JobSuggestion] = []
    key_status: list[CredentialStatus] = []


class ResumeResponse(BaseModel):
    ok: bool = True
    resume: dict[str, Any]


class BulletsResponse(BaseModel):
    ok: bool = True
    bullets: list[str]


class ChatResponse(BaseModel):
    reply: str


class PingResponse(BaseModel):
    ok: bool = True
    key_count: int = 0
    keys: list[CredentialStatus] = []


class HealthResponse(BaseModel):
    status: str = "ok"
    gemini_configured: bool = False
