"""Deterministic ATS scoring of a resume against a job description.

No model, no I/O, no shared state: the same inputs always produce the same
:class:`ScoreBreakdown`. The result is served on its own when the AI call
fails and is also embedded in the AI prompt.

Matching is deliberately literal. A JD keyword counts as present when the
normalized resume contains it as a substring, so "node" matches
"node.js" and "rest" matches "restful".
"""

import math
import re

from models.responses import EngineReport, FormatStats, ScoreBreakdown

HARD_SKILL_HINTS: tuple[str, ...] = (
    "kubernetes", "docker", "terraform", "ansible", "aws", "gcp", "azure",
    "linux", "git", "github", "gitlab", "jenkins", "cicd", "ci/cd",
    "microservices", "rest", "api", "sql", "mongodb", "redis", "python",
    "java", "javascript", "node", "express", "react", "typescript",
    "postgres", "mysql", "prometheus", "grafana", "splunk", "elk", "nginx",
    "kafka", "spark", "ml", "ai", "genai", "llm",
)

SOFT_SKILL_HINTS: tuple[str, ...] = (
    "communication", "collaboration", "teamwork", "leadership", "ownership",
    "problem solving", "stakeholder", "agile", "scrum", "kanban",
    "prioritize", "initiative", "mentoring",
)

ACTION_VERBS: tuple[str, ...] = (
    "built", "developed", "designed", "implemented", "delivered", "optimized",
    "improved", "automated", "migrated", "deployed", "led", "owned",
    "created", "integrated", "reduced", "increased", "enhanced", "monitored",
    "debugged", "shipped", "architected",
)

JD_STOPWORDS: frozenset[str] = frozenset({
    "and", "or", "the", "with", "for", "to", "in", "of", "a", "an", "on",
    "as", "is", "are", "be", "you", "we", "our", "your", "this", "that",
    "will", "should", "must", "experience", "knowledge", "skills", "ability",
    "understanding", "years", "year", "role", "responsibilities",
    "requirements", "preferred", "strong", "good",
})

CORE_HEADINGS = ("experience", "education", "skills")
TABLE_MARKERS = ("|", "│", "—|", "|—")

MAX_JD_KEYWORDS = 280
MAX_KEYWORD_LIST = 50
MAX_FINDINGS = 18
MIN_TOKEN_LEN = 3
MAX_TOKEN_LEN = 24
SHORT_RESUME_CHARS = 3500
LONG_RESUME_CHARS = 9000
DEFAULT_RATIO_SCORE = 60.0

# Composite weights
W_KEYWORD = 0.32
W_HARD = 0.24
W_SOFT = 0.12
W_IMPACT = 0.18
W_FORMAT = 0.14

_WHITESPACE_RE = re.compile(r"\s+")
_NON_TOKEN_RE = re.compile(r"[^a-z0-9+\-#/.\s]")
_BULLET_RE = re.compile(r"(?:^|\n)[ \t]*[-•][ \t]+")
# Numbers followed by %, an x multiplier or a k/m/b scale marker, or preceded by a currency sign
_METRIC_RE = re.compile(
    r"(?<![\w.])\d+(?:[.,]\d+)*\s?(?:%|[xX]\b|[kKmMbB]\b)"
    r"|[₹$€£]\s?\d+(?:[.,]\d+)*"
)
_EMAIL_RE = re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE)
_PHONE_RE = re.compile(r"\b(?:\+?\d{1,3}[\s-]?)?\d{10}\b")
_LINKEDIN_RE = re.compile(r"linkedin\.com", re.IGNORECASE)
_GITHUB_RE = re.compile(r"github\.com", re.IGNORECASE)


def normalize(text: str) -> str:
    """Lowercase, collapse whitespace, trim."""
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def tokenize(text: str) -> list[str]:
    """Split on anything that is not alphanumeric or one of ``+ - # / .``."""
    return _NON_TOKEN_RE.sub(" ", normalize(text)).split()


def _unique(items) -> list[str]:
    return list(dict.fromkeys(items))


def _clamp(value: float) -> int:
    # Half-up rounding, so 66.5 scores 67
    return max(0, min(100, math.floor(value + 0.5)))


def _ratio_score(found: int, total: int) -> float:
    if total == 0:
        return DEFAULT_RATIO_SCORE
    return found / total * 100


def extract_jd_keywords(job_description: str) -> list[str]:
    """Vocabulary hits plus free tokens from the JD, deduplicated and capped."""
    jd = normalize(job_description)
    hard = [k for k in HARD_SKILL_HINTS if k in jd]
    soft = [k for k in SOFT_SKILL_HINTS if k in jd]
    tokens = [
        t for t in tokenize(job_description)
        if MIN_TOKEN_LEN <= len(t) <= MAX_TOKEN_LEN
    ]
    combined = (normalize(k) for k in _unique(hard + soft + tokens))
    return _unique(k for k in combined if k and k not in JD_STOPWORDS)[:MAX_JD_KEYWORDS]


def _format_stats(resume_raw: str, resume: str) -> FormatStats:
    length = len(resume_raw)
    if length < SHORT_RESUME_CHARS:
        page_hint = "short"
    elif length > LONG_RESUME_CHARS:
        page_hint = "long"
    else:
        page_hint = "ok"

    return FormatStats(
        bullets_count=len(_BULLET_RE.findall(resume_raw)),
        metrics_count=len(_METRIC_RE.findall(resume_raw)),
        action_verb_signals=sum(1 for v in ACTION_VERBS if v in resume),
        email_detected=bool(_EMAIL_RE.search(resume_raw)),
        phone_detected=bool(_PHONE_RE.search(re.sub(r"[()]", "", resume_raw))),
        linkedin_detected=bool(_LINKEDIN_RE.search(resume_raw)),
        github_detected=bool(_GITHUB_RE.search(resume_raw)),
        has_core_headings=all(h in resume for h in CORE_HEADINGS),
        suspicious_table_signals=any(m in resume_raw for m in TABLE_MARKERS),
        page_hint=page_hint,
    )


def _findings(stats: FormatStats) -> tuple[list[str], list[str]]:
    issues: list[str] = []
    wins: list[str] = []

    if stats.suspicious_table_signals:
        issues.append("Table/column formatting signals detected; ATS parsing may break.")
    else:
        wins.append("No obvious table separators detected (ATS friendly).")

    if stats.has_core_headings:
        wins.append("Core headings detected (Skills/Experience/Education).")
    else:
        issues.append(
            "Core headings missing or weak; add clear Skills, Experience, Education headings."
        )

    if stats.bullets_count >= 10:
        wins.append("Good bullet density; easy for recruiters to scan.")
    elif stats.bullets_count >= 5:
        wins.append("Some bullet points detected; can increase for impact.")
    else:
        issues.append("Low bullet usage; convert Experience/Projects into bullets.")

    if stats.metrics_count >= 5:
        wins.append("Strong quantified impact (numbers/%, scale) detected.")
    elif stats.metrics_count >= 2:
        wins.append("Some metrics detected; add more quantified outcomes.")
    else:
        issues.append(
            "Low measurable impact; add numbers: %, time saved, users, scale, revenue."
        )

    if stats.action_verb_signals >= 8:
        wins.append("Strong action verbs coverage (good framing).")
    else:
        issues.append("Action verbs weak; use built/implemented/optimized/led with outcomes.")

    if not stats.email_detected:
        issues.append("Email not detected; ensure contact section is parseable.")
    if not stats.phone_detected:
        issues.append("Phone not detected; add a clear phone line.")
    if not stats.linkedin_detected:
        issues.append("LinkedIn not detected; add your profile URL.")

    if stats.page_hint == "short":
        issues.append("Resume looks short; add projects, outcomes and skills detail.")
    elif stats.page_hint == "long":
        issues.append("Resume looks long; trim older or less relevant content.")

    return issues, wins


def _format_score(stats: FormatStats) -> int:
    penalty = 0
    if stats.suspicious_table_signals:
        penalty += 25
    if not stats.has_core_headings:
        penalty += 18
    if not stats.email_detected:
        penalty += 10
    if not stats.phone_detected:
        penalty += 8
    if stats.page_hint == "long":
        penalty += 10
    elif stats.page_hint == "short":
        penalty += 8
    return _clamp(100 - penalty)


def score(resume_text: str, job_description: str) -> ScoreBreakdown:
    resume = normalize(resume_text)
    jd = normalize(job_description)

    jd_keywords = extract_jd_keywords(job_description)
    present = [k for k in jd_keywords if k in resume]
    missing = [k for k in jd_keywords if k not in resume]
    keyword_score = _ratio_score(len(present), len(jd_keywords))

    jd_hard = [k for k in HARD_SKILL_HINTS if k in jd]
    jd_soft = [k for k in SOFT_SKILL_HINTS if k in jd]
    hard_skill_score = _ratio_score(sum(1 for k in jd_hard if k in resume), len(jd_hard))
    soft_skill_score = _ratio_score(sum(1 for k in jd_soft if k in resume), len(jd_soft))

    stats = _format_stats(resume_text, resume)
    impact_score = _clamp(
        min(stats.metrics_count, 10) / 10 * 55
        + min(stats.action_verb_signals, 12) / 12 * 45
    )
    format_score = _format_score(stats)

    role_fit_score = _clamp(
        0.55 * keyword_score + 0.25 * hard_skill_score + 0.20 * soft_skill_score
    )
    composite_score = _clamp(
        W_KEYWORD * keyword_score
        + W_HARD * hard_skill_score
        + W_SOFT * soft_skill_score
        + W_IMPACT * impact_score
        + W_FORMAT * format_score
    )

    issues, wins = _findings(stats)

    return ScoreBreakdown(
        keyword_score=_clamp(keyword_score),
        hard_skill_score=_clamp(hard_skill_score),
        soft_skill_score=_clamp(soft_skill_score),
        impact_score=impact_score,
        format_score=format_score,
        composite_score=composite_score,
        role_fit_score=role_fit_score,
        keyword_total=len(jd_keywords),
        present_keywords=tuple(present[:MAX_KEYWORD_LIST]),
        missing_keywords=tuple(missing[:MAX_KEYWORD_LIST]),
        issues=tuple(issues[:MAX_FINDINGS]),
        wins=tuple(wins[:MAX_FINDINGS]),
        stats=stats,
    )


def engine_report(breakdown: ScoreBreakdown) -> EngineReport:
    """Dashboard view of a breakdown: overall score plus category tiles."""
    stats = breakdown.stats
    return EngineReport(
        overall_score=breakdown.composite_score,
        category_scores={
            "ats_compatibility": breakdown.format_score,
            "keyword_match": breakdown.keyword_score,
            "experience_alignment": breakdown.hard_skill_score,
            "impact_metrics": breakdown.impact_score,
            "readability": _clamp(
                55
                + min(stats.bullets_count, 20) * 2
                + min(stats.action_verb_signals, 12) * 2
            ),
            "structure": _clamp(
                60
                + min(stats.bullets_count, 18) * 2
                + min(stats.metrics_count, 10) * 2
            ),
        },
        critical_missing=list(breakdown.missing_keywords[:12]),
        breakdown=breakdown,
    )
