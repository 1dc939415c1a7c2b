"""Job role suggestions for students."""

import logging
from typing import Any

from rapidfuzz import fuzz

from config import settings
from models.responses import JobSuggestion
from models.schemas.job_suggestions import JobSuggestionsPayload
from services import prompt_builder
from services.generation_gateway import GenerationGateway
from services.profile_store import ProfileStore
from services.structured_generation import generate_structured

logger = logging.getLogger(__name__)

MAX_JOBS = 10
MAX_COMPANIES = 8
MAX_SKILLS = 18
# Titles at or above this token-sort ratio are treated as the same role
DUPLICATE_TITLE_THRESHOLD = 90


def _clean_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _clean_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (_clean_str(v) for v in value) if s]


def _is_duplicate_title(title: str, kept: list[JobSuggestion]) -> bool:
    return any(
        fuzz.token_sort_ratio(title.lower(), job.title.lower()) >= DUPLICATE_TITLE_THRESHOLD
        for job in kept
    )


def normalize_job_suggestions(raw_jobs: list[dict[str, Any]]) -> list[JobSuggestion]:
    """Trim fields, drop incomplete or near-duplicate roles, cap list sizes."""
    jobs: list[JobSuggestion] = []
    for raw in raw_jobs:
        if not isinstance(raw, dict):
            continue
        title = _clean_str(raw.get("title"))
        level = _clean_str(raw.get("level"))
        summary = _clean_str(raw.get("summary"))
        if not (title and level and summary):
            continue
        if _is_duplicate_title(title, jobs):
            continue
        jobs.append(
            JobSuggestion(
                title=title,
                level=level,
                summary=summary,
                ideal_companies=_clean_list(raw.get("ideal_companies"))[:MAX_COMPANIES],
                key_skills=_clean_list(raw.get("key_skills"))[:MAX_SKILLS],
            )
        )
        if len(jobs) >= MAX_JOBS:
            break
    return jobs


async def suggest_jobs(
    gateway: GenerationGateway,
    current_profile: str,
    interests: str,
    location_pref: str = "",
    uid: str | None = None,
    profile_store: ProfileStore | None = None,
) -> list[JobSuggestion]:
    student_context = ""
    if uid and profile_store is not None:
        student = await profile_store.get_student(uid)
        student_context = prompt_builder.build_student_context(student)

    prompt = prompt_builder.build_job_suggestions_prompt(
        current_profile, interests, location_pref, student_context
    )
    result = await generate_structured(
        gateway, prompt, JobSuggestionsPayload, settings.structured_models()
    )
    payload = result.require()

    jobs = normalize_job_suggestions(payload.jobs)
    logger.info("Suggested %d roles (%d raw)", len(jobs), len(payload.jobs))
    return jobs
