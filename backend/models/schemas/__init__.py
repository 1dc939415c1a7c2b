"""Pydantic contracts for structured model output."""

from models.schemas.ats_sections import AtsSections
from models.schemas.job_suggestions import JobSuggestionsPayload
from models.schemas.resume_envelopes import BulletsEnvelope, ResumeEnvelope

__all__ = [
    "AtsSections",
    "JobSuggestionsPayload",
    "ResumeEnvelope",
    "BulletsEnvelope",
]
