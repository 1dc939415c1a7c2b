from typing import Any

from pydantic import BaseModel, Field


class AtsAnalyzeRequest(BaseModel):
    resume_text: str = Field("", max_length=200_000, description="Plain text resume content")
    job_description: str = Field("", max_length=100_000, description="Job description text")
    resume_file_name: str | None = None


class JobSuggestRequest(BaseModel):
    current_profile: str = Field("", max_length=20_000)
    interests: str = Field("", max_length=5_000)
    location_pref: str = Field("", max_length=500)


class ResumeBuildRequest(BaseModel):
    resume: dict[str, Any] = {}
    template: str = ""


class ResumeTailorRequest(BaseModel):
    resume: dict[str, Any] = {}
    job_description: str = Field("", max_length=60_000)
    template: str = ""
    target_role: str = ""


class RewriteBulletsRequest(BaseModel):
    section: str = ""
    item: dict[str, Any] = {}
    target_role: str = ""
    job_description: str = Field("", max_length=60_000)


class AudioMeta(BaseModel):
    name: str | None = None
    size_kb: float | None = None


class ChatRequest(BaseModel):
    message: str = Field("", max_length=20_000)
    audio_meta: AudioMeta | None = None
