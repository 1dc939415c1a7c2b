"""Expected AI output for the resume builder helpers."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ResumeEnvelope(BaseModel):
    ok: Literal[True]
    resume: dict[str, Any] = Field(min_length=1)


class BulletsEnvelope(BaseModel):
    ok: Literal[True]
    bullets: list[str] = Field(min_length=1)
