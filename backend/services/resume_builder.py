"""Resume builder AI helpers: polish, tailor to a JD, rewrite bullets."""

from typing import Any

from config import settings
from models.schemas.resume_envelopes import BulletsEnvelope, ResumeEnvelope
from services import prompt_builder
from services.generation_gateway import GenerationGateway
from services.structured_generation import generate_structured


async def build_resume(
    gateway: GenerationGateway, resume: dict[str, Any], template: str = ""
) -> dict[str, Any]:
    prompt = prompt_builder.build_resume_build_prompt(resume, template)
    result = await generate_structured(
        gateway, prompt, ResumeEnvelope, settings.structured_models()
    )
    return result.require().resume


async def tailor_resume(
    gateway: GenerationGateway,
    resume: dict[str, Any],
    job_description: str,
    template: str = "",
    target_role: str = "",
) -> dict[str, Any]:
    prompt = prompt_builder.build_tailor_prompt(resume, job_description, template, target_role)
    result = await generate_structured(
        gateway, prompt, ResumeEnvelope, settings.structured_models()
    )
    return result.require().resume


async def rewrite_bullets(
    gateway: GenerationGateway,
    section: str,
    item: dict[str, Any],
    target_role: str = "",
    job_description: str = "",
) -> list[str]:
    prompt = prompt_builder.build_rewrite_bullets_prompt(
        section, item, target_role, job_description
    )
    result = await generate_structured(
        gateway, prompt, BulletsEnvelope, settings.structured_models()
    )
    return [b.strip() for b in result.require().bullets if b.strip()]
