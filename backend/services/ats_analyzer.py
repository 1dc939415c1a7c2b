"""ATS analyzer: deterministic engine first, AI sections when available.

Pipeline:
1. Score resume vs JD with the lexical engine (always succeeds)
2. Build the AI prompt around the engine's missing keywords
3. Call Gemini through the gateway and extract the JSON sections
4. Return the engine plus sections, or the engine plus a warning
"""

import logging

from config import settings
from models.responses import AtsAnalysisResponse, GenerationStatus
from models.schemas.ats_sections import AtsSections
from services import prompt_builder, scoring_engine
from services.generation_gateway import GenerationGateway
from services.structured_generation import generate_structured

logger = logging.getLogger(__name__)


async def analyze(
    resume_text: str,
    job_description: str,
    gateway: GenerationGateway,
) -> AtsAnalysisResponse:
    breakdown = scoring_engine.score(
        resume_text[: settings.max_resume_chars],
        job_description[: settings.max_job_description_chars],
    )
    engine = scoring_engine.engine_report(breakdown)

    prompt = prompt_builder.build_ats_prompt(
        resume_text[: settings.max_prompt_resume_chars],
        job_description[: settings.max_prompt_job_description_chars],
        breakdown,
    )
    result = await generate_structured(
        gateway, prompt, AtsSections, settings.structured_models()
    )

    sections = result.value
    if sections is not None and not sections.percent:
        sections = sections.model_copy(update={"percent": f"{engine.overall_score}%"})
    if sections is None:
        logger.warning("ATS AI sections unavailable: %s", result.reason)

    return AtsAnalysisResponse(
        engine=engine,
        sections=sections,
        warning=result.warning,
        degraded=sections is None,
        generation=GenerationStatus(
            last_status=result.last_status,
            last_error=result.last_error,
            model=result.model,
        ),
        key_status=gateway.pool.snapshot(),
    )
