"""CS.ai chat assistant: plain-text answers over the chat model list."""

import logging
from typing import Any

from config import settings
from services import prompt_builder
from services.error_classifier import ErrorKind
from services.generation_gateway import GenerationFailure, GenerationGateway
from services.structured_generation import AIRequestError

logger = logging.getLogger(__name__)


async def reply(
    gateway: GenerationGateway,
    message: str,
    audio_meta: dict[str, Any] | None = None,
) -> str:
    prompt = prompt_builder.build_chat_prompt(message, audio_meta)
    outcome = await gateway.generate(prompt, settings.chat_model_list())

    if isinstance(outcome, GenerationFailure):
        if outcome.kind is ErrorKind.UNCONFIGURED:
            raise AIRequestError(
                "CS.ai not configured (missing Gemini API key).", status_code=503
            )
        logger.error("CS.ai generation failed: %s", outcome.message)
        raise AIRequestError("Something went wrong talking to CS.ai.", status_code=502)
    return outcome.text
