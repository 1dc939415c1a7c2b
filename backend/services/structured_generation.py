"""Gateway call + strict JSON extraction, with one message per failure mode."""

import logging
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel

from services.error_classifier import ErrorKind
from services.generation_gateway import (
    GenerationFailure,
    GenerationGateway,
    GenerationOutcome,
    GenerationSuccess,
)
from services.response_extractor import (
    ExtractionResult,
    NoCandidateFound,
    ParsedOk,
    ParseFailure,
    SchemaMismatch,
    extract_structured,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

UNCONFIGURED_MESSAGE = "No Gemini keys configured"
NO_CANDIDATE_MESSAGE = "AI returned no structured output"
NON_JSON_MESSAGE = "AI returned non-JSON output unexpectedly"
SCHEMA_MISMATCH_MESSAGE = "Bad AI JSON response"
FALLBACK_SUFFIX = "Returned deterministic engine only."


class AIRequestError(Exception):
    """An AI route could not produce a usable answer."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def describe_failure(failure: GenerationFailure) -> str:
    if failure.kind is ErrorKind.UNCONFIGURED:
        return UNCONFIGURED_MESSAGE
    suffix = f" (HTTP {failure.status_code})" if failure.status_code else ""
    return f"Gemini failed: {failure.message or 'Unknown error'}{suffix}"


@dataclass(frozen=True)
class StructuredGeneration(Generic[T]):
    outcome: GenerationOutcome
    extraction: ExtractionResult | None = None

    @property
    def ok(self) -> bool:
        return isinstance(self.extraction, ParsedOk)

    @property
    def value(self) -> T | None:
        if isinstance(self.extraction, ParsedOk):
            return self.extraction.value
        return None

    @property
    def reason(self) -> str | None:
        """Short description of why no payload is available, None on success."""
        if isinstance(self.outcome, GenerationFailure):
            return describe_failure(self.outcome)
        if isinstance(self.extraction, NoCandidateFound):
            return NO_CANDIDATE_MESSAGE
        if isinstance(self.extraction, ParseFailure):
            return NON_JSON_MESSAGE
        if isinstance(self.extraction, SchemaMismatch):
            return SCHEMA_MISMATCH_MESSAGE
        return None

    @property
    def warning(self) -> str | None:
        """User-facing note for routes that fall back to the deterministic engine."""
        if self.ok:
            return None
        if isinstance(self.outcome, GenerationFailure):
            if self.outcome.kind is ErrorKind.UNCONFIGURED:
                return f"{UNCONFIGURED_MESSAGE}. {FALLBACK_SUFFIX}"
            suffix = f" (HTTP {self.outcome.status_code})" if self.outcome.status_code else ""
            return f"AI partial mode: {self.outcome.message or 'Unknown error'}{suffix}"
        return f"{self.reason}. {FALLBACK_SUFFIX}"

    @property
    def last_status(self) -> int | None:
        if isinstance(self.outcome, GenerationFailure):
            return self.outcome.status_code
        return 200

    @property
    def last_error(self) -> str | None:
        if self.ok:
            return None
        if isinstance(self.outcome, GenerationFailure):
            return self.outcome.message
        return self.reason

    @property
    def model(self) -> str | None:
        if isinstance(self.outcome, GenerationSuccess):
            return self.outcome.model
        return None

    def require(self) -> T:
        """Return the payload or raise AIRequestError."""
        if isinstance(self.extraction, ParsedOk):
            return self.extraction.value
        if (
            isinstance(self.outcome, GenerationFailure)
            and self.outcome.kind is ErrorKind.UNCONFIGURED
        ):
            raise AIRequestError(UNCONFIGURED_MESSAGE, status_code=503)
        raise AIRequestError(self.reason or "AI request failed", status_code=502)


async def generate_structured(
    gateway: GenerationGateway,
    prompt: str,
    schema: type[T],
    model_priority: Sequence[str] | None = None,
) -> StructuredGeneration[T]:
    outcome = await gateway.generate(prompt, model_priority, json_mode=True)
    if isinstance(outcome, GenerationFailure):
        return StructuredGeneration(outcome=outcome)

    extraction = extract_structured(outcome.text, schema)
    if isinstance(extraction, SchemaMismatch):
        logger.warning(
            "%s from %s missing required fields: %s",
            schema.__name__,
            outcome.model,
            "; ".join(extraction.errors[:5]),
        )
    elif not isinstance(extraction, ParsedOk):
        logger.warning(
            "%s from %s: %s",
            schema.__name__,
            outcome.model,
            type(extraction).__name__,
        )
    return StructuredGeneration(outcome=outcome, extraction=extraction)
