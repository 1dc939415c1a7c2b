"""Resilient "generate text for this prompt" across keys and models.

State machine per request:

    select key ──► attempt(model) ──► classify ──┬─► retry same model (overloaded, with backoff)
        ▲                                        ├─► next model (transient / unknown / empty text)
        └──────────── next key ◄─────────────────┴─► (fatal key / quota)

Bounded by pool size × model count × (1 + overload retries) calls. The
first non-empty text wins. Provider failures never escape ``generate``;
they come back as a :class:`GenerationFailure`.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Sequence

from services.credential_pool import CredentialPool, CredentialState
from services.error_classifier import ErrorKind, classify, describe_error
from services.gemini_client import TextProvider

logger = logging.getLogger(__name__)

OVERLOAD_BASE_DELAY = 0.45
OVERLOAD_RETRIES = 3


@dataclass(frozen=True)
class GenerationSuccess:
    text: str
    model: str

    ok = True


@dataclass(frozen=True)
class GenerationFailure:
    kind: ErrorKind
    status_code: int | None
    message: str

    ok = False


GenerationOutcome = GenerationSuccess | GenerationFailure


class _Step(Enum):
    RETRY_SAME_MODEL = "retry_same_model"
    NEXT_MODEL = "next_model"
    NEXT_CREDENTIAL = "next_credential"


class GenerationGateway:
    def __init__(
        self,
        pool: CredentialPool,
        provider: TextProvider,
        default_models: Sequence[str] = ("gemini-2.5-flash",),
        *,
        base_delay: float = OVERLOAD_BASE_DELAY,
        overload_retries: int = OVERLOAD_RETRIES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._pool = pool
        self._provider = provider
        self._default_models = tuple(default_models)
        self._base_delay = base_delay
        self._overload_retries = overload_retries
        self._sleep = sleep

    @property
    def pool(self) -> CredentialPool:
        return self._pool

    @property
    def configured(self) -> bool:
        return len(self._pool) > 0

    async def generate(
        self,
        prompt: str,
        model_priority: Sequence[str] | None = None,
        *,
        json_mode: bool = False,
    ) -> GenerationOutcome:
        if not self.configured:
            return GenerationFailure(
                ErrorKind.UNCONFIGURED, None, "No Gemini keys configured"
            )

        models = tuple(model_priority or self._default_models)
        if not models:
            raise ValueError("model_priority must name at least one model")

        last_failure: GenerationFailure | None = None
        for _ in range(len(self._pool)):
            entry = self._pool.select()
            if entry is None:
                break
            outcome = await self._try_credential(entry, prompt, models, json_mode)
            if isinstance(outcome, GenerationSuccess):
                return outcome
            last_failure = outcome

        if last_failure is None:
            last_failure = self._exhausted_failure()
        logger.warning(
            "Generation failed on every key/model: %s (HTTP %s)",
            last_failure.message,
            last_failure.status_code,
        )
        return last_failure

    async def _try_credential(
        self,
        entry: CredentialState,
        prompt: str,
        models: Sequence[str],
        json_mode: bool,
    ) -> GenerationOutcome:
        """Walk the model list with one key. Returns success or the last failure."""
        failure = GenerationFailure(ErrorKind.UNKNOWN, None, "No models to try")

        for model in models:
            attempt = 0
            while True:
                try:
                    text = await self._provider.generate_text(
                        entry.api_key, model, prompt, json_mode=json_mode
                    )
                except Exception as exc:
                    status_code, message = describe_error(exc)
                    kind = classify(status_code, message)
                    self._pool.report_outcome(entry, kind, status_code, message)
                    failure = GenerationFailure(kind, status_code, message)
                    self._log_failure(entry, model, failure)

                    step = self._next_step(kind, attempt)
                    if step is _Step.RETRY_SAME_MODEL:
                        attempt += 1
                        await self._sleep(self._base_delay * attempt * attempt)
                        continue
                    if step is _Step.NEXT_CREDENTIAL:
                        return failure
                    break

                text = (text or "").strip()
                if text:
                    self._pool.report_outcome(entry, None, 200, None)
                    logger.info("Responded using %s (%s)", model, entry.label)
                    return GenerationSuccess(text=text, model=model)

                failure = GenerationFailure(
                    ErrorKind.UNKNOWN, None, f"Empty response from {model}"
                )
                logger.warning("Empty response from %s (%s)", model, entry.label)
                break

        return failure

    def _next_step(self, kind: ErrorKind, attempt: int) -> _Step:
        if kind in (ErrorKind.FATAL_CREDENTIAL, ErrorKind.QUOTA_EXCEEDED):
            return _Step.NEXT_CREDENTIAL
        if kind is ErrorKind.OVERLOADED and attempt < self._overload_retries:
            return _Step.RETRY_SAME_MODEL
        return _Step.NEXT_MODEL

    def _exhausted_failure(self) -> GenerationFailure:
        """Failure for a request that found no eligible key before any call."""
        now = self._pool.now()
        cooling = [e for e in self._pool.entries if not e.blocked_forever and e.is_cooling(now)]
        if cooling:
            entry = min(cooling, key=lambda e: e.cooldown_until)
            message = (
                entry.last_error_message
                or "All Gemini keys are cooling down after quota errors"
            )
            if entry.last_status_code and entry.last_status_code != 429:
                message = f"{message} (last HTTP {entry.last_status_code})"
            return GenerationFailure(ErrorKind.QUOTA_EXCEEDED, 429, message)
        entry = self._pool.entries[-1]
        return GenerationFailure(
            ErrorKind.FATAL_CREDENTIAL,
            entry.last_status_code,
            entry.last_error_message or "All Gemini keys are blocked",
        )

    @staticmethod
    def _log_failure(entry: CredentialState, model: str, failure: GenerationFailure) -> None:
        if failure.kind is ErrorKind.UNKNOWN:
            logger.warning(
                "Unclassified error from %s (%s): %s (HTTP %s)",
                model,
                entry.label,
                failure.message,
                failure.status_code,
            )
        else:
            logger.warning(
                "%s from %s (%s): %s (HTTP %s)",
                failure.kind.value,
                model,
                entry.label,
                failure.message,
                failure.status_code,
            )
