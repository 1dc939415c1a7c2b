"""Pull a JSON payload out of raw model text and validate it.

Models wrap JSON in prose or markdown fences despite being told not to,
so extraction is two-step: find a candidate span, then parse it strictly.
Callers get one of four results and must handle each:

- ``NoCandidateFound``: nothing that looks like JSON at all
- ``ParseFailure``: a candidate was found but is not valid JSON
- ``SchemaMismatch``: valid JSON missing required fields
- ``ParsedOk``: a validated schema instance
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

_JSON_FENCE_RE = re.compile(r"```json[ \t]*\r?\n([\s\S]*?)```", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedOk(Generic[T]):
    value: T


@dataclass(frozen=True)
class NoCandidateFound:
    pass


@dataclass(frozen=True)
class ParseFailure:
    candidate: str


@dataclass(frozen=True)
class SchemaMismatch:
    errors: list[str] = field(default_factory=list)


ExtractionResult = ParsedOk | NoCandidateFound | ParseFailure | SchemaMismatch


def extract_candidate(raw_text: str) -> str | None:
    """Return the ```json fenced block, else the first-{ to last-} span, else None."""
    if not raw_text:
        return None
    fenced = _JSON_FENCE_RE.search(raw_text)
    if fenced and fenced.group(1).strip():
        return fenced.group(1).strip()
    first = raw_text.find("{")
    last = raw_text.rfind("}")
    if first != -1 and last > first:
        return raw_text[first:last + 1].strip()
    return None


def parse_strict(candidate: str) -> Any | None:
    """json.loads that returns None instead of raising."""
    try:
        return json.loads(candidate)
    except (TypeError, ValueError):
        return None


def extract_structured(raw_text: str, schema: type[T]) -> ExtractionResult:
    candidate = extract_candidate(raw_text)
    if candidate is None:
        return NoCandidateFound()

    parsed = parse_strict(candidate)
    if parsed is None:
        return ParseFailure(candidate=candidate)

    try:
        return ParsedOk(value=schema.model_validate(parsed))
    except ValidationError as e:
        return SchemaMismatch(
            errors=[
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
        )
