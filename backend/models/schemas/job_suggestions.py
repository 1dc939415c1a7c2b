"""Expected AI output for job suggestions."""

from typing import Any

from pydantic import BaseModel


class JobSuggestionsPayload(BaseModel):
    # Entries are cleaned individually by job_suggester.normalize_job_suggestions
    jobs: list[dict[str, Any]]
