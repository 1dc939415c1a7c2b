"""Expected AI output for the ATS analyzer."""

from pydantic import BaseModel


class AtsSections(BaseModel):
    """Qualitative sections layered on top of the deterministic engine.

    The list fields are required: a payload without them is rejected
    rather than shown half-empty. Free-text fields may be omitted.
    """

    strengths: list[str]
    weaknesses: list[str]
    plan_30: list[str]
    plan_60: list[str]
    plan_90: list[str]

    tailored_resume: str = ""
    changes_made: str = ""
    generated_resume: str = ""

    about: str = ""
    improve: str = ""
    percent: str = ""
