"""All prompt templates for Gemini API calls."""

import json
from typing import Any

from models.responses import ScoreBreakdown

JSON_ONLY = "Return ONLY valid JSON. No markdown. No backticks. No extra text."


def build_ats_prompt(resume_text: str, job_description: str, breakdown: ScoreBreakdown) -> str:
    """ATS analyzer: qualitative sections on top of the deterministic engine.

    The engine's missing keywords steer the model toward the real gaps.
    """
    missing = ", ".join(breakdown.missing_keywords[:25])

    return f"""{JSON_ONLY}

Schema:
{{
  "strengths": ["string"],
  "weaknesses": ["string"],
  "plan_30": ["string"],
  "plan_60": ["string"],
  "plan_90": ["string"],
  "tailored_resume": "string",
  "changes_made": "string",
  "generated_resume": "string",
  "about": "string",
  "improve": "string",
  "percent": "string"
}}

Constraints:
- Do not invent companies/roles/projects/years.
- Use only resume facts; if unknown, use placeholders like [Project], [Metric], [Link].
- tailored_resume: ATS-friendly, single-column, clean headings, bullets.
- generated_resume: JD-based template with placeholders only (no fake companies).
- Ensure arrays have meaningful items.

Deterministic ATS score: {breakdown.composite_score}% (keywords {breakdown.keyword_score}, hard skills {breakdown.hard_skill_score}, soft skills {breakdown.soft_skill_score}, impact {breakdown.impact_score}, format {breakdown.format_score})
Missing keywords to focus: {missing}

Resume:
{resume_text}

JobDescription:
{job_description}""".strip()


def build_student_context(student: dict[str, Any] | None) -> str:
    """Short personalization block from the student's profile document."""
    if not student:
        return ""
    name = student.get("fullname") or student.get("name") or "(unknown)"
    branch = student.get("branch") or "(unknown)"
    year = student.get("year") or "(unknown)"
    return f"""STUDENT_META:
name: {name}
branch: {branch}
year: {year}"""


def build_job_suggestions_prompt(
    current_profile: str,
    interests: str,
    location_pref: str,
    student_context: str = "",
) -> str:
    return f"""{JSON_ONLY}

You are an expert career advisor for computer science students.
Your output MUST match this schema exactly:

{{
  "jobs": [
    {{
      "title": "string",
      "level": "string (Intern / Entry / New Grad / Junior / Mid)",
      "summary": "string (2-3 lines, specific and actionable)",
      "ideal_companies": ["string", "..."],
      "key_skills": ["string", "..."]
    }}
  ]
}}

Rules:
- Generate 5 to 7 roles.
- Titles must be realistic common roles on job portals.
- Avoid repeating near-identical roles.
- key_skills: 8 to 14 items each (mix of tech + concepts).
- ideal_companies: 3 to 6 companies (mix big + startups relevant).
- If the user sounds like a student, include internships/new-grad roles.
- Keep summaries crisp; no generic filler.

{student_context}

USER_CURRENT_PROFILE:
{current_profile or "(not provided)"}

USER_INTERESTS:
{interests or "(not provided)"}

LOCATION_PREFERENCE:
{location_pref or "(not provided)"}""".strip()


def build_resume_build_prompt(resume: dict[str, Any], template: str = "") -> str:
    return f"""Return ONLY JSON: {{"ok":true,"resume":{{...same schema as input...}}}}.
No markdown.

You are an expert tech resume writer.

Rules:
- ATS-safe, single-column, simple bullets.
- Do NOT invent companies/roles/years/metrics.
- Improve summary and bullet clarity with truthful phrasing.
- Preserve schema keys exactly (same keys as input).
- If data missing, keep empty or placeholder, don't hallucinate.

template: {template}

INPUT RESUME JSON:
{json.dumps(resume)}"""


def build_tailor_prompt(
    resume: dict[str, Any],
    job_description: str,
    template: str = "",
    target_role: str = "",
) -> str:
    return f"""Return ONLY JSON: {{"ok":true,"resume":{{...same schema as input...}}}}.
No markdown.

You are a resume tailoring expert.

Goals:
- Align summary/skills/bullets to JD keywords naturally.
- Do NOT lie: no fake companies/awards/metrics.
- Reorder strongest content first.
- Preserve schema keys exactly.

template: {template}
targetRole: {target_role}

JOB DESCRIPTION:
{job_description}

RESUME JSON:
{json.dumps(resume)}"""


def build_rewrite_bullets_prompt(
    section: str,
    item: dict[str, Any],
    target_role: str = "",
    job_description: str = "",
) -> str:
    return f"""Return ONLY JSON: {{"ok":true,"bullets":[...]}}.
No markdown.

Rewrite bullets for section="{section}".

Rules:
- 3 to 6 bullets.
- ATS-friendly, strong action verbs, concise.
- Do NOT invent achievements/companies/metrics.
- If impact isn't provided, keep safe phrasing.
- Align to targetRole/JD if provided.

targetRole: {target_role}

JOB DESCRIPTION (optional):
{job_description}

ITEM JSON:
{json.dumps(item)}"""


def build_chat_prompt(message: str, audio_meta: dict[str, Any] | None = None) -> str:
    """CS.ai assistant: plain-text answers, fenced code only."""
    return f"""You are CS.ai, an AI assistant inside CodeSync (a competitive programming and career dashboard).

STYLE (TEXT PART):
- Answer in simple, very clean English.
- Use plain text only.
- Do NOT use markdown symbols in the explanation: no *, -, •, #, ##, **, __ or similar.
- Structure your answer using short labels like:
  Summary:
  Idea:
  Steps:
  Example:
  Edge cases:
- For lists, use numbered lines:
  1. ...
  2. ...
  3. ...

FOCUS:
- Explain patterns and thinking, not full contest solutions.
- Debug code by explaining root cause and fix.
- Teach DSA and CS concepts like a good senior student.

CODE FORMAT (IMPORTANT):
- When code is requested, ALWAYS use fenced code blocks:
  ```language
  // code here
  ```
- Use correct language tags (ts, tsx, js, py, java, etc).
- Do NOT put explanations inside code blocks.
- Code must be clean and copy-paste ready.

User message:
{message}

Audio metadata (if any):
{json.dumps(audio_meta) if audio_meta else "none"}"""
