import json

import pytest

from fakes import ProviderError
from services.job_suggester import normalize_job_suggestions, suggest_jobs
from services.profile_store import InMemoryProfileStore
from services.structured_generation import AIRequestError


def _job(title, level="Intern", summary="Build APIs.", **extra):
    return {"title": title, "level": level, "summary": summary, **extra}


class TestNormalize:
    def test_trims_and_drops_incomplete(self):
        jobs = normalize_job_suggestions(
            [
                _job("  Backend Intern  ", ideal_companies=[" Razorpay ", "", None]),
                _job("", level="Entry"),
                _job("Data Analyst", summary="   "),
                "not a dict",
            ]
        )
        assert [j.title for j in jobs] == ["Backend Intern"]
        assert jobs[0].ideal_companies == ["Razorpay"]
        assert jobs[0].key_skills == []

    def test_caps_lists(self):
        titles = [
            "Backend Developer", "Data Analyst", "Cloud Architect", "Security Researcher",
            "Android Engineer", "QA Tester", "Product Designer", "Site Reliability Engineer",
            "Machine Learning Intern", "Technical Writer", "Database Administrator",
            "Game Programmer", "Network Specialist",
        ]
        raw = [
            _job(
                title,
                ideal_companies=[f"Co{n}" for n in range(12)],
                key_skills=[f"skill{n}" for n in range(25)],
            )
            for title in titles
        ]
        jobs = normalize_job_suggestions(raw)
        assert [j.title for j in jobs] == titles[:10]
        assert all(len(j.ideal_companies) == 8 for j in jobs)
        assert all(len(j.key_skills) == 18 for j in jobs)

    def test_near_duplicate_titles_dropped(self):
        jobs = normalize_job_suggestions(
            [
                _job("Backend Developer Intern"),
                _job("Intern Backend Developer"),
                _job("backend developer intern"),
                _job("Frontend Developer Intern"),
            ]
        )
        assert [j.title for j in jobs] == ["Backend Developer Intern", "Frontend Developer Intern"]

    def test_non_list_fields_ignored(self):
        jobs = normalize_job_suggestions([_job("SRE Intern", key_skills="linux, docker")])
        assert jobs[0].key_skills == []


class TestSuggestJobs:
    @pytest.mark.asyncio
    async def test_returns_normalized_jobs(self, make_gateway):
        payload = {"jobs": [_job("Backend Intern", key_skills=["Node", "SQL"])]}
        gateway, _, _ = make_gateway(script={"*": [json.dumps(payload)]})
        jobs = await suggest_jobs(gateway, "2nd year CSE", "backend")
        assert jobs[0].title == "Backend Intern"
        assert jobs[0].key_skills == ["Node", "SQL"]

    @pytest.mark.asyncio
    async def test_student_profile_personalizes_prompt(self, make_gateway):
        store = InMemoryProfileStore(
            {"uid-1": {"fullname": "Asha Rao", "branch": "CSE", "year": "3"}}
        )
        gateway, _, provider = make_gateway(script={"*": ['{"jobs": []}']})
        await suggest_jobs(gateway, "", "ml", uid="uid-1", profile_store=store)
        prompt = provider.prompts[0]
        assert "STUDENT_META:" in prompt
        assert "name: Asha Rao" in prompt
        assert "branch: CSE" in prompt

    @pytest.mark.asyncio
    async def test_unknown_student_skips_context(self, make_gateway):
        gateway, _, provider = make_gateway(script={"*": ['{"jobs": []}']})
        await suggest_jobs(
            gateway, "profile", "", uid="missing", profile_store=InMemoryProfileStore()
        )
        assert "STUDENT_META:" not in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_non_json_raises_502(self, make_gateway):
        gateway, _, _ = make_gateway(script={"*": ["Here are some roles: {backend, frontend}"]})
        with pytest.raises(AIRequestError) as exc_info:
            await suggest_jobs(gateway, "profile", "")
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "AI returned non-JSON output unexpectedly"

    @pytest.mark.asyncio
    async def test_gateway_failure_raises_502(self, make_gateway):
        gateway, _, _ = make_gateway(
            keys=("key-a",),
            script={"*": [ProviderError("Internal error", status_code=500)]},
        )
        with pytest.raises(AIRequestError) as exc_info:
            await suggest_jobs(gateway, "profile", "")
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Gemini failed: Internal error (HTTP 500)"

    @pytest.mark.asyncio
    async def test_unconfigured_raises_503(self, make_gateway):
        gateway, _, _ = make_gateway(keys=())
        with pytest.raises(AIRequestError) as exc_info:
            await suggest_jobs(gateway, "profile", "")
        assert exc_info.value.status_code == 503
