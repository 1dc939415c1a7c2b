import json

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_gateway, get_profile_store
from api.router import limiter
from fakes import ProviderError
from main import app
from services import pdf_parser
from services.profile_store import InMemoryProfileStore

RESUME = "Built REST API in Node, improved latency by 30%, led team of 4"
JD = "Node, REST API, leadership"


@pytest.fixture
def client():
    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def use_gateway(make_gateway):
    """Route handlers get a scripted gateway instead of the real one."""

    def _use(**kwargs):
        gateway, pool, provider = make_gateway(**kwargs)
        app.dependency_overrides[get_gateway] = lambda: gateway
        return gateway, pool, provider

    return _use


def test_health(client, use_gateway):
    use_gateway()
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "gemini_configured": True}


def test_health_without_keys(client, use_gateway):
    use_gateway(keys=())
    assert client.get("/health").json()["gemini_configured"] is False


def test_ping_never_exposes_keys(client, use_gateway):
    use_gateway(
        keys=("AIza-secret-1", "AIza-secret-2"),
        script={("AIza-secret-1", "model-fast"): [ProviderError("quota", status_code=429)]},
    )
    response = client.get("/ping")
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["key_count"] == 2
    assert len(data["keys"]) == 2
    assert "AIza-secret" not in response.text


class TestAtsAnalyzer:
    def test_ok(self, client, use_gateway):
        sections = {
            "strengths": ["APIs"],
            "weaknesses": ["Leadership"],
            "plan_30": ["a"],
            "plan_60": ["b"],
            "plan_90": ["c"],
        }
        use_gateway(script={"*": [json.dumps(sections)]})
        response = client.post(
            "/ats-analyzer", json={"resume_text": RESUME, "job_description": JD}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is False
        assert data["sections"]["strengths"] == ["APIs"]
        assert data["engine"]["category_scores"]["keyword_match"] == 75
        assert data["engine"]["critical_missing"] == ["leadership"]

    def test_degraded_still_200(self, client, use_gateway):
        use_gateway(script={"*": ["I cannot produce JSON today."]})
        response = client.post(
            "/ats-analyzer", json={"resume_text": RESUME, "job_description": JD}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is True
        assert data["sections"] is None
        assert data["warning"] == "AI returned no structured output. Returned deterministic engine only."
        assert data["engine"]["overall_score"] == 59

    def test_unconfigured_still_200(self, client, use_gateway):
        use_gateway(keys=())
        response = client.post(
            "/ats-analyzer", json={"resume_text": RESUME, "job_description": JD}
        )
        assert response.status_code == 200
        assert response.json()["warning"].startswith("No Gemini keys configured")

    @pytest.mark.parametrize(
        "body",
        [
            {"resume_text": RESUME, "job_description": "   "},
            {"resume_text": "", "job_description": JD},
            {"resume_text": RESUME},
        ],
    )
    def test_missing_inputs(self, client, use_gateway, body):
        _, _, provider = use_gateway()
        response = client.post("/ats-analyzer", json=body)
        assert response.status_code == 400
        assert provider.calls == []


class TestAtsUpload:
    def test_rejects_non_pdf(self, client, use_gateway):
        use_gateway()
        response = client.post(
            "/ats-analyzer/upload",
            files={"resume_file": ("resume.txt", b"not a pdf", "text/plain")},
            data={"job_description": JD},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only PDF files are accepted"

    def test_rejects_unparseable_pdf(self, client, use_gateway):
        use_gateway()
        response = client.post(
            "/ats-analyzer/upload",
            files={"resume_file": ("resume.pdf", b"garbage bytes", "application/pdf")},
            data={"job_description": JD},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Could not parse PDF file"

    def test_scores_extracted_text(self, client, use_gateway, monkeypatch):
        monkeypatch.setattr(pdf_parser, "extract_text", lambda content: RESUME)
        use_gateway(keys=())
        response = client.post(
            "/ats-analyzer/upload",
            files={"resume_file": ("resume.pdf", b"%PDF-1.4", "application/pdf")},
            data={"job_description": JD},
        )
        assert response.status_code == 200
        assert response.json()["engine"]["breakdown"]["hard_skill_score"] == 100

    def test_empty_extraction(self, client, use_gateway, monkeypatch):
        monkeypatch.setattr(pdf_parser, "extract_text", lambda content: "  ")
        use_gateway()
        response = client.post(
            "/ats-analyzer/upload",
            files={"resume_file": ("resume.pdf", b"%PDF-1.4", "application/pdf")},
            data={"job_description": JD},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "No text could be extracted from PDF"


class TestJobSuggestions:
    def test_ok(self, client, use_gateway):
        payload = {"jobs": [{"title": "Backend Intern", "level": "Intern", "summary": "APIs"}]}
        use_gateway(script={"*": [json.dumps(payload)]})
        response = client.post(
            "/job-suggestions", json={"current_profile": "CSE student", "interests": "backend"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["jobs"][0]["title"] == "Backend Intern"

    def test_uid_header_reads_profile(self, client, use_gateway):
        _, _, provider = use_gateway(script={"*": ['{"jobs": []}']})
        store = InMemoryProfileStore({"uid-7": {"name": "Ravi", "branch": "IT", "year": 2}})
        app.dependency_overrides[get_profile_store] = lambda: store
        response = client.post(
            "/job-suggestions",
            json={"interests": "cloud"},
            headers={"X-User-Id": "uid-7"},
        )
        assert response.status_code == 200
        assert "name: Ravi" in provider.prompts[0]

    def test_requires_profile_or_interests(self, client, use_gateway):
        use_gateway()
        response = client.post("/job-suggestions", json={"current_profile": " ", "interests": ""})
        assert response.status_code == 400

    def test_non_json_is_502(self, client, use_gateway):
        use_gateway(script={"*": ["{not json}"]})
        response = client.post("/job-suggestions", json={"interests": "backend"})
        assert response.status_code == 502
        assert response.json()["detail"] == "AI returned non-JSON output unexpectedly"

    def test_unconfigured_is_503(self, client, use_gateway):
        use_gateway(keys=())
        response = client.post("/job-suggestions", json={"interests": "backend"})
        assert response.status_code == 503
        assert response.json()["detail"] == "No Gemini keys configured"


class TestResumeBuilder:
    def test_ai_build(self, client, use_gateway):
        resume = {"name": "Asha", "summary": "Student"}
        use_gateway(script={"*": [json.dumps({"ok": True, "resume": resume})]})
        response = client.post("/resume-builder/ai-build", json={"resume": resume})
        assert response.status_code == 200
        assert response.json() == {"ok": True, "resume": resume}

    def test_ai_build_missing_resume(self, client, use_gateway):
        use_gateway()
        assert client.post("/resume-builder/ai-build", json={"resume": {}}).status_code == 400

    def test_tailor_requires_jd(self, client, use_gateway):
        use_gateway()
        response = client.post(
            "/resume-builder/tailor", json={"resume": {"name": "Asha"}, "job_description": ""}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing job_description"

    def test_rewrite_bullets(self, client, use_gateway):
        use_gateway(script={"*": ['{"ok": true, "bullets": ["Built X", "Led Y"]}']})
        response = client.post(
            "/resume-builder/rewrite-bullets",
            json={"section": "experience", "item": {"role": "Intern"}},
        )
        assert response.status_code == 200
        assert response.json()["bullets"] == ["Built X", "Led Y"]

    def test_rewrite_bullets_bad_envelope(self, client, use_gateway):
        use_gateway(script={"*": ['{"ok": false, "bullets": []}']})
        response = client.post(
            "/resume-builder/rewrite-bullets",
            json={"section": "experience", "item": {"role": "Intern"}},
        )
        assert response.status_code == 502
        assert response.json()["detail"] == "Bad AI JSON response"


class TestChat:
    def test_reply(self, client, use_gateway):
        use_gateway(script={"*": ["Summary:\nUse two pointers."]})
        response = client.post("/ai/chat", json={"message": "3sum?"})
        assert response.status_code == 200
        assert response.json() == {"reply": "Summary:\nUse two pointers."}

    def test_empty_message(self, client, use_gateway):
        use_gateway()
        assert client.post("/ai/chat", json={"message": "  "}).status_code == 400

    def test_unconfigured(self, client, use_gateway):
        use_gateway(keys=())
        response = client.post("/ai/chat", json={"message": "hi"})
        assert response.status_code == 503
        assert response.json()["detail"] == "CS.ai not configured (missing Gemini API key)."
