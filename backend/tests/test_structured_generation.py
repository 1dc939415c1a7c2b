import pytest

from fakes import ProviderError
from models.schemas import BulletsEnvelope
from services.structured_generation import (
    NON_JSON_MESSAGE,
    AIRequestError,
    generate_structured,
)


class TestGenerateStructured:
    @pytest.mark.asyncio
    async def test_success(self, make_gateway):
        gateway, _, provider = make_gateway(
            script={"*": ['```json\n{"ok": true, "bullets": ["Built X"]}\n```']}
        )
        result = await generate_structured(gateway, "prompt", BulletsEnvelope)
        assert result.ok
        assert result.value.bullets == ["Built X"]
        assert result.warning is None
        assert result.last_status == 200
        assert result.last_error is None
        assert result.model == "model-fast"
        assert provider.json_modes == [True]

    @pytest.mark.asyncio
    async def test_unconfigured(self, make_gateway):
        gateway, _, _ = make_gateway(keys=())
        result = await generate_structured(gateway, "prompt", BulletsEnvelope)
        assert not result.ok
        assert result.warning == "No Gemini keys configured. Returned deterministic engine only."
        with pytest.raises(AIRequestError) as exc_info:
            result.require()
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_provider_failure(self, make_gateway):
        gateway, _, _ = make_gateway(
            keys=("key-a",),
            script={"*": [ProviderError("You exceeded your current quota", status_code=429)]},
        )
        result = await generate_structured(gateway, "prompt", BulletsEnvelope)
        assert result.warning == "AI partial mode: You exceeded your current quota (HTTP 429)"
        assert result.last_status == 429
        assert result.reason == "Gemini failed: You exceeded your current quota (HTTP 429)"
        with pytest.raises(AIRequestError) as exc_info:
            result.require()
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == result.reason

    @pytest.mark.asyncio
    async def test_non_json_output(self, make_gateway):
        gateway, _, _ = make_gateway(script={"*": ["```json\n{ok: yes}\n```"]})
        result = await generate_structured(gateway, "prompt", BulletsEnvelope)
        assert not result.ok
        assert result.reason == NON_JSON_MESSAGE
        assert result.warning == f"{NON_JSON_MESSAGE}. Returned deterministic engine only."
        assert result.last_status == 200
        assert result.last_error == NON_JSON_MESSAGE

    @pytest.mark.asyncio
    async def test_reasons_are_distinct(self, make_gateway):
        reasons = set()
        for text in ("plain prose", "{broken", '{"ok": true}', "{oops}"):
            gateway, _, _ = make_gateway(script={"*": [text]})
            result = await generate_structured(gateway, "prompt", BulletsEnvelope)
            reasons.add(result.reason)
        # "{broken" has no closing brace, so it has no candidate either
        assert reasons == {
            "AI returned no structured output",
            "Bad AI JSON response",
            NON_JSON_MESSAGE,
        }
