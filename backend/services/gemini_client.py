"""Google Gemini provider used by the generation gateway."""

import logging
from typing import Protocol

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class TextProvider(Protocol):
    """One generation call against one model with one key.

    Implementations return the generated text (possibly empty) or raise;
    the gateway classifies whatever they raise.
    """

    async def generate_text(
        self, api_key: str, model: str, prompt: str, *, json_mode: bool = False
    ) -> str: ...


class GeminiProvider:
    def __init__(
        self,
        temperature: float = 0.35,
        top_p: float = 0.9,
        max_output_tokens: int = 8192,
    ):
        self._temperature = temperature
        self._top_p = top_p
        self._max_output_tokens = max_output_tokens
        self._clients: dict[str, genai.Client] = {}

    def _client_for(self, api_key: str) -> genai.Client:
        client = self._clients.get(api_key)
        if client is None:
            client = genai.Client(api_key=api_key)
            self._clients[api_key] = client
        return client

    async def generate_text(
        self, api_key: str, model: str, prompt: str, *, json_mode: bool = False
    ) -> str:
        client = self._client_for(api_key)
        response = await client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=self._temperature,
                top_p=self._top_p,
                max_output_tokens=self._max_output_tokens,
                response_mime_type="application/json" if json_mode else "text/plain",
            ),
        )
        return response.text or ""
