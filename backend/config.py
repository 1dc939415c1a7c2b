import json
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

DEFAULT_CHAT_MODELS = (
    "gemini-2.5-flash,"
    "gemini-2.0-flash-lite,"
    "gemini-2.0-flash-exp,"
    "gemini-flash-lite-latest,"
    "gemini-pro-latest"
)


def split_csv(raw: str) -> list[str]:
    """Split a comma-separated setting, dropping blanks and repeats (order kept)."""
    seen: list[str] = []
    for part in raw.split(","):
        item = part.strip()
        if item and item not in seen:
            seen.append(item)
    return seen


class Settings(BaseSettings):
    # Gemini credentials: GEMINI_KEYS=key1,key2,key3 (preferred) or a single GEMINI_API_KEY
    gemini_keys: str = ""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_fallback_models: str = "gemini-2.0-flash-lite,gemini-flash-lite-latest"
    chat_models: str = DEFAULT_CHAT_MODELS

    generation_temperature: float = 0.35
    generation_top_p: float = 0.9
    generation_max_output_tokens: int = 8192

    # Failover policy
    quota_cooldown_seconds: float = 15 * 60
    overload_base_delay: float = 0.45
    overload_retries: int = 3

    # Per-route limits (slowapi syntax)
    ats_rate_limit: str = "8/minute"
    ai_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True

    max_upload_size_mb: int = 5
    max_resume_chars: int = 140_000
    max_job_description_chars: int = 80_000
    max_prompt_resume_chars: int = 110_000
    max_prompt_job_description_chars: int = 60_000

    # Header set by the authenticating proxy in front of this service
    user_id_header: str = "X-User-Id"

    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, raw):
        """Accept CORS_ORIGINS as a comma-separated string or a JSON list."""
        if not isinstance(raw, str):
            return raw
        if raw.startswith("["):
            return json.loads(raw)
        return split_csv(raw)

    def credential_list(self) -> list[str]:
        return split_csv(self.gemini_keys or self.gemini_api_key)

    def structured_models(self) -> list[str]:
        """Model priority for JSON tasks: the configured model first, then fallbacks."""
        return split_csv(",".join([self.gemini_model, self.gemini_fallback_models]))

    def chat_model_list(self) -> list[str]:
        return split_csv(self.chat_models)


settings = Settings()
