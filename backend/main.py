import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from api.router import limiter, router
from config import settings
from services.credential_pool import CredentialPool
from services.gemini_client import GeminiProvider
from services.generation_gateway import GenerationGateway
from services.profile_store import InMemoryProfileStore

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_gateway() -> GenerationGateway:
    pool = CredentialPool(
        settings.credential_list(),
        cooldown_seconds=settings.quota_cooldown_seconds,
    )
    if not len(pool):
        logger.warning("No GEMINI_KEYS / GEMINI_API_KEY set - AI features disabled")
    provider = GeminiProvider(
        temperature=settings.generation_temperature,
        top_p=settings.generation_top_p,
        max_output_tokens=settings.generation_max_output_tokens,
    )
    return GenerationGateway(
        pool,
        provider,
        settings.structured_models(),
        base_delay=settings.overload_base_delay,
        overload_retries=settings.overload_retries,
    )


app = FastAPI(
    title="CodeSync Career API",
    description="ATS analysis, job suggestions and resume AI helpers for students",
    version="1.0.0",
)

app.state.gateway = build_gateway()
app.state.profile_store = InMemoryProfileStore()
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
