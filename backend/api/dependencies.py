"""Shared dependencies for API routes."""

from fastapi import Request

from config import settings
from services.generation_gateway import GenerationGateway
from services.profile_store import ProfileStore


def get_gateway(request: Request) -> GenerationGateway:
    return request.app.state.gateway


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profile_store


def get_current_uid(request: Request) -> str | None:
    """User id forwarded by the authenticating proxy, if any."""
    uid = request.headers.get(settings.user_id_header, "").strip()
    return uid or None
