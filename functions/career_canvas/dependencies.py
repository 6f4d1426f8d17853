"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException
from openai import OpenAI

from career_canvas.config import get_settings
from career_canvas.db import DbClient, InMemoryDbClient, SqlDbClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_completion_client: OpenAI | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so documents persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory document store")
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_completion_client() -> OpenAI:
    global _completion_client
    if _completion_client:
        return _completion_client

    settings = get_settings()
    if not settings.openai_api_key:
        raise HTTPException(status_code=503, detail="OpenAI API key not configured")
    _completion_client = OpenAI(api_key=settings.openai_api_key)
    return _completion_client


def get_optional_completion_client() -> OpenAI | None:
    """Like get_completion_client, but None when no API key is configured."""
    if not get_settings().openai_api_key:
        return None
    return get_completion_client()
