"""
FastAPI application entry point for the Career Canvas API.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from career_canvas.ai_routes import router as ai_router
from career_canvas.config import get_settings
from career_canvas.interview_routes import router as interview_router
from career_canvas.profile_routes import router as profile_router
from career_canvas.routes import router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Career Canvas API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.time() - start_time) * 1000,
        )
        return response

    @app.get("/health")
    def health():
        return {"status": "ok", "message": "Career Canvas API is running"}

    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(profile_router, prefix=settings.api_prefix)
    app.include_router(interview_router, prefix=settings.api_prefix)
    app.include_router(ai_router, prefix=settings.api_prefix)
    return app


app = create_app()
